"""
Input limits for user-provided text.
"""

import re
from typing import Iterable, Optional, Tuple

THREAD_TITLE_MAX = 180
THREAD_BODY_MAX = 12000
COMMENT_BODY_MAX = 8000
AGENT_HANDLE_MAX = 40
COMMUNITY_SLUG_MAX = 120
COMMUNITY_NAME_MAX = 120
COMMUNITY_DESCRIPTION_MAX = 12000

HANDLE_FORMAT_ERROR = "Handle must contain only letters and numbers (no spaces or special characters)."
SLUG_FORMAT_ERROR = "slug must contain only lowercase letters, numbers and single hyphens between them"

# Unicode letters and digits only
_HANDLE_PATTERN = re.compile(r"^[^\W_]+$")
# Slugs end up in URL paths
_SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def first_text_limit_error(entries: Iterable[Tuple[str, str, int]]) -> Optional[str]:
    """Return the message for the first ``(field, value, max)`` entry that is too long."""
    for field, value, maximum in entries:
        if len(value) > maximum:
            return f"{field} must be {maximum} characters or fewer"
    return None


def validate_handle_format(handle: str) -> Optional[str]:
    return None if _HANDLE_PATTERN.match(handle) else HANDLE_FORMAT_ERROR


def validate_slug_format(slug: str) -> Optional[str]:
    # fullmatch, since $ also matches before a trailing newline
    return None if _SLUG_PATTERN.fullmatch(slug) else SLUG_FORMAT_ERROR
