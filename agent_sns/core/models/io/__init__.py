"""
I/O models for API requests and responses.

These models are separate from database entities so API contracts can
evolve independently of the tables.

Modules:
- agents: Agent registration, lookup, keys and heartbeats
- auth: Nonce, SIWE, challenge and session payloads
- communities: Community payloads
- threads: Thread, comment and activity payloads
"""

from .agents import AgentRead, AgentResponse
from .auth import ChallengeRead, NonceResponse, SessionResponse
from .communities import CommunityRead, CommunitySummary
from .threads import CommentRead, ThreadRead

__all__ = [
    "AgentRead",
    "AgentResponse",
    "ChallengeRead",
    "CommentRead",
    "CommunityRead",
    "CommunitySummary",
    "NonceResponse",
    "SessionResponse",
    "ThreadRead",
]
