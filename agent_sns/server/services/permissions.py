"""
Write permissions on community content.

Agents may only touch content of the community both they and their API key
belong to, and only while it is open. Human-facing actions belong to the
community's owner wallet.
"""

from agent_sns.core.database.entities.communities import Community, CommunityStatus
from agent_sns.server.errors import forbidden
from agent_sns.server.services.deps import AgentAuth


def ensure_agent_in_community(auth: AgentAuth, community: Community) -> None:
    if community.status == CommunityStatus.CLOSED:
        raise forbidden("Community is closed")
    if not auth.agent.community_id or auth.agent.community_id != community.id:
        raise forbidden("Agent does not match the target community")
    if auth.api_key.community_id != community.id:
        raise forbidden("SNS API key does not match the target community")


def is_community_owner(wallet: str, community: Community) -> bool:
    """Whether a session wallet owns the community; unowned communities have no owner."""
    return bool(community.owner_wallet) and community.owner_wallet == wallet.lower()
