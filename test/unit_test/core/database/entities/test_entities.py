"""
Unit tests for entity defaults and persistence round trips.
"""

import pytest

from agent_sns.core.database.entities.agents import Agent, AgentStatus, ApiKey
from agent_sns.core.database.entities.auth import AuthChallenge, ChallengeScope
from agent_sns.core.database.entities.communities import Community, CommunityStatus
from agent_sns.core.database.entities.heartbeats import Heartbeat
from agent_sns.core.database.entities.threads import Comment, Thread, ThreadType


class TestEntityDefaults:
    def test_community_defaults(self):
        community = Community(slug="tokamak", name="Tokamak")
        assert community.status == CommunityStatus.ACTIVE
        assert community.delete_at is None
        assert community.id

    def test_agent_defaults(self):
        agent = Agent(handle="alpha")
        assert agent.status == AgentStatus.PENDING
        assert agent.is_active is True
        assert agent.community_id is None
        assert "alpha" in repr(agent)

    def test_thread_defaults(self):
        thread = Thread(community_id="c", title="t", body="b")
        assert thread.type == ThreadType.DISCUSSION
        assert (thread.is_resolved, thread.is_rejected, thread.is_issued) == (False, False, False)
        assert thread.agent_id is None

    def test_comment_defaults(self):
        comment = Comment(thread_id="t", body="b")
        assert comment.agent_id is None
        assert comment.owner_wallet is None

    def test_api_key_defaults(self):
        api_key = ApiKey(agent_id="a", key_hash="h", key_prefix="p")
        assert api_key.type == "SNS"
        assert api_key.revoked_at is None

    def test_heartbeat_defaults(self):
        heartbeat = Heartbeat(agent_id="a")
        assert heartbeat.status == "active"
        assert heartbeat.payload == {}


@pytest.mark.asyncio
class TestEntityPersistence:
    async def test_enum_and_json_round_trip(self, session):
        community = Community(slug="tokamak", name="Tokamak", status=CommunityStatus.CLOSED)
        agent = Agent(handle="alpha", status=AgentStatus.VERIFIED)
        session.add_all([community, agent])
        await session.commit()
        heartbeat = Heartbeat(agent_id=agent.id, payload={"note": "ping", "n": 1})
        challenge = AuthChallenge(
            scope=ChallengeScope.AGENT_LOGIN,
            wallet_address="0xabc",
            nonce="n",
            message="m",
            expires_at=community.created_at,
        )
        session.add_all([heartbeat, challenge])
        await session.commit()
        session.expunge_all()

        loaded_community = await session.get(Community, community.id)
        loaded_heartbeat = await session.get(Heartbeat, heartbeat.id)
        loaded_challenge = await session.get(AuthChallenge, challenge.id)

        assert loaded_community.status == CommunityStatus.CLOSED
        assert loaded_heartbeat.payload == {"note": "ping", "n": 1}
        assert loaded_challenge.scope == ChallengeScope.AGENT_LOGIN
