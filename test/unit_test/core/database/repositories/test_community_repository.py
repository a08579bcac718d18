from datetime import timedelta

import pytest

from agent_sns.core.database.base import utc_now
from agent_sns.core.database.entities.communities import Community, CommunityStatus
from agent_sns.core.database.entities.threads import Comment, Thread
from agent_sns.core.database.repositories import AgentRepository, ApiKeyRepository, CommunityRepository
from agent_sns.core.database.repositories.communities import CLOSE_RETENTION

pytestmark = pytest.mark.asyncio


async def test_get_by_slug(session, make_community):
    community = await make_community(slug="tokamak")
    repo = CommunityRepository(session)

    assert (await repo.get_by_slug("tokamak")).id == community.id
    assert await repo.get_by_slug("missing") is None


async def test_list_ordered_by_name_and_status(session, make_community):
    await make_community(slug="b", name="Beta")
    await make_community(slug="a", name="Alpha", status=CommunityStatus.CLOSED)
    repo = CommunityRepository(session)

    assert [c.name for c in await repo.list_ordered()] == ["Alpha", "Beta"]
    assert [c.name for c in await repo.list_ordered(CommunityStatus.ACTIVE)] == ["Beta"]


async def test_get_many(session, make_community):
    first = await make_community(slug="first")
    second = await make_community(slug="second")
    repo = CommunityRepository(session)

    assert set(await repo.get_many([first.id, second.id, "missing"])) == {first.id, second.id}
    assert await repo.get_many([]) == {}


async def test_delete_with_content(session, make_agent):
    registered = await make_agent()
    thread = Thread(community_id=registered.community.id, agent_id=registered.agent.id, title="t", body="b")
    session.add(thread)
    await session.commit()
    comment = Comment(thread_id=thread.id, body="c")
    session.add(comment)
    await session.commit()

    await CommunityRepository(session).delete_with_content(registered.community)

    session.expunge_all()
    assert await session.get(Community, registered.community.id) is None
    assert await session.get(Thread, thread.id) is None
    assert await session.get(Comment, comment.id) is None
    agent = await AgentRepository(session).get_by_id(registered.agent.id)
    assert (agent.community_id, agent.community_slug) == (None, None)
    assert (await ApiKeyRepository(session).get_by_agent(agent.id)).revoked_at is not None


async def test_purge_expired_closed(session, make_community):
    now = utc_now()
    await make_community(slug="expired", status=CommunityStatus.CLOSED, delete_at=now - timedelta(minutes=1))
    await make_community(slug="closing", status=CommunityStatus.CLOSED, delete_at=now + timedelta(days=1))
    await make_community(slug="closed-forever", status=CommunityStatus.CLOSED)
    await make_community(slug="active", delete_at=now - timedelta(days=1))
    repo = CommunityRepository(session)

    assert await repo.purge_expired_closed(now) == 1
    assert await repo.get_by_slug("expired") is None
    assert await repo.count() == 3


async def test_list_owned(session, make_community):
    await make_community(slug="b", name="Beta", owner_wallet="0xowner")
    await make_community(slug="a", name="Alpha", owner_wallet="0xowner")
    await make_community(slug="c", name="Gamma", owner_wallet="0xother")
    repo = CommunityRepository(session)

    assert [c.slug for c in await repo.list_owned("0xOWNER")] == ["a", "b"]
    assert await repo.list_owned("0xnobody") == []


async def test_close_schedules_deletion_and_drops_keys(session, make_agent):
    registered = await make_agent()
    now = utc_now()

    closed = await CommunityRepository(session).close(registered.community, now)

    assert closed.status == CommunityStatus.CLOSED
    assert closed.closed_at == now
    assert closed.delete_at == now + CLOSE_RETENTION
    assert await ApiKeyRepository(session).get_by_agent(registered.agent.id) is None


async def test_closed_community_is_purged_after_retention(session, make_agent):
    registered = await make_agent()
    thread = Thread(community_id=registered.community.id, agent_id=registered.agent.id, title="t", body="b")
    session.add(thread)
    await session.commit()
    repo = CommunityRepository(session)
    closed_at = utc_now() - CLOSE_RETENTION - timedelta(minutes=1)

    await repo.close(registered.community, closed_at)

    assert await repo.purge_expired_closed(closed_at + CLOSE_RETENTION - timedelta(minutes=1)) == 0
    assert await repo.purge_expired_closed() == 1
    session.expunge_all()
    assert await session.get(Community, registered.community.id) is None
    assert await session.get(Thread, thread.id) is None
