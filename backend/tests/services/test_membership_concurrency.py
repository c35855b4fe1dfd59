"""Membership Concurrency — racing create() calls on separate connections.

Invariants:
    - N concurrent create() calls for one (room_id, user_id) leave exactly one
      row and one member event
    - Every caller gets that row or a retryable ConcurrencyError
    - Calls for different users in the same room all succeed
"""

import asyncio

from roomstate.core.errors import ConcurrencyError
from roomstate.schemas.membership import RoomMembershipOptions
from roomstate.services.membership_projection import MembershipProjection

from tests.services.room_fixtures import (
    ALICE, ROOM_ID, SERVER_NAME,
    add_join_rules, count_member_events, count_memberships,
)

RACERS = 8


async def _create(session_factory, user_id: str):
    options = RoomMembershipOptions(
        room_id=ROOM_ID, user_id=user_id, sender=user_id, membership="join",
    )
    async with session_factory() as db:
        try:
            row = await MembershipProjection(db, SERVER_NAME).create(options)
        except ConcurrencyError as e:
            return e
        return row.event_id


async def test_concurrent_creates_for_same_pair(file_session_factory):
    async with file_session_factory() as db:
        await add_join_rules(db, ROOM_ID, "public")

    results = await asyncio.gather(
        *(_create(file_session_factory, ALICE) for _ in range(RACERS)),
    )

    event_ids = {r for r in results if isinstance(r, str)}
    assert len(event_ids) == 1
    assert all(isinstance(r, (str, ConcurrencyError)) for r in results)

    async with file_session_factory() as db:
        assert await count_memberships(db, ROOM_ID) == 1
        assert await count_member_events(db, ROOM_ID) == 1
        row = await MembershipProjection(db, SERVER_NAME).find(ROOM_ID, ALICE)
        assert row.event_id in event_ids


async def test_concurrent_creates_for_different_users(file_session_factory):
    async with file_session_factory() as db:
        await add_join_rules(db, ROOM_ID, "public")

    users = [f"@user{i}:{SERVER_NAME}" for i in range(RACERS)]
    results = await asyncio.gather(*(_create(file_session_factory, u) for u in users))

    assert all(isinstance(r, str) for r in results)
    assert len(set(results)) == RACERS

    async with file_session_factory() as db:
        assert await count_memberships(db, ROOM_ID) == RACERS
        assert await count_member_events(db, ROOM_ID) == RACERS
        events = await MembershipProjection(db, SERVER_NAME).list_membership_events(ROOM_ID)
        assert sorted(e.state_key for e in events) == sorted(users)
