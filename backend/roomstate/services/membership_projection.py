"""Membership Projection — creates, authorizes and materializes room membership.

Invariants:
    - Sole writer of room_memberships rows and sole author of m.room.member events
    - Every mutation appends exactly one event and writes the row in the same
      unit of work: both become durable or neither does
    - create() is idempotent: an existing row for (room_id, user_id) is returned
      unchanged and nothing is written
    - An invite-only room rejects create() when user_id != sender, before any write
    - list_membership_events() never skips a row: a missing or mismatched event
      is a ConsistencyError

Design Decisions:
    - Duplicate rows are prevented by the (room_id, user_id) primary key; the
      losing writer of a concurrent create() rolls back its event and returns
      the winner's row, or raises the retryable ConcurrencyError
    - update_membership_state() carries the stored membership value over;
      value changes go through change_membership()
    - Pointer updates are UPDATE ... WHERE room_id, user_id, so rows loaded by
      another session are still handled
    - The caller's RoomMembership object is updated only after commit, so a
      failed unit of work leaves it pointing at the last durable event
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomstate.core.domain_types import (
    EventType, MembershipState, RoomId, UserId, EventId,
)
from roomstate.core.errors import (
    ConcurrencyError, ConsistencyError, ErrorContext,
    ResourceNotFoundError, UnauthorizedError,
)
from roomstate.core.identifiers import generate_event_id
from roomstate.core.member_events import (
    Profile, build_member_event, is_join_authorized, parse_membership,
)
from roomstate.core.repository_protocols import EventLog, ProfileLookup
from roomstate.infrastructure.database import atomic, storage_errors
from roomstate.models.room_membership import RoomMembership
from roomstate.schemas.events import (
    MemberEvent, join_rule_from_state_event, member_event_from_state_event,
)
from roomstate.schemas.membership import RoomMembershipOptions
from roomstate.services.event_log import SqlEventLog
from roomstate.services.profile_lookup import SqlProfileLookup

logger = logging.getLogger(__name__)


def _apply(room_membership: RoomMembership, values: dict) -> None:
    for key, value in values.items():
        setattr(room_membership, key, value)


class MembershipProjection:
    """Room membership rows projected from m.room.member events."""

    def __init__(
        self,
        db: AsyncSession,
        server_name: str,
        event_log: EventLog | None = None,
        profiles: ProfileLookup | None = None,
    ):
        self.db = db
        self.server_name = server_name
        self.event_log = event_log or SqlEventLog(db)
        self.profiles = profiles or SqlProfileLookup(db)

    # ─── Mutations ──────────────────────────────────────────────

    async def create(self, options: RoomMembershipOptions) -> RoomMembership:
        """Create the membership described by options, or return the existing one."""
        room_id, user_id = RoomId(options.room_id), UserId(options.user_id)
        sender = UserId(options.sender)
        ctx = ErrorContext(room_id=room_id, user_id=user_id)
        log_extra = {"room_id": room_id, "user_id": user_id}

        try:
            async with atomic(self.db, "create_membership"):
                existing = await self._get(room_id, user_id)
                if existing is not None:
                    return existing

                join_rules = await self.event_log.find_latest_state_event(
                    room_id, EventType.ROOM_JOIN_RULES,
                )
                if join_rules is None:
                    raise ResourceNotFoundError("Join rules of room", room_id, ctx)
                join_rule = join_rule_from_state_event(join_rules)
                if not is_join_authorized(join_rule, user_id, sender):
                    logger.warning(
                        f"Membership rejected by join rule '{join_rule.value}'",
                        extra=log_extra,
                    )
                    raise UnauthorizedError("You are not invited to this room.", ctx)

                event_id = generate_event_id(self.server_name)
                profile = await self.profiles.find_by_user(user_id)
                await self.event_log.append(build_member_event(
                    event_id, room_id, user_id, sender, options.membership, profile,
                ))
                membership = RoomMembership(
                    event_id=event_id,
                    room_id=room_id,
                    user_id=user_id,
                    sender=sender,
                    membership=options.membership.value,
                )
                self.db.add(membership)
                await self.db.flush()
        except IntegrityError as e:
            # A concurrent create() for the same pair committed first
            existing = await self.find(room_id, user_id)
            if existing is None:
                raise ConcurrencyError(
                    f"Membership of {user_id} in {room_id} was modified concurrently",
                    ctx,
                ) from e
            logger.info("Concurrent create resolved to existing membership", extra=log_extra)
            return existing

        logger.info(
            f"Membership '{options.membership.value}' created",
            extra={**log_extra, "event_id": event_id},
        )
        return membership

    async def update_membership_state(
        self, room_membership: RoomMembership, profile: Profile,
    ) -> None:
        """Re-emit the member event of room_membership with fresh profile data.

        The stored membership value is carried over unchanged; only the row's
        event pointer moves.
        """
        room_id = RoomId(room_membership.room_id)
        user_id = UserId(room_membership.user_id)
        membership = parse_membership(
            room_membership.membership, ErrorContext(room_id=room_id, user_id=user_id),
        )
        async with atomic(self.db, "update_membership_state"):
            values = await self._record_event(
                room_membership, membership, user_id, profile,
                update_state=False,
            )
        _apply(room_membership, values)

    async def change_membership(
        self,
        room_membership: RoomMembership,
        membership: MembershipState,
        sender: UserId,
    ) -> None:
        """Move room_membership to a new membership value (join -> leave, ...).

        Authorization of the transition is the caller's responsibility.
        """
        user_id = UserId(room_membership.user_id)
        async with atomic(self.db, "change_membership"):
            profile = await self.profiles.find_by_user(user_id)
            values = await self._record_event(
                room_membership, membership, sender, profile,
                update_state=True,
            )
        _apply(room_membership, values)

    async def _record_event(
        self,
        room_membership: RoomMembership,
        membership: MembershipState,
        sender: UserId,
        profile: Profile | None,
        update_state: bool,
    ) -> dict:
        """Append the next member event and repoint the stored row at it.

        Returns the column values written; the caller applies them to its
        row once the unit of work has committed.
        """
        room_id = RoomId(room_membership.room_id)
        user_id = UserId(room_membership.user_id)
        current_event_id = EventId(room_membership.event_id)
        ctx = ErrorContext(room_id=room_id, user_id=user_id, event_id=current_event_id)

        previous = (await self.event_log.get_events([current_event_id])).get(current_event_id)
        if previous is None:
            raise ConsistencyError(
                f"Membership of {user_id} in {room_id} references missing event "
                f"{current_event_id}",
                ctx,
            )

        event_id = generate_event_id(self.server_name)
        await self.event_log.append(build_member_event(
            event_id, room_id, user_id, sender, membership, profile,
            prev_content=previous.content,
        ))

        values: dict = {"event_id": event_id}
        if update_state:
            values.update(membership=membership.value, sender=sender)
        result = await self.db.execute(
            update(RoomMembership)
            .where(RoomMembership.room_id == room_id)
            .where(RoomMembership.user_id == user_id)
            .values(**values)
        )
        if result.rowcount == 0:
            raise ResourceNotFoundError("Membership", f"{room_id} {user_id}", ctx)

        logger.info(
            f"Membership event recorded ('{membership.value}')",
            extra={"room_id": room_id, "user_id": user_id, "event_id": event_id},
        )
        return values

    # ─── Queries ────────────────────────────────────────────────

    async def find(self, room_id: RoomId, user_id: UserId) -> RoomMembership | None:
        """Return the membership of user_id in room_id, if any."""
        async with storage_errors(self.db, "find_membership"):
            return await self._get(room_id, user_id)

    async def find_by_user(self, user_id: UserId) -> list[RoomMembership]:
        """Return every membership row of user_id, ordered by room."""
        async with storage_errors(self.db, "find_memberships_by_user"):
            result = await self.db.execute(
                select(RoomMembership)
                .where(RoomMembership.user_id == user_id)
                .order_by(RoomMembership.room_id)
            )
            return list(result.scalars().all())

    async def list_membership_events(self, room_id: RoomId) -> list[MemberEvent]:
        """Return the current m.room.member event of every member of room_id."""
        async with storage_errors(self.db, "list_membership_events"):
            result = await self.db.execute(
                select(RoomMembership)
                .where(RoomMembership.room_id == room_id)
                .order_by(RoomMembership.user_id)
            )
            rows = list(result.scalars().all())
            events = await self.event_log.get_events([row.event_id for row in rows])

        missing = [row.event_id for row in rows if row.event_id not in events]
        if missing:
            logger.error(
                f"{len(missing)} membership row(s) reference missing events",
                extra={"room_id": room_id},
            )
            raise ConsistencyError(
                f"Membership rows of {room_id} reference missing events: "
                f"{', '.join(missing)}",
                ErrorContext(room_id=room_id, event_id=missing[0]),
            )

        member_events = []
        for row in rows:
            event = events[EventId(row.event_id)]
            ctx = ErrorContext(room_id=room_id, user_id=row.user_id, event_id=row.event_id)
            if event.type_value != EventType.ROOM_MEMBER.value:
                raise ConsistencyError(
                    f"Event {row.event_id} is '{event.type_value}', not a member event",
                    ctx,
                )
            member_event = member_event_from_state_event(event)
            if (
                member_event.state_key != row.user_id
                or member_event.content.membership.value != row.membership
            ):
                raise ConsistencyError(
                    f"Event {row.event_id} disagrees with the membership row of {row.user_id}",
                    ctx,
                )
            member_events.append(member_event)
        return member_events

    async def _get(self, room_id: RoomId, user_id: UserId) -> RoomMembership | None:
        result = await self.db.execute(
            select(RoomMembership)
            .where(RoomMembership.room_id == room_id)
            .where(RoomMembership.user_id == user_id)
        )
        return result.scalar_one_or_none()
