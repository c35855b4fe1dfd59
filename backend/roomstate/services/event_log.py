"""SQL Event Log — EventLog protocol over the events table.

Invariants:
    - append() only inserts; it flushes but never commits, so the caller's
      unit of work decides whether the event becomes durable
    - find_latest_state_event() returns the highest-ordering match
"""

import logging
from collections.abc import Collection

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roomstate.core.domain_types import EventId, EventType, RoomId, UserId
from roomstate.core.member_events import StateEvent
from roomstate.models.event import Event

logger = logging.getLogger(__name__)


def _to_state_event(row: Event) -> StateEvent:
    return StateEvent(
        event_id=EventId(row.event_id),
        room_id=RoomId(row.room_id),
        event_type=row.event_type,
        state_key=row.state_key,
        sender=UserId(row.sender),
        content=row.content,
        unsigned=row.unsigned,
        origin_server_ts=row.origin_server_ts,
    )


class SqlEventLog:
    """Event log stored in the same database as the projection."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def append(self, event: StateEvent) -> EventId:
        self.db.add(Event(
            event_id=event.event_id,
            room_id=event.room_id,
            event_type=event.type_value,
            state_key=event.state_key,
            sender=event.sender,
            content=event.content,
            unsigned=event.unsigned,
            origin_server_ts=event.origin_server_ts,
        ))
        await self.db.flush()
        logger.debug(
            f"Appended {event.type_value} event",
            extra={"event_id": event.event_id, "room_id": event.room_id},
        )
        return event.event_id

    async def find_latest_state_event(
        self, room_id: RoomId, event_type: EventType, state_key: str = "",
    ) -> StateEvent | None:
        result = await self.db.execute(
            select(Event)
            .where(Event.room_id == room_id)
            .where(Event.event_type == event_type.value)
            .where(Event.state_key == state_key)
            .order_by(Event.ordering.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_state_event(row) if row else None

    async def get_events(
        self, event_ids: Collection[EventId],
    ) -> dict[EventId, StateEvent]:
        if not event_ids:
            return {}
        result = await self.db.execute(
            select(Event).where(Event.event_id.in_(list(event_ids)))
        )
        return {
            EventId(row.event_id): _to_state_event(row)
            for row in result.scalars().all()
        }
