"""SQL Profile Lookup — ProfileLookup protocol over the profiles table."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from roomstate.core.domain_types import UserId
from roomstate.core.member_events import Profile
from roomstate.models.profile import UserProfile


class SqlProfileLookup:
    """Read-only profile access."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_user(self, user_id: UserId) -> Profile | None:
        result = await self.db.execute(
            select(UserProfile).where(UserProfile.user_id == user_id)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return Profile(displayname=row.displayname, avatar_url=row.avatar_url)
