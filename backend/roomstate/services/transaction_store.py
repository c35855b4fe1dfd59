"""Transaction Store — write-once cache of endpoint responses for retried requests.

Invariants:
    - At most one row per (path, access_token); create() never overwrites
    - A key collision is TransactionConflictError, any other failure DatabaseError
    - find() returns None for unknown keys, never raises for absence
    - response is stored and returned verbatim
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from roomstate.core.errors import ErrorContext, TransactionConflictError
from roomstate.infrastructure.database import atomic, database_error, storage_errors
from roomstate.models.transaction import Transaction

logger = logging.getLogger(__name__)


class TransactionStore:
    """Idempotency cache keyed by endpoint path and access token."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self, path: str, access_token: str, response: str,
    ) -> Transaction:
        """Cache response for (path, access_token)."""
        transaction = Transaction(
            path=path, access_token=access_token, response=response,
        )
        try:
            async with atomic(self.db, "create_transaction"):
                if await self._get(path, access_token) is not None:
                    raise TransactionConflictError(path)
                self.db.add(transaction)
                await self.db.flush()
        except IntegrityError as e:
            # Lost the insert race to a concurrent request with the same key
            if await self.find(path, access_token) is not None:
                raise TransactionConflictError(path) from e
            raise database_error(
                e, "create_transaction", ErrorContext(path=path),
            ) from e
        logger.info("Transaction cached", extra={"path": path})
        return transaction

    async def find(self, path: str, access_token: str) -> Transaction | None:
        """Look up the cached response for (path, access_token)."""
        async with storage_errors(self.db, "find_transaction"):
            return await self._get(path, access_token)

    async def _get(self, path: str, access_token: str) -> Transaction | None:
        result = await self.db.execute(
            select(Transaction)
            .where(Transaction.path == path)
            .where(Transaction.access_token == access_token)
        )
        return result.scalar_one_or_none()
