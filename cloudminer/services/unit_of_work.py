"""
Ledger store and unit of work.

All engine operations run inside ``LedgerStore.begin()``: the store lock is
held for the whole read-modify-write cycle and the database transaction
commits on success or rolls back on any exception, so a multi-step
mutation (escrow then append, approve then commission, relink across two
accounts) is applied completely or not at all.
"""

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cloudminer.config.settings import settings
from cloudminer.models.account import Account
from cloudminer.repositories.account_repository import AccountRepository
from cloudminer.repositories.session_repository import SessionSlotRepository
from cloudminer.repositories.transaction_repository import TransactionRepository
from cloudminer.utils.datetime_utils import utc_now
from cloudminer.utils.exceptions import is_domain_error, must_log
from cloudminer.utils.validation import normalize_email


@dataclass(frozen=True)
class AdminIdentity:
    """The single distinguished administrator: an account id bound to an email."""

    account_id: str
    email: str

    @classmethod
    def from_settings(cls) -> "AdminIdentity":
        """Build the identity from application settings."""
        return cls(
            account_id=settings.admin_account_id,
            email=normalize_email(settings.admin_email),
        )

    def matches(self, account: Account | None) -> bool:
        """Both the id and the normalized email must match."""
        if account is None:
            return False
        return (
            account.id == self.account_id
            and normalize_email(account.email) == self.email
        )


class UnitOfWork:
    """Repositories sharing one database session."""

    def __init__(self, session: AsyncSession, admin: AdminIdentity) -> None:
        """
        Initialize unit of work.

        Args:
            session: Async database session
            admin: Administrator identity (its account is protected)
        """
        self.session = session
        self.accounts = AccountRepository(
            session, protected_ids=(admin.account_id,)
        )
        self.transactions = TransactionRepository(session)
        self.session_slots = SessionSlotRepository(session)


class LedgerStore:
    """
    Serialized access to the persisted ledger snapshot.

    Holds the session factory, the store lock, the administrator identity
    and the clock used for every timestamp the engine writes.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        admin: AdminIdentity | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """
        Initialize ledger store.

        Args:
            session_maker: Async session factory
            admin: Administrator identity (defaults to settings)
            clock: Source of the current time
        """
        self.session_maker = session_maker
        self.admin = admin or AdminIdentity.from_settings()
        self.clock = clock
        self._lock = asyncio.Lock()

    def now(self) -> datetime:
        """Current time according to the store clock."""
        return self.clock()

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[UnitOfWork]:
        """
        Open an atomic read-modify-write unit.

        Commits when the block exits normally, rolls back otherwise.
        """
        async with self._lock:
            async with self.session_maker() as session:
                uow = UnitOfWork(session, self.admin)
                try:
                    yield uow
                    await session.commit()
                except Exception as e:
                    await session.rollback()
                    if is_domain_error(e):
                        logger.warning(
                            "Ledger operation refused",
                            extra={"error_code": e.code, "error": str(e)},
                        )
                    elif must_log(e):
                        logger.error(
                            "Database failure, unit of work rolled back",
                            extra={"error": str(e)},
                            exc_info=True,
                        )
                    else:
                        logger.error(
                            "Ledger unit of work failed, rolled back",
                            extra={"error": str(e)},
                            exc_info=True,
                        )
                    raise

    @asynccontextmanager
    async def read(self) -> AsyncIterator[UnitOfWork]:
        """Open a read-only view of the committed snapshot."""
        async with self.session_maker() as session:
            yield UnitOfWork(session, self.admin)
