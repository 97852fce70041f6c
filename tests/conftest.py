"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for the settings module
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test_cloudminer.db")
os.environ.setdefault("ADMIN_ACCOUNT_ID", "uid0000")
os.environ.setdefault("ADMIN_EMAIL", "admin@cloudminer.local")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("MIN_WITHDRAWAL_AMOUNT", "0")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest

from cloudminer.config.database import create_engine, create_session_maker
from cloudminer.models import Base
from cloudminer.services.account_service import AccountService
from cloudminer.services.admin_service import AdminService
from cloudminer.services.auth import BcryptAuthProvider
from cloudminer.services.referral import ReferralQueryManager
from cloudminer.services.transaction import TransactionLedger
from cloudminer.services.unit_of_work import AdminIdentity, LedgerStore
from cloudminer.services.yield_engine import YieldEngine


ADMIN_ID = "uid0000"
ADMIN_EMAIL = "admin@cloudminer.local"
ADMIN_SECRET = "admin-secret"


class MutableClock:
    """Test clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current += timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    """Clock frozen at 2025-01-01 12:00 UTC."""
    return MutableClock(datetime(2025, 1, 1, 12, 0, tzinfo=UTC))


@pytest.fixture
def admin_identity():
    """Administrator identity used by the test store."""
    return AdminIdentity(account_id=ADMIN_ID, email=ADMIN_EMAIL)


@pytest.fixture
async def session_maker(tmp_path):
    """Session factory over a fresh SQLite database file."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'ledger.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield create_session_maker(engine)

    await engine.dispose()


@pytest.fixture
def store(session_maker, admin_identity, clock):
    """Ledger store with the test clock."""
    return LedgerStore(session_maker, admin=admin_identity, clock=clock)


@pytest.fixture
def auth():
    """Fast bcrypt provider."""
    return BcryptAuthProvider(rounds=4)


@pytest.fixture
def accounts(store, auth):
    """Account service."""
    return AccountService(store, auth=auth)


@pytest.fixture
def admin_service(store):
    """Admin service."""
    return AdminService(store)


@pytest.fixture
def ledger(store):
    """Transaction ledger without a minimum withdrawal."""
    return TransactionLedger(store, min_withdrawal_amount=Decimal("0"))


@pytest.fixture
def yield_engine(store):
    """Yield engine."""
    return YieldEngine(store)


@pytest.fixture
def referrals(store):
    """Referral query manager."""
    return ReferralQueryManager(store)


@pytest.fixture
async def admin(accounts):
    """Registered administrator account."""
    return await accounts.register(ADMIN_EMAIL, ADMIN_SECRET)


@pytest.fixture
def fund(admin_service, admin):
    """Helper crediting primary balance through the admin override."""

    async def _fund(account_id: str, amount: str) -> None:
        await admin_service.adjust_funds(admin.id, account_id, "primary", Decimal(amount))

    return _fund
