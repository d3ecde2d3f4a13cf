from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from invite_gate.config import Settings
from invite_gate.database import Database
from invite_gate.models import InviteClaim, InviteCode
from invite_gate.services import ClaimIssuer, SignInGate


class FakeClock:
    """Callable clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 30, 0))


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///unused.db",
        gate_hook_secret="test-hook-secret",
    )


@pytest.fixture
async def database(tmp_path):
    db = Database(f"sqlite+aiosqlite:///{tmp_path / 'invite_gate.db'}", pool_size=10)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def issuer(database, clock):
    return ClaimIssuer(database, clock=clock)


@pytest.fixture
def gate(database, clock):
    return SignInGate(database, clock=clock)


@pytest.fixture
def add_code(database):
    async def _add(code, max_uses=None, uses=0, is_active=True):
        async with database.transaction() as db:
            db.add(InviteCode(code=code, max_uses=max_uses, uses=uses, is_active=is_active))
    return _add


@pytest.fixture
def add_claim(database):
    async def _add(email, code, created_at, expires_at, consumed_at=None):
        claim = InviteClaim(
            email=email,
            code=code,
            created_at=created_at,
            expires_at=expires_at,
            consumed_at=consumed_at,
        )
        async with database.transaction() as db:
            db.add(claim)
        return claim
    return _add


@pytest.fixture
def get_code(database):
    async def _get(code):
        async with database.transaction() as db:
            return await db.get(InviteCode, code)
    return _get


@pytest.fixture
def get_claims(database):
    async def _get(email=None):
        stmt = select(InviteClaim).order_by(InviteClaim.created_at)
        if email is not None:
            stmt = stmt.where(InviteClaim.email == email)
        async with database.transaction() as db:
            return (await db.execute(stmt)).scalars().all()
    return _get


@pytest.fixture
def count_claims(database):
    async def _count():
        async with database.transaction() as db:
            return (await db.execute(select(func.count()).select_from(InviteClaim))).scalar_one()
    return _count
