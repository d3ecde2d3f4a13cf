"""
Queries shared by the claim issuer and the sign-in gate.

Every helper takes the session of an already-open transaction; none of them
commits. Timestamps come from the caller so one operation compares against a
single ``now``.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import InviteClaim, InviteCode


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip()


async def find_live_claim(db: AsyncSession, email: str, code: str, now: datetime) -> Optional[InviteClaim]:
    """Newest unexpired, unconsumed claim for exactly this (email, code) pair."""
    stmt = (
        select(InviteClaim)
        .where(
            InviteClaim.email == email,
            InviteClaim.code == code,
            InviteClaim.expires_at > now,
            InviteClaim.consumed_at.is_(None),
        )
        .order_by(InviteClaim.created_at.desc(), InviteClaim.id.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def find_admissible_claim(
    db: AsyncSession, email: str, now: datetime, grace: timedelta
) -> Optional[InviteClaim]:
    """
    Newest unexpired claim for the email that is either unconsumed or was
    consumed strictly less than ``grace`` ago.
    """
    stmt = (
        select(InviteClaim)
        .where(
            InviteClaim.email == email,
            InviteClaim.expires_at > now,
            or_(
                InviteClaim.consumed_at.is_(None),
                InviteClaim.consumed_at > now - grace,
            ),
        )
        .order_by(InviteClaim.created_at.desc(), InviteClaim.id.desc())
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def lock_invite_code(db: AsyncSession, code: str) -> Optional[InviteCode]:
    """
    Load the ledger row with an exclusive row lock held until the surrounding
    transaction ends. Concurrent callers for the same code block here.
    """
    stmt = select(InviteCode).where(InviteCode.code == code).with_for_update()
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def increment_uses(db: AsyncSession, code: str) -> None:
    await db.execute(
        update(InviteCode)
        .where(InviteCode.code == code)
        .values(uses=InviteCode.uses + 1)
        .execution_options(synchronize_session=False)
    )


async def insert_claim(db: AsyncSession, email: str, code: str, now: datetime, ttl: timedelta) -> InviteClaim:
    claim = InviteClaim(email=email, code=code, created_at=now, expires_at=now + ttl)
    db.add(claim)
    await db.flush()
    return claim


async def mark_consumed(db: AsyncSession, claim_id: str, now: datetime) -> bool:
    """
    Set consumed_at only if nobody has yet. Returns True when this call
    performed the write.
    """
    result = await db.execute(
        update(InviteClaim)
        .where(InviteClaim.id == claim_id, InviteClaim.consumed_at.is_(None))
        .values(consumed_at=now)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
