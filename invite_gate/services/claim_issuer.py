import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import Database
from ..models import InviteCode
from ..schemas.invite import ClaimFailureReason, ClaimResult
from ..utils.time_utils import utcnow
from .invite_store import (
    find_live_claim,
    increment_uses,
    insert_claim,
    lock_invite_code,
    normalize_code,
    normalize_email,
)

logger = logging.getLogger(__name__)

DEFAULT_CLAIM_TTL = timedelta(minutes=15)


class _ClaimRejected(Exception):
    def __init__(self, reason: ClaimFailureReason):
        self.reason = reason
        super().__init__(reason.value)


def check_invite_code(invite: Optional[InviteCode]) -> Optional[ClaimFailureReason]:
    """Reason the locked ledger row cannot be claimed, or None if it can."""
    if invite is None:
        return ClaimFailureReason.INVALID_CODE
    if not invite.is_active:
        return ClaimFailureReason.CODE_INACTIVE
    if invite.is_exhausted:
        return ClaimFailureReason.CODE_EXHAUSTED
    return None


class ClaimIssuer:
    """
    Redeems an invite code for an email.

    A repeated request for a pair that already has a live, unconsumed claim
    is answered from that claim without spending another use. Otherwise the
    ledger row is locked, validated, incremented, and a fresh claim inserted,
    all in one transaction.
    """

    def __init__(
        self,
        database: Database,
        claim_ttl: timedelta = DEFAULT_CLAIM_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.claim_ttl = claim_ttl
        self.clock = clock

    async def issue_claim(self, email: Optional[str], code: Optional[str]) -> ClaimResult:
        """
        Args:
            email: address the claim is for; trimmed and lower-cased
            code: invite code; trimmed

        Returns:
            ClaimResult: ``ok`` with ``reused``, or a failure ``reason``.
            Store failures come back as ``server_error`` after a full rollback.
        """
        email = normalize_email(email)
        code = normalize_code(code)
        if not email or not code:
            return ClaimResult.failed(ClaimFailureReason.INVALID_INPUT)

        try:
            reused = await self._issue(email, code)
        except _ClaimRejected as e:
            logger.warning(f"Invite claim rejected for {email}: {e.reason.value}")
            return ClaimResult.failed(e.reason)
        except SQLAlchemyError:
            logger.exception(f"Invite claim transaction failed for {email}")
            return ClaimResult.failed(ClaimFailureReason.SERVER_ERROR)
        except Exception:
            logger.exception(f"Unexpected error issuing invite claim for {email}")
            return ClaimResult.failed(ClaimFailureReason.SERVER_ERROR)

        if reused:
            logger.info(f"Reusing live invite claim for {email}")
        else:
            logger.info(f"Issued invite claim for {email}")
        return ClaimResult.issued(reused=reused)

    async def _issue(self, email: str, code: str) -> bool:
        now = self.clock()
        async with self.database.transaction() as db:
            # Checked before locking the ledger row; a retry never spends a use
            if await find_live_claim(db, email, code, now) is not None:
                return True

            invite = await lock_invite_code(db, code)
            reason = check_invite_code(invite)
            if reason is not None:
                raise _ClaimRejected(reason)

            await increment_uses(db, code)
            await insert_claim(db, email, code, now, self.claim_ttl)
            return False
