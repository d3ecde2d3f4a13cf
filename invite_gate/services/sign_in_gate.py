import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import Database
from ..exceptions import TransientStoreFailure
from ..schemas.invite import GateDecision
from ..utils.time_utils import utcnow
from .invite_store import find_admissible_claim, mark_consumed, normalize_email

logger = logging.getLogger(__name__)

DEFAULT_CONSUME_GRACE = timedelta(minutes=15)
EMAIL_PROVIDER = "email"


class SignInGate:
    """
    Decides at sign-in time whether an email may get a session.

    Only the gated (magic-link) provider is checked. A claim admits while it
    is unexpired and either unconsumed or consumed less than ``grace`` ago,
    so a link clicked twice or a replayed provider callback still gets in.
    Consumption is a conditional update: racing evaluations can all admit but
    only one writes consumed_at.
    """

    def __init__(
        self,
        database: Database,
        gated_provider: str = EMAIL_PROVIDER,
        grace: timedelta = DEFAULT_CONSUME_GRACE,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.gated_provider = gated_provider
        self.grace = grace
        self.clock = clock

    async def allow_sign_in(self, email: Optional[str], provider_id: Optional[str]) -> bool:
        decision = await self.evaluate(email, provider_id)
        return decision.admitted

    async def evaluate(self, email: Optional[str], provider_id: Optional[str]) -> GateDecision:
        """
        Raises:
            TransientStoreFailure: the claim lookup or consume write failed.
                This is not a deny; the auth framework should treat it as an error.
        """
        if provider_id != self.gated_provider:
            return GateDecision(admitted=True)

        email = normalize_email(email)
        if not email:
            logger.warning("Sign-in denied: no email on gated provider sign-in")
            return GateDecision(admitted=False)

        now = self.clock()
        try:
            async with self.database.transaction() as db:
                claim = await find_admissible_claim(db, email, now, self.grace)
                if claim is None:
                    logger.warning(f"Sign-in denied for {email}")
                    return GateDecision(admitted=False)

                consumed_now = False
                if claim.consumed_at is None:
                    consumed_now = await mark_consumed(db, claim.id, now)
        except SQLAlchemyError as e:
            logger.exception(f"Sign-in gate lookup failed for {email}")
            raise TransientStoreFailure("sign-in gate", e) from e

        logger.info(f"Sign-in admitted for {email} (claim {claim.id}, consumed_now={consumed_now})")
        return GateDecision(admitted=True, claim_id=claim.id, consumed_now=consumed_now)
