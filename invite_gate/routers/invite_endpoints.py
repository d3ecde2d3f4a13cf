# Router for the invite claim endpoint
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..init_db import get_claim_issuer
from ..schemas.invite import (
    CLAIM_ERROR_MESSAGES,
    CLAIM_ERROR_STATUS,
    ClaimErrorResponse,
    ClaimFailureReason,
    ClaimRequest,
    ClaimResponse,
)
from ..services import ClaimIssuer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invite", tags=["invite"])


def _error(reason: ClaimFailureReason) -> JSONResponse:
    body = ClaimErrorResponse(error=CLAIM_ERROR_MESSAGES[reason])
    return JSONResponse(status_code=CLAIM_ERROR_STATUS[reason], content=body.model_dump())


@router.post(
    "/claim",
    response_model=ClaimResponse,
    responses={
        400: {"model": ClaimErrorResponse},
        401: {"model": ClaimErrorResponse},
        500: {"model": ClaimErrorResponse},
    },
)
async def claim_invite_code(request: ClaimRequest, issuer: ClaimIssuer = Depends(get_claim_issuer)):
    """
    Redeem an invite code for an email ahead of a magic-link sign-in.

    Returns ``{ok: true, reused}``. ``reused`` is true when a live claim for
    the same email and code already existed and no use was spent.
    """
    email, code = request.email, request.code
    if not isinstance(email, str) or not isinstance(code, str) or not email or not code:
        return _error(ClaimFailureReason.INVALID_INPUT)

    result = await issuer.issue_claim(email, code)
    if not result.ok:
        return _error(result.reason)
    return ClaimResponse(reused=result.reused)
