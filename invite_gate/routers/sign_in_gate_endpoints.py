import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ..exceptions import TransientStoreFailure
from ..init_db import get_sign_in_gate
from ..schemas.invite import SignInGateRequest, SignInGateResponse
from ..services import SignInGate
from ..utils.verify_hook_secret import verify_hook_secret

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/sign-in-gate", response_model=SignInGateResponse, dependencies=[Depends(verify_hook_secret)])
async def sign_in_gate(request: SignInGateRequest, gate: SignInGate = Depends(get_sign_in_gate)):
    """
    Sign-in callback for the auth framework.

    ``allowed: false`` means the sign-in is refused; the framework shows its
    generic sign-in error. No claim details are returned either way.
    """
    try:
        allowed = await gate.allow_sign_in(request.email, request.provider_id)
    except TransientStoreFailure:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Sign-in temporarily unavailable"
        )
    return SignInGateResponse(allowed=allowed)
