from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

class ClaimFailureReason(str, Enum):
    INVALID_INPUT = "invalid_input"
    INVALID_CODE = "invalid_code"
    CODE_INACTIVE = "code_inactive"
    CODE_EXHAUSTED = "code_exhausted"
    SERVER_ERROR = "server_error"

# User-facing messages for the claim endpoint
CLAIM_ERROR_MESSAGES = {
    ClaimFailureReason.INVALID_INPUT: "Missing email or code",
    ClaimFailureReason.INVALID_CODE: "Invalid invite code",
    ClaimFailureReason.CODE_INACTIVE: "Invite code inactive",
    ClaimFailureReason.CODE_EXHAUSTED: "Invite code exhausted",
    ClaimFailureReason.SERVER_ERROR: "Server error",
}

CLAIM_ERROR_STATUS = {
    ClaimFailureReason.INVALID_INPUT: 400,
    ClaimFailureReason.INVALID_CODE: 401,
    ClaimFailureReason.CODE_INACTIVE: 401,
    ClaimFailureReason.CODE_EXHAUSTED: 401,
    ClaimFailureReason.SERVER_ERROR: 500,
}

class ClaimResult(BaseModel):
    ok: bool
    reused: bool = False
    reason: Optional[ClaimFailureReason] = None

    @classmethod
    def issued(cls, reused: bool) -> "ClaimResult":
        return cls(ok=True, reused=reused)

    @classmethod
    def failed(cls, reason: ClaimFailureReason) -> "ClaimResult":
        return cls(ok=False, reason=reason)

class ClaimRequest(BaseModel):
    # Untyped so a missing or non-string field is a 400 from the endpoint, not a 422
    email: Any = None
    code: Any = None

class ClaimResponse(BaseModel):
    ok: bool = True
    reused: bool

class ClaimErrorResponse(BaseModel):
    ok: bool = False
    error: str

class SignInGateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    provider_id: Optional[str] = Field(default=None, alias="providerId")

class SignInGateResponse(BaseModel):
    allowed: bool

class GateDecision(BaseModel):
    admitted: bool
    claim_id: Optional[str] = None
    consumed_now: bool = False
