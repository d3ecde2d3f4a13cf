from .claim_issuer import ClaimIssuer
from .sign_in_gate import SignInGate
from .invite_store import normalize_email, normalize_code

__all__ = ["ClaimIssuer", "SignInGate", "normalize_email", "normalize_code"]
