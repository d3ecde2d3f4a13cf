from fastapi import Request, HTTPException, status, Depends
from jose import jwt, JWTError

from ..config import Settings
from ..init_db import get_app_settings

JWT_ALGORITHM = "HS256"
HOOK_AUDIENCE = "sign-in-gate"

async def verify_hook_secret(request: Request, settings: Settings = Depends(get_app_settings)) -> dict:
    """
    Verifies the HS256 bearer token the auth framework sends with each
    sign-in gate call.

    Returns:
        dict: decoded token claims

    Raises:
        HTTPException 401: If the token is missing, invalid, or no key is configured
    """
    secret = settings.gate_hook_secret.get_secret_value()
    if not secret:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Sign-in gate hook is not configured"
        )

    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header must start with 'Bearer'"
        )

    token = auth_header.removeprefix("Bearer ").strip()

    try:
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], audience=HOOK_AUDIENCE)
    except JWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid or expired token: {str(e)}")
