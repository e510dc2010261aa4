"""Bearer token authentication dependency.

Protected handlers receive the caller's identity explicitly as an
``AuthContext`` instead of reading it off the request.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from .security import decode_access_token

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the authenticated caller."""
    user_id: str
    email: Optional[str] = None


async def get_auth_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Access token required")

    try:
        claims = decode_access_token(credentials.credentials)
    except ValueError:
        logger.warning("Rejected request with an invalid access token")
        raise HTTPException(status_code=403, detail="Invalid token")

    user_id = claims.get("sub")
    if not user_id:
        raise HTTPException(status_code=403, detail="Invalid token")

    return AuthContext(user_id=str(user_id), email=claims.get("email"))
