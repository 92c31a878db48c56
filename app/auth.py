"""
Bearer token verification.

Tokens are issued by the external auth service as HS256 JWTs carrying
``sub``, ``name`` and ``role`` claims. This module only verifies them and
exposes role checks as FastAPI dependencies.
"""

import logging
from typing import Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from .config import JWT_ALGORITHM, SECRET_KEY
from .shared.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)

security = HTTPBearer()

ROLES = ("viewer", "admin", "superadmin")
EDITOR_ROLES = ("admin", "superadmin")


class CurrentUser(BaseModel):
    sub: str
    name: Optional[str] = None
    role: str = "viewer"


def decode_token(token: str) -> CurrentUser:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"❌ Token verification failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Token is missing subject")

    role = payload.get("role", "viewer")
    if role not in ROLES:
        logger.warning(f"⚠️ Unknown role '{role}' in token for {sub}")
        raise HTTPException(status_code=401, detail="Unknown role")

    return CurrentUser(sub=str(sub), name=payload.get("name"), role=role)


def create_access_token(sub: str, role: str = "admin", name: Optional[str] = None) -> str:
    """Mint a token locally - used by tests and development tooling"""
    return jwt.encode({"sub": sub, "role": role, "name": name}, SECRET_KEY, algorithm=JWT_ALGORITHM)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> CurrentUser:
    return decode_token(credentials.credentials)


def require_roles(*roles: str):
    """Dependency factory: the caller must hold one of ``roles``"""

    async def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in roles:
            logger.warning(
                f"🚫 {current_user.sub} ({current_user.role}) denied - requires one of {roles}"
            )
            raise PermissionDeniedError("You do not have permission to perform this action")
        return current_user

    return checker


require_editor = require_roles(*EDITOR_ROLES)
require_superadmin = require_roles("superadmin")
