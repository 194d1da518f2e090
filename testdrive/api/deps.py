# testdrive/api/deps.py
"""Request-scoped dependencies: db session, settings and the access gate."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .. import crud
from ..config import Settings
from ..db import get_db
from ..errors import Forbidden, Unauthorized
from ..models import Role, User
from ..security import FirebaseVerifier, TokenService
from ..utils import get_logger

logger = get_logger("auth")

bearer = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_tokens(request: Request) -> TokenService:
    return request.app.state.tokens


def get_firebase(request: Request) -> FirebaseVerifier:
    return request.app.state.firebase


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_tokens),
) -> User:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthorized("Not authorized, no token provided")
    claims = tokens.decode(credentials.credentials)
    user_id = claims.get("id")
    user = crud.get_user(db, user_id) if user_id else None
    if user is None:
        # token is valid but the account is gone
        logger.warning("Token for unknown user %s", user_id)
        raise Unauthorized("Not authorized, user not found")
    return user


def require_roles(*roles: Role):
    allowed = {r.value for r in roles}

    def check(user: User = Depends(get_current_user)) -> User:
        if user.role.value not in allowed:
            raise Forbidden(
                f"User role '{user.role.value}' is not authorized to access this route. "
                f"Required roles: {', '.join(sorted(allowed))}"
            )
        return user

    return check


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != Role.ADMIN:
        raise Forbidden("Not authorized as an admin")
    return user


require_car_owner = require_roles(Role.CAR_OWNER)
require_journalist = require_roles(Role.JOURNALIST)
