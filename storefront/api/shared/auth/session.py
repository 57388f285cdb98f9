"""Session tokens and FastAPI authentication dependencies.

Sessions are stateless HS256 JWTs issued at login and sent back as
``Authorization: Bearer <token>``. The token identifies the user.
The guards load the account on every request and take its role from the
database row.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.config import AuthConfig, get_config
from storefront.db.models import User, UserRole
from storefront.db.session import get_db
from storefront.logging_config import get_logger, set_context

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_ISSUER = "storefront"


@dataclass(frozen=True)
class SessionUser:
    """Authenticated caller decoded from a session token."""

    user_id: UUID
    email: str
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def create_session_token(
    user: User,
    config: AuthConfig | None = None,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """Issue a session token for a user.

    Returns:
        Tuple of (encoded token, expiry time)
    """
    config = config or get_config().auth
    now = now or datetime.now(timezone.utc)
    expires_at = now + timedelta(days=config.session_max_age_days)

    payload = {
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
        "iss": TOKEN_ISSUER,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)
    return token, expires_at


def decode_session_token(token: str, config: AuthConfig | None = None) -> SessionUser:
    """Verify a session token.

    Raises:
        HTTPException: 401 if the token is expired, tampered with, or malformed
    """
    config = config or get_config().auth
    try:
        payload = jwt.decode(
            token,
            config.jwt_secret,
            algorithms=[config.jwt_algorithm],
            issuer=TOKEN_ISSUER,
            options={"require": ["sub", "exp", "role"]},
        )
        return SessionUser(
            user_id=UUID(payload["sub"]),
            email=payload.get("email", ""),
            role=UserRole(payload["role"]),
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.debug(f"Rejected session token: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token",
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[SessionUser]:
    """Return the caller if a valid token was sent, else None.

    The role is read from the user's row, not from the token.

    Raises:
        HTTPException: 401 if the token is invalid or its account no longer exists
    """
    if credentials is None:
        return None
    claims = decode_session_token(credentials.credentials)
    db_user = await db.get(User, claims.user_id)
    if db_user is None:
        logger.warning(f"Session refers to missing user {claims.user_id}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )

    set_context(user_id=str(db_user.id))
    return SessionUser(user_id=db_user.id, email=db_user.email, role=db_user.role)


async def get_current_user(
    user: Optional[SessionUser] = Depends(get_optional_user),
) -> SessionUser:
    """Require an authenticated caller.

    Raises:
        HTTPException: 401 if no valid session token was sent
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_admin(user: SessionUser = Depends(get_current_user)) -> SessionUser:
    """Require an authenticated caller with the ADMIN role.

    Raises:
        HTTPException: 401 if unauthenticated, 403 if not an admin
    """
    if not user.is_admin:
        logger.warning(
            "Non-admin user attempted admin access",
            extra={"user_id": str(user.user_id)},
        )
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
