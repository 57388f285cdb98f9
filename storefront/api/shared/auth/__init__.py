"""Authentication utilities shared by all API routes.

This module provides:
- SessionUser: Authenticated caller decoded from a session token
- create_session_token / decode_session_token: JWT session handling
- get_current_user / get_optional_user / require_admin: FastAPI dependencies
- hash_password / verify_password: bcrypt password hashing
"""

from .passwords import hash_password, verify_password
from .session import (
    SessionUser,
    bearer_scheme,
    create_session_token,
    decode_session_token,
    get_current_user,
    get_optional_user,
    require_admin,
)

__all__ = [
    "SessionUser",
    "bearer_scheme",
    "create_session_token",
    "decode_session_token",
    "get_current_user",
    "get_optional_user",
    "require_admin",
    "hash_password",
    "verify_password",
]
