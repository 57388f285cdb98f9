"""Unit tests for session tokens and route guards."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from storefront.api.shared.auth import (
    create_session_token,
    decode_session_token,
    get_current_user,
    get_optional_user,
    require_admin,
)
from storefront.config import AuthConfig
from storefront.db.models import UserRole
from tests.factories import UserFactory

CONFIG = AuthConfig(jwt_secret="unit-test-secret", session_max_age_days=30)


def bearer(user) -> HTTPAuthorizationCredentials:
    token, _ = create_session_token(user)
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestSessionTokens:
    """Tests for create_session_token / decode_session_token."""

    def test_round_trip(self):
        user = UserFactory.build(admin=True)
        token, expires_at = create_session_token(user, CONFIG)

        session = decode_session_token(token, CONFIG)

        assert session.user_id == user.id
        assert session.email == user.email
        assert session.role == UserRole.ADMIN
        assert session.is_admin is True
        assert expires_at > datetime.now(timezone.utc) + timedelta(days=29)

    def test_expired_token(self):
        user = UserFactory.build()
        issued = datetime.now(timezone.utc) - timedelta(days=31)
        token, _ = create_session_token(user, CONFIG, now=issued)

        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(token, CONFIG)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Session expired"

    def test_wrong_secret(self):
        token, _ = create_session_token(UserFactory.build(), CONFIG)

        with pytest.raises(HTTPException) as exc_info:
            decode_session_token(token, AuthConfig(jwt_secret="other-secret"))
        assert exc_info.value.detail == "Invalid session token"

    def test_garbage_token(self):
        with pytest.raises(HTTPException):
            decode_session_token("not.a.token", CONFIG)

    def test_missing_role_claim(self):
        token = jwt.encode(
            {
                "sub": str(UserFactory.build().id),
                "iss": "storefront",
                "exp": datetime.now(timezone.utc) + timedelta(hours=1),
            },
            CONFIG.jwt_secret,
            algorithm="HS256",
        )

        with pytest.raises(HTTPException):
            decode_session_token(token, CONFIG)


class TestGuards:
    @pytest.mark.asyncio
    async def test_optional_user_without_credentials(self, mock_db):
        assert await get_optional_user(None, mock_db) is None
        mock_db.get.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_optional_user_with_token(self, mock_db):
        user = UserFactory.build()
        mock_db.get.return_value = user

        session = await get_optional_user(bearer(user), mock_db)

        assert session.user_id == user.id
        assert session.role == UserRole.USER

    @pytest.mark.asyncio
    async def test_demoted_admin_loses_admin_access(self, mock_db):
        user = UserFactory.build(admin=True)
        credentials = bearer(user)
        user.role = UserRole.USER
        mock_db.get.return_value = user

        session = await get_optional_user(credentials, mock_db)

        assert session.role == UserRole.USER
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(session)
        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_promoted_user_gains_admin_access(self, mock_db):
        user = UserFactory.build()
        credentials = bearer(user)
        user.role = UserRole.ADMIN
        mock_db.get.return_value = user

        session = await get_optional_user(credentials, mock_db)

        assert await require_admin(session) is session

    @pytest.mark.asyncio
    async def test_deleted_user_is_unauthenticated(self, mock_db):
        mock_db.get.return_value = None

        with pytest.raises(HTTPException) as exc_info:
            await get_optional_user(bearer(UserFactory.build()), mock_db)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_current_user_required(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_required(self, customer, admin):
        with pytest.raises(HTTPException) as exc_info:
            await require_admin(customer)
        assert exc_info.value.status_code == 403

        assert await require_admin(admin) is admin
