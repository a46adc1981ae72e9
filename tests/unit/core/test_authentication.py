"""Unit tests for bearer-token verification."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from django.conf import settings
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.test import APIRequestFactory

from modules.core.authentication import (
    InvalidCredential,
    JWTBearerAuthentication,
    JWTIdentityVerifier,
    UserRef,
)

pytestmark = pytest.mark.unit


def _token(claims: dict, key: str | None = None, algorithm: str = "HS256") -> str:
    base = {
        "user_id": str(uuid4()),
        "token_type": "access",
        "exp": datetime.now(timezone.utc) + timedelta(minutes=5),
    }
    base.update(claims)
    return jwt.encode(base, key or settings.SIMPLE_JWT["SIGNING_KEY"], algorithm=algorithm)


class TestJWTIdentityVerifier:
    def test_resolves_user_id_and_email(self):
        user_id = uuid4()
        ref = JWTIdentityVerifier().resolve(
            _token({"user_id": str(user_id), "email": "a@example.com"})
        )
        assert ref == UserRef(user_id=user_id, email="a@example.com")
        assert ref.pk == user_id
        assert ref.is_authenticated

    def test_expired_token(self):
        token = _token({"exp": datetime.now(timezone.utc) - timedelta(seconds=1)})
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve(token)

    def test_wrong_signature(self):
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve(_token({}, key="another-key-entirely"))

    def test_missing_user_claim(self):
        token = jwt.encode(
            {"exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
            settings.SIMPLE_JWT["SIGNING_KEY"],
            algorithm="HS256",
        )
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve(token)

    def test_refresh_token_is_rejected(self):
        with pytest.raises(InvalidCredential, match="not an access token"):
            JWTIdentityVerifier().resolve(_token({"token_type": "refresh"}))

    def test_non_uuid_user_id(self):
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve(_token({"user_id": "42"}))

    def test_garbage(self):
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve("not-a-jwt")

    def test_empty(self):
        with pytest.raises(InvalidCredential):
            JWTIdentityVerifier().resolve("")


class TestJWTBearerAuthentication:
    factory = APIRequestFactory()

    def test_no_header_means_anonymous(self):
        request = self.factory.get("/")
        assert JWTBearerAuthentication().authenticate(request) is None

    def test_valid_header(self):
        token = _token({})
        request = self.factory.get("/", HTTP_AUTHORIZATION=f"Bearer {token}")
        ref, raw = JWTBearerAuthentication().authenticate(request)
        assert isinstance(ref, UserRef)
        assert raw == token

    def test_wrong_scheme(self):
        request = self.factory.get("/", HTTP_AUTHORIZATION="Basic abc")
        with pytest.raises(AuthenticationFailed):
            JWTBearerAuthentication().authenticate(request)

    def test_invalid_token(self):
        request = self.factory.get("/", HTTP_AUTHORIZATION="Bearer nope")
        with pytest.raises(AuthenticationFailed):
            JWTBearerAuthentication().authenticate(request)
