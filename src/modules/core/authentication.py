"""JWT identity verification for Django REST Framework.

Access tokens are issued by SimpleJWT (``/api/v1/auth/token/``) and
verified here with PyJWT.  Verification only proves the credential is
authentic and current; it does **not** load the user row.  Services
resolve the persisted user themselves so a structurally valid token for a
deleted account surfaces as ``UserNotFound`` (404) instead of 401.

Security decisions
------------------
* **Fail Closed**: any decode / validation error becomes ``InvalidCredential``.
* ``algorithms`` comes from ``SIMPLE_JWT["ALGORITHM"]``, never from the
  incoming token header.
* ``exp`` and the user-id claim are required; refresh tokens are rejected.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

import jwt as pyjwt
import structlog
from django.conf import settings
from jwt.exceptions import PyJWTError
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from shared.domain.exceptions import DomainError

logger = structlog.get_logger(__name__)


class InvalidCredential(DomainError):
    """The bearer credential is missing, malformed, expired or not signed by us."""


@dataclass(frozen=True)
class UserRef:
    """Identity resolved from a verified access token.

    Behaves enough like a Django user for DRF permissions and throttles
    (``is_authenticated`` / ``pk``) without touching the database.
    """

    user_id: UUID
    email: str = ""

    is_authenticated = True
    is_active = True

    @property
    def pk(self) -> UUID:
        return self.user_id

    def __str__(self) -> str:
        return self.email or str(self.user_id)


def _jwt_settings() -> Dict[str, Any]:
    return getattr(settings, "SIMPLE_JWT", {})


class JWTIdentityVerifier:
    """Resolve a bearer token into a ``UserRef``."""

    def __init__(
        self,
        signing_key: Optional[str] = None,
        algorithm: Optional[str] = None,
    ) -> None:
        jwt_settings = _jwt_settings()
        self._signing_key = signing_key or jwt_settings.get(
            "SIGNING_KEY", settings.SECRET_KEY
        )
        self._algorithm = algorithm or jwt_settings.get("ALGORITHM", "HS256")
        self._user_id_claim = jwt_settings.get("USER_ID_CLAIM", "user_id")

    def resolve(self, token: str) -> UserRef:
        """Return the identity carried by *token*.

        Raises:
            InvalidCredential: expired, malformed, unsigned or non-access token.
        """
        if not token:
            raise InvalidCredential("Missing token.")
        try:
            payload = pyjwt.decode(
                token,
                self._signing_key,
                algorithms=[self._algorithm],
                options={"require": ["exp", self._user_id_claim]},
            )
        except PyJWTError as exc:
            logger.warning("jwt_validation_failed", error=str(exc))
            raise InvalidCredential(f"Token validation failed: {exc}") from exc

        if payload.get("token_type", "access") != "access":
            raise InvalidCredential("Token is not an access token.")

        try:
            user_id = UUID(str(payload[self._user_id_claim]))
        except ValueError as exc:
            raise InvalidCredential("Token carries an invalid user id.") from exc

        return UserRef(user_id=user_id, email=payload.get("email", ""))


class JWTBearerAuthentication(BaseAuthentication):
    """DRF authentication class backed by ``JWTIdentityVerifier``."""

    keyword = "Bearer"

    def __init__(self, verifier: Optional[JWTIdentityVerifier] = None) -> None:
        self._verifier = verifier or JWTIdentityVerifier()

    def authenticate(self, request):
        """Return ``(UserRef, token)`` or ``None`` (no credentials)."""
        header = request.META.get("HTTP_AUTHORIZATION", "")
        if not header:
            return None

        token = self._extract_token(header)
        try:
            user_ref = self._verifier.resolve(token)
        except InvalidCredential as exc:
            raise AuthenticationFailed(exc.message) from exc

        logger.info("jwt_authenticated", user_id=str(user_ref.user_id))
        return (user_ref, token)

    def authenticate_header(self, request):
        """Value for the ``WWW-Authenticate`` response header on 401."""
        return f'{self.keyword} realm="api"'

    @staticmethod
    def _extract_token(header: str) -> str:
        parts = header.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise AuthenticationFailed("Invalid Authorization header format.")
        return parts[1]
