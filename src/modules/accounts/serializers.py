"""Account serializers: token issuance and the ``/me`` profile."""

from __future__ import annotations

from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

from modules.accounts.models import User


class BookstoreTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Issue access/refresh pairs that also carry the purchaser's email.

    ``JWTIdentityVerifier`` exposes the claim on ``UserRef.email``; refresh
    tokens copy it into the access tokens they mint.
    """

    @classmethod
    def get_token(cls, user: User):
        token = super().get_token(user)
        token["email"] = user.email
        return token


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = [
            "id",
            "name",
            "email",
            "mobile_number",
            "role",
            "created_at",
        ]
        read_only_fields = fields
