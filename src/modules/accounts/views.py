"""Account API views."""

from __future__ import annotations

import structlog
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.accounts.exceptions import UserNotFound
from modules.accounts.repositories import UserDjangoRepository
from modules.accounts.serializers import UserSerializer
from modules.core.exceptions import error_response

logger = structlog.get_logger(__name__)


class MeView(APIView):
    """GET /api/v1/me

    A valid token whose account was removed (or deactivated) yields 404
    ``UserNotFound``; an invalid token never reaches this view (401).
    """

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._users = UserDjangoRepository()

    def get(self, request: Request) -> Response:
        user = self._users.get_active_by_id(str(request.user.pk))
        if user is None:
            logger.warning("user.not_found", user_id=str(request.user.pk))
            return error_response(
                UserNotFound("User not found."), status.HTTP_404_NOT_FOUND
            )
        return Response(UserSerializer(user).data)
