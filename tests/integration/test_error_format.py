"""Integration tests for standardized error responses."""

from uuid import uuid4

import pytest

from modules.core.authentication import UserRef

pytestmark = pytest.mark.integration


def _assert_envelope(data):
    assert set(data) == {"type", "errors"}
    assert isinstance(data["errors"], list)
    assert data["errors"]
    for error in data["errors"]:
        assert "code" in error
        assert "detail" in error


class TestStandardizedErrors:
    def test_auth_error_has_standard_format(self, api_client):
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 401
        _assert_envelope(response.json())

    def test_malformed_json_has_standard_format(self, auth_client):
        response = auth_client.post("/api/v1/orders/", data="{", content_type="application/json")
        assert response.status_code == 400
        data = response.json()
        _assert_envelope(data)
        assert data["type"] == "ParseError"

    def test_validation_error_is_422(self, auth_client):
        response = auth_client.post("/api/v1/orders/", {}, format="json")
        assert response.status_code == 422
        _assert_envelope(response.json())

    def test_domain_error_has_standard_format(self, auth_client):
        response = auth_client.get(f"/api/v1/orders/{uuid4()}/")
        assert response.status_code == 404
        _assert_envelope(response.json())

    def test_method_not_allowed(self, auth_client):
        response = auth_client.delete(f"/api/v1/orders/{uuid4()}/")
        assert response.status_code == 405
        assert response.json()["type"] == "MethodNotAllowed"

    def test_force_authenticated_identity_for_unknown_user(self, api_client):
        api_client.force_authenticate(user=UserRef(user_id=uuid4()))
        response = api_client.get("/api/v1/orders/")
        assert response.status_code == 404
        assert response.json()["type"] == "UserNotFound"
