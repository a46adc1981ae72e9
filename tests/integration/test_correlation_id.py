import logging
import uuid

import pytest

pytestmark = pytest.mark.integration


class TestCorrelationIdMiddleware:
    def test_echoes_provided_request_id(self, client):
        response = client.get("/health", HTTP_X_REQUEST_ID="order-trace-123")
        assert response["X-Request-ID"] == "order-trace-123"

    def test_generates_uuid4_when_missing(self, client):
        request_id = client.get("/health")["X-Request-ID"]
        assert str(uuid.UUID(request_id, version=4)) == request_id

    def test_present_on_api_errors(self, api_client_with_correlation):
        client, cid = api_client_with_correlation
        response = client.get("/api/v1/orders/")
        assert response.status_code == 401
        assert response["X-Request-ID"] == cid

    def test_bound_into_log_records(self, auth_client, caplog):
        with caplog.at_level(logging.INFO):
            auth_client.get("/api/v1/orders/", HTTP_X_REQUEST_ID="order-trace-456")

        messages = [record.getMessage() for record in caplog.records]
        assert any("order-trace-456" in message for message in messages), messages
