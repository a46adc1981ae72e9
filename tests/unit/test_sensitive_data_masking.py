import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_mobile_number_masked(self):
        result = mask_sensitive_data(None, None, {"event": "test", "mobile": "+919876543210"})
        assert "9876543210" not in result["mobile"]
        assert "***MASKED***" in result["mobile"]

    def test_password_masked(self):
        result = mask_sensitive_data(None, None, {"event": "test", "data": "password='s3cret123'"})
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        result = mask_sensitive_data(None, None, {"event": "test", "header": "token=abc123xyz"})
        assert "abc123xyz" not in result["header"]

    def test_authorization_masked(self):
        result = mask_sensitive_data(
            None, None, {"event": "test", "header": "Authorization: eyJhbGciOi.x.y"}
        )
        assert "eyJhbGciOi" not in result["header"]

    def test_uuid_unchanged(self):
        order_id = "01920000-0000-7000-8000-123456789012"
        result = mask_sensitive_data(None, None, {"event": "order.created", "order_id": order_id})
        assert result["order_id"] == order_id

    def test_non_string_values_unchanged(self):
        result = mask_sensitive_data(None, None, {"event": "test", "quantity": 1234567890123})
        assert result["quantity"] == 1234567890123
