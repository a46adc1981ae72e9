from __future__ import annotations

from rest_framework import serializers

from modules.addresses.models import Address


class AddressSerializer(serializers.ModelSerializer):
    """Read serializer; ``address_type`` is exposed as ``type``."""

    type = serializers.CharField(source="address_type", read_only=True)

    class Meta:
        model = Address
        fields = [
            "id",
            "street",
            "city",
            "state",
            "zip_code",
            "country",
            "type",
            "is_default",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
