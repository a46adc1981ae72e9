"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    """Shape and type checks only; business rules run in ``OrderService``."""

    book_id = serializers.CharField()
    address_id = serializers.CharField()
    quantity = serializers.IntegerField()
    price_at_purchase = serializers.DecimalField(
        max_digits=Order._meta.get_field("price_at_purchase").max_digits, decimal_places=2
    )
    total_price = serializers.DecimalField(
        max_digits=Order._meta.get_field("total_price").max_digits, decimal_places=2
    )


class UpdateOrderStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no history)."""

    book_name = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "book_id",
            "book_name",
            "address_id",
            "quantity",
            "price_at_purchase",
            "total_price",
            "status",
            "created_at",
        ]
        read_only_fields = fields

    def get_book_name(self, obj: Order):
        return obj.book.name if obj.book is not None else None


class OrderSerializer(OrderListSerializer):
    """Read serializer for a single order with its status history."""

    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta(OrderListSerializer.Meta):
        fields = OrderListSerializer.Meta.fields + [
            "user_id",
            "updated_at",
            "status_history",
        ]
        read_only_fields = fields
