"""Sales order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).  Input
serializers only parse types: presence and positivity rules for ids and
items belong to the Service Layer, which receives Pydantic DTOs from
``dtos.py`` and reports those violations with its own messages.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import OrderStatus
from modules.orders.models import SalesOrder, SalesOrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    """One line item in a create, update or add-item request."""

    product_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(required=False, allow_null=True)
    unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True
    )


class CreateOrderSerializer(serializers.Serializer):
    customer_id = serializers.UUIDField(required=False, allow_null=True)
    shop_id = serializers.UUIDField(required=False, allow_null=True)
    order_date = serializers.DateField(required=False, allow_null=True)
    items = OrderItemInputSerializer(many=True, required=False, allow_null=True)


class UpdateOrderSerializer(serializers.Serializer):
    """Partial update payload.

    Omitting ``items`` leaves the item set untouched; sending an empty
    list removes every item.
    """

    customer_id = serializers.UUIDField(required=False, allow_null=True)
    shop_id = serializers.UUIDField(required=False, allow_null=True)
    order_date = serializers.DateField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=OrderStatus.choices, required=False, allow_null=True
    )
    items = OrderItemInputSerializer(many=True, required=False, allow_null=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class SalesOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = SalesOrderItem
        fields = [
            "id",
            "product_id",
            "quantity",
            "unit_price",
            "total_price",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SalesOrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items."""

    items = SalesOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = SalesOrder
        fields = [
            "id",
            "customer_id",
            "shop_id",
            "order_date",
            "status",
            "total_amount",
            "created_at",
            "updated_at",
            "items",
        ]
        read_only_fields = fields
