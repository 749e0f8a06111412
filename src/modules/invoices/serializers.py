"""Invoice DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.invoices.constants import PaymentStatus
from modules.invoices.models import Invoice


class CreateInvoiceSerializer(serializers.Serializer):
    sales_order_id = serializers.UUIDField()
    invoice_date = serializers.DateField()


class UpdateInvoiceSerializer(serializers.Serializer):
    sales_order_id = serializers.UUIDField(required=False, allow_null=True)
    invoice_date = serializers.DateField(required=False, allow_null=True)
    payment_status = serializers.ChoiceField(
        choices=PaymentStatus.choices, required=False, allow_null=True
    )


class InvoiceSerializer(serializers.ModelSerializer):
    sales_order_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = Invoice
        fields = [
            "id",
            "sales_order_id",
            "invoice_date",
            "payment_status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
