import django_filters

from modules.invoices.constants import PaymentStatus
from modules.invoices.models import Invoice


class InvoiceFilter(django_filters.FilterSet):
    payment_status = django_filters.ChoiceFilter(
        field_name="payment_status", choices=PaymentStatus.choices
    )
    sales_order = django_filters.UUIDFilter(field_name="sales_order_id")
    start_date = django_filters.DateFilter(field_name="invoice_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="invoice_date", lookup_expr="lte")

    class Meta:
        model = Invoice
        fields = ["payment_status", "sales_order", "start_date", "end_date"]


INVOICE_FILTER_PARAMS = tuple(InvoiceFilter.base_filters.keys())
