import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import SalesOrder


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(
        field_name="status", choices=OrderStatus.choices
    )
    customer = django_filters.UUIDFilter(field_name="customer_id")
    shop = django_filters.UUIDFilter(field_name="shop_id")
    start_date = django_filters.DateFilter(field_name="order_date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="order_date", lookup_expr="lte")
    min_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="gte"
    )
    max_total = django_filters.NumberFilter(
        field_name="total_amount", lookup_expr="lte"
    )

    class Meta:
        model = SalesOrder
        fields = [
            "status",
            "customer",
            "shop",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]


ORDER_FILTER_PARAMS = tuple(OrderFilter.base_filters.keys())
