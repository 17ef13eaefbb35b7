# purchases/filters.py

import django_filters

from purchases.models import Purchase


class PurchaseFilter(django_filters.FilterSet):
    item_id = django_filters.UUIDFilter(field_name="item_id")
    department = django_filters.CharFilter(field_name="department", lookup_expr="iexact")
    open = django_filters.BooleanFilter(method="filter_open", label="Still awaiting goods")

    class Meta:
        model = Purchase
        fields = ["item_id", "status", "urgency", "department"]

    def filter_open(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(status__in=Purchase.AWAITING_GOODS)
        return queryset.exclude(status__in=Purchase.AWAITING_GOODS)
