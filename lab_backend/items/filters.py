# items/filters.py

import django_filters
from django.db.models import Q

from items.models import ItemDefinition, Lot


class ItemDefinitionFilter(django_filters.FilterSet):
    q = django_filters.CharFilter(method="filter_q", label="Search code / name / catalog no")
    department = django_filters.CharFilter(field_name="department", lookup_expr="iexact")
    category = django_filters.CharFilter(field_name="category", lookup_expr="iexact")

    class Meta:
        model = ItemDefinition
        fields = ["department", "category", "status", "chemical_type"]

    def filter_q(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(code__icontains=value)
            | Q(name__icontains=value)
            | Q(catalog_no__icontains=value)
        )


class LotFilter(django_filters.FilterSet):
    item_id = django_filters.UUIDFilter(field_name="item_id")
    in_stock = django_filters.BooleanFilter(method="filter_in_stock")
    expires_before = django_filters.DateFilter(field_name="expiry_date", lookup_expr="lte")

    class Meta:
        model = Lot
        fields = ["item_id", "status", "lot_number"]

    def filter_in_stock(self, queryset, name, value):
        if value is None:
            return queryset
        if value:
            return queryset.filter(current_quantity__gt=0)
        return queryset.filter(current_quantity=0)
