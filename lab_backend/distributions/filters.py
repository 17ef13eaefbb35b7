# distributions/filters.py

import django_filters

from distributions.models import Distribution, UsageRecord, WasteRecord


class DistributionFilter(django_filters.FilterSet):
    item_id = django_filters.UUIDFilter(field_name="item_id")
    department = django_filters.CharFilter(field_name="department", lookup_expr="iexact")
    recipient = django_filters.CharFilter(field_name="recipient", lookup_expr="icontains")
    date_from = django_filters.DateFilter(field_name="distributed_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="distributed_at", lookup_expr="date__lte")

    class Meta:
        model = Distribution
        fields = ["item_id", "status", "department"]


class WasteRecordFilter(django_filters.FilterSet):
    item_id = django_filters.UUIDFilter(field_name="item_id")
    date_from = django_filters.DateFilter(field_name="disposed_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="disposed_at", lookup_expr="date__lte")

    class Meta:
        model = WasteRecord
        fields = ["item_id", "waste_type"]


class UsageRecordFilter(django_filters.FilterSet):
    item_id = django_filters.UUIDFilter(field_name="item_id")
    lot_id = django_filters.UUIDFilter(field_name="lot_id")
    department = django_filters.CharFilter(field_name="department", lookup_expr="iexact")
    date_from = django_filters.DateFilter(field_name="used_at", lookup_expr="date__gte")
    date_to = django_filters.DateFilter(field_name="used_at", lookup_expr="date__lte")

    class Meta:
        model = UsageRecord
        fields = ["item_id", "lot_id", "batch_ref", "department"]
