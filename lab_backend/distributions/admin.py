# distributions/admin.py

from django.contrib import admin

from distributions.models import (
    Distribution,
    DistributionLot,
    UsageRecord,
    WasteLot,
    WasteRecord,
)


class _ReadOnlyAdmin(admin.ModelAdmin):
    """Stock movements are written by the services only."""

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class DistributionLotInline(admin.TabularInline):
    model = DistributionLot
    extra = 0
    fields = ("lot", "lot_number", "quantity_used")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class WasteLotInline(admin.TabularInline):
    model = WasteLot
    extra = 0
    fields = ("lot", "lot_number", "quantity_used")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Distribution)
class DistributionAdmin(_ReadOnlyAdmin):
    list_display = ("item", "quantity", "recipient", "department", "status", "distributed_at")
    list_filter = ("status", "department")
    search_fields = ("item__code", "item__name", "recipient")
    list_select_related = ("item",)
    inlines = [DistributionLotInline]


@admin.register(WasteRecord)
class WasteRecordAdmin(_ReadOnlyAdmin):
    list_display = ("item", "quantity", "waste_type", "certificate_no", "disposed_at")
    list_filter = ("waste_type",)
    search_fields = ("item__code", "item__name", "certificate_no")
    list_select_related = ("item",)
    inlines = [WasteLotInline]


@admin.register(UsageRecord)
class UsageRecordAdmin(_ReadOnlyAdmin):
    list_display = ("item", "lot_number", "quantity_used", "department", "received_by", "used_at")
    list_filter = ("department",)
    search_fields = ("item__code", "item__name", "lot_number", "received_by")
    list_select_related = ("item",)
