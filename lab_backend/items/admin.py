# items/admin.py

from django.contrib import admin

from items.models import ItemDefinition, Lot


class LotInline(admin.TabularInline):
    model = Lot
    extra = 0
    can_delete = False
    fields = (
        "lot_number",
        "initial_quantity",
        "current_quantity",
        "expiry_date",
        "received_date",
        "status",
    )
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ItemDefinition)
class ItemDefinitionAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "department", "category", "unit", "min_stock", "status")
    list_filter = ("status", "department", "category", "chemical_type")
    search_fields = ("code", "name", "catalog_no", "brand", "supplier")
    readonly_fields = ("created_at", "updated_at", "created_by", "updated_by")
    inlines = [LotInline]


@admin.register(Lot)
class LotAdmin(admin.ModelAdmin):
    """
    Read-only window on the ledger: quantities move only via services.
    """

    list_display = (
        "lot_number",
        "item",
        "current_quantity",
        "initial_quantity",
        "expiry_date",
        "status",
    )
    list_filter = ("status",)
    search_fields = ("lot_number", "item__code", "item__name")
    list_select_related = ("item",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
