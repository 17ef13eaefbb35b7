# purchases/admin.py

from django.contrib import admin

from purchases.models import Purchase, Receipt


class ReceiptInline(admin.TabularInline):
    model = Receipt
    extra = 0
    can_delete = False
    fields = ("lot_number", "quantity", "expiry_date", "received_by", "received_at", "invoice_no")
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    """
    Inspection only. Lifecycle steps go through the API so the state machine
    and the lot ledger stay in charge.
    """

    list_display = (
        "request_number",
        "item",
        "requested_qty",
        "ordered_qty",
        "received_qty_total",
        "status",
        "urgency",
        "requested_at",
    )
    list_filter = ("status", "urgency", "department")
    search_fields = ("request_number", "item__code", "item__name", "supplier_name", "po_number")
    list_select_related = ("item",)
    inlines = [ReceiptInline]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("purchase", "lot_number", "quantity", "expiry_date", "received_at")
    search_fields = ("lot_number", "purchase__request_number", "invoice_no")
    list_select_related = ("purchase",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
