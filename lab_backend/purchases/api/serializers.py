# purchases/api/serializers.py

from rest_framework import serializers

from purchases.models import Purchase, Receipt


class ReceiptSerializer(serializers.ModelSerializer):
    lot_id = serializers.UUIDField(read_only=True)
    received_by_email = serializers.EmailField(source="received_by.email", read_only=True, default=None)

    class Meta:
        model = Receipt
        fields = [
            "id",
            "lot_id",
            "quantity",
            "lot_number",
            "expiry_date",
            "received_by",
            "received_by_email",
            "received_at",
            "invoice_no",
            "attachment_url",
            "attachment_name",
            "notes",
        ]
        read_only_fields = fields


class PurchaseSerializer(serializers.ModelSerializer):
    item_id = serializers.UUIDField(read_only=True)
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    pending_quantity = serializers.IntegerField(read_only=True)
    receipts = ReceiptSerializer(many=True, read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "request_number",
            "item_id",
            "item_code",
            "item_name",
            "department",
            "requested_qty",
            "requested_by",
            "requested_at",
            "urgency",
            "notes",
            "status",
            "approved_by",
            "approved_at",
            "approval_note",
            "rejected_by",
            "rejected_at",
            "rejection_reason",
            "ordered_by",
            "ordered_at",
            "supplier_name",
            "po_number",
            "ordered_qty",
            "received_qty_total",
            "pending_quantity",
            "last_received_at",
            "receipts",
        ]
        read_only_fields = fields


class PurchaseRequestSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    urgency = serializers.ChoiceField(choices=Purchase.URGENCIES, default=Purchase.URGENCY_NORMAL)
    department = serializers.CharField(max_length=120, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class ApprovePurchaseSerializer(serializers.Serializer):
    note = serializers.CharField(required=False, allow_blank=True)


class RejectPurchaseSerializer(serializers.Serializer):
    reason = serializers.CharField()


class OrderPurchaseSerializer(serializers.Serializer):
    supplier_name = serializers.CharField(max_length=200)
    po_number = serializers.CharField(max_length=64, required=False, allow_blank=True)
    ordered_qty = serializers.IntegerField(min_value=1, required=False, allow_null=True)


class ReceiveGoodsSerializer(serializers.Serializer):
    lot_number = serializers.CharField(max_length=128)
    quantity = serializers.IntegerField(min_value=1)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    over_receipt_ack = serializers.BooleanField(default=False)
    invoice_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    attachment_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    attachment_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    received_at = serializers.DateTimeField(required=False, allow_null=True)
