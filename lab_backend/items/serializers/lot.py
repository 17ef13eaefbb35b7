# items/serializers/lot.py

"""
Lot serializers.

Quantities are never writable through a lot update: lots are created with
current == initial and only allocation services decrement them.
"""

from __future__ import annotations

from rest_framework import serializers

from items.models import Lot
from items.services.fefo import POLICIES, POLICY_FEFO


class LotSerializer(serializers.ModelSerializer):
    item_id = serializers.UUIDField(source="item.id", read_only=True)
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)

    class Meta:
        model = Lot
        fields = [
            "id",
            "item_id",
            "item_code",
            "item_name",
            "lot_number",
            "initial_quantity",
            "current_quantity",
            "expiry_date",
            "received_date",
            "status",
            "manufacturer",
            "catalog_no",
            "storage_location",
            "invoice_no",
            "attachment_url",
            "attachment_name",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class LotCreateSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    lot_number = serializers.CharField(max_length=128)
    initial_quantity = serializers.IntegerField(min_value=1)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    received_date = serializers.DateField(required=False, allow_null=True)
    manufacturer = serializers.CharField(max_length=200, required=False, allow_blank=True)
    catalog_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    storage_location = serializers.CharField(max_length=120, required=False, allow_blank=True)
    invoice_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    attachment_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    attachment_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


class LotUpdateSerializer(serializers.Serializer):
    """Metadata-only PATCH. Quantity and status keys are refused, not ignored."""

    LOCKED_KEYS = ("initial_quantity", "current_quantity", "status", "item_id")

    lot_number = serializers.CharField(max_length=128, required=False)
    expiry_date = serializers.DateField(required=False, allow_null=True)
    received_date = serializers.DateField(required=False)
    manufacturer = serializers.CharField(max_length=200, required=False, allow_blank=True)
    catalog_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    storage_location = serializers.CharField(max_length=120, required=False, allow_blank=True)
    invoice_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    attachment_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    attachment_name = serializers.CharField(max_length=255, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        locked = [key for key in self.LOCKED_KEYS if key in self.initial_data]
        if locked:
            raise serializers.ValidationError(
                {key: "cannot be changed on a lot" for key in locked}
            )
        return attrs


class AllocationRequestSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1)
    lot_id = serializers.UUIDField(required=False, allow_null=True)
    policy = serializers.ChoiceField(choices=sorted(POLICIES), default=POLICY_FEFO)


class AllocationSerializer(serializers.Serializer):
    lot_id = serializers.UUIDField()
    lot_number = serializers.CharField()
    quantity_used = serializers.IntegerField()


class AllocationResultSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    requested = serializers.IntegerField()
    total = serializers.IntegerField()
    allocations = AllocationSerializer(many=True)
