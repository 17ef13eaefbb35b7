# distributions/api/serializers.py

from rest_framework import serializers

from distributions.models import (
    Distribution,
    DistributionLot,
    UsageRecord,
    WasteLot,
    WasteRecord,
)


class DistributionLotSerializer(serializers.ModelSerializer):
    lot_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = DistributionLot
        fields = ["lot_id", "lot_number", "quantity_used"]


class WasteLotSerializer(serializers.ModelSerializer):
    lot_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = WasteLot
        fields = ["lot_id", "lot_number", "quantity_used"]


class DistributionSerializer(serializers.ModelSerializer):
    item_id = serializers.UUIDField(read_only=True)
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    lots = DistributionLotSerializer(many=True, read_only=True)

    class Meta:
        model = Distribution
        fields = [
            "id",
            "item_id",
            "item_code",
            "item_name",
            "quantity",
            "recipient",
            "department",
            "purpose",
            "use_fefo",
            "status",
            "distributed_by",
            "distributed_at",
            "completed_by",
            "completed_at",
            "lots",
        ]
        read_only_fields = fields


class DistributeSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    recipient = serializers.CharField(max_length=200)
    department = serializers.CharField(max_length=120, required=False, allow_blank=True)
    purpose = serializers.CharField(max_length=255, required=False, allow_blank=True)
    lot_id = serializers.UUIDField(required=False, allow_null=True)


class WasteRecordSerializer(serializers.ModelSerializer):
    item_id = serializers.UUIDField(read_only=True)
    item_code = serializers.CharField(source="item.code", read_only=True)
    item_name = serializers.CharField(source="item.name", read_only=True)
    lots = WasteLotSerializer(many=True, read_only=True)

    class Meta:
        model = WasteRecord
        fields = [
            "id",
            "item_id",
            "item_code",
            "item_name",
            "quantity",
            "waste_type",
            "reason",
            "disposal_method",
            "certificate_no",
            "notes",
            "disposed_by",
            "disposed_at",
            "lots",
        ]
        read_only_fields = fields


class RecordWasteSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    waste_type = serializers.ChoiceField(choices=WasteRecord.WASTE_TYPES)
    reason = serializers.CharField(required=False, allow_blank=True)
    disposal_method = serializers.CharField(max_length=200, required=False, allow_blank=True)
    certificate_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    lot_id = serializers.UUIDField(required=False, allow_null=True)


class UsageRecordSerializer(serializers.ModelSerializer):
    item_id = serializers.UUIDField(read_only=True)
    item_code = serializers.CharField(source="item.code", read_only=True)
    lot_id = serializers.UUIDField(read_only=True)

    class Meta:
        model = UsageRecord
        fields = [
            "id",
            "batch_ref",
            "item_id",
            "item_code",
            "lot_id",
            "lot_number",
            "quantity_used",
            "used_by",
            "received_by",
            "department",
            "purpose",
            "notes",
            "used_at",
        ]
        read_only_fields = fields


class ConsumeSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)
    lot_id = serializers.UUIDField(required=False, allow_null=True)
    department = serializers.CharField(max_length=120, required=False, allow_blank=True)
    purpose = serializers.CharField(max_length=255, required=False, allow_blank=True)
    received_by = serializers.CharField(max_length=200, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
