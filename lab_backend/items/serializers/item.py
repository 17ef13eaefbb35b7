# items/serializers/item.py

from __future__ import annotations

from rest_framework import serializers

from items.models import ItemDefinition


class ItemDefinitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = ItemDefinition
        fields = [
            "id",
            "code",
            "name",
            "category",
            "department",
            "unit",
            "min_stock",
            "ideal_stock",
            "max_stock",
            "supplier",
            "catalog_no",
            "brand",
            "storage_location",
            "storage_temp",
            "chemical_type",
            "msds_url",
            "notes",
            "status",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ItemWriteSerializer(serializers.Serializer):
    """
    Input validation only; persistence goes through item_registry.
    code is accepted on create and rejected on update if it changes.
    """

    code = serializers.CharField(max_length=64, required=False)
    name = serializers.CharField(max_length=255, required=False)
    category = serializers.CharField(max_length=120, required=False, allow_blank=True)
    department = serializers.CharField(max_length=120, required=False, allow_blank=True)
    unit = serializers.CharField(max_length=32, required=False, allow_blank=True)
    min_stock = serializers.IntegerField(min_value=0, required=False)
    ideal_stock = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    max_stock = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    supplier = serializers.CharField(max_length=200, required=False, allow_blank=True)
    catalog_no = serializers.CharField(max_length=120, required=False, allow_blank=True)
    brand = serializers.CharField(max_length=120, required=False, allow_blank=True)
    storage_location = serializers.CharField(max_length=120, required=False, allow_blank=True)
    storage_temp = serializers.CharField(max_length=64, required=False, allow_blank=True)
    chemical_type = serializers.ChoiceField(
        choices=[("", "None")] + list(ItemDefinition.ChemicalType.choices),
        required=False,
        allow_blank=True,
    )
    msds_url = serializers.CharField(max_length=500, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    status = serializers.ChoiceField(choices=ItemDefinition.Status.choices, required=False)

    def validate(self, attrs):
        if self.context.get("creating"):
            missing = [f for f in ("code", "name") if not (attrs.get(f) or "").strip()]
            if missing:
                raise serializers.ValidationError(
                    {f: f"{f} is required" for f in missing}
                )
        return attrs


class ItemStockViewSerializer(serializers.Serializer):
    item_id = serializers.UUIDField()
    code = serializers.CharField()
    name = serializers.CharField()
    department = serializers.CharField()
    unit = serializers.CharField()
    min_stock = serializers.IntegerField()
    total_stock = serializers.IntegerField()
    available_stock = serializers.IntegerField()
    expired_stock = serializers.IntegerField()
    active_lot_count = serializers.IntegerField()
    nearest_expiry = serializers.DateField(allow_null=True)
    stock_status = serializers.CharField()
    pending_order_qty = serializers.IntegerField()


class ItemImportSerializer(serializers.Serializer):
    rows = serializers.ListField(child=serializers.DictField(), allow_empty=False)


class ItemImportResultSerializer(serializers.Serializer):
    created = serializers.IntegerField()
    updated = serializers.IntegerField()
    lots_created = serializers.IntegerField()
    lots_updated = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())
