# reports/serializers.py

from rest_framework import serializers


class StockSummarySerializer(serializers.Serializer):
    item_count = serializers.IntegerField()
    total_stock = serializers.IntegerField()
    available_stock = serializers.IntegerField()
    expired_stock = serializers.IntegerField()
    low_stock_count = serializers.IntegerField()
    lots_with_stock = serializers.IntegerField()
    expiring_lot_count = serializers.IntegerField()
    pending_order_qty = serializers.IntegerField()
    expiry_warning_days = serializers.IntegerField()


class ExpiringLotSerializer(serializers.Serializer):
    lot_id = serializers.UUIDField()
    lot_number = serializers.CharField()
    item_id = serializers.UUIDField()
    item_code = serializers.CharField()
    item_name = serializers.CharField()
    department = serializers.CharField()
    current_quantity = serializers.IntegerField()
    expiry_date = serializers.DateField()
    days_left = serializers.IntegerField()
    is_expired = serializers.BooleanField()
    storage_location = serializers.CharField()


class DepartmentTotalsSerializer(serializers.Serializer):
    department = serializers.CharField()
    unique_items = serializers.IntegerField()
    total_lots = serializers.IntegerField()
    total_quantity = serializers.IntegerField()
