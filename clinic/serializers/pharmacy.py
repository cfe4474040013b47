from rest_framework import serializers

from .common import CleanCharField


class PharmacyStockSerializer(serializers.Serializer):
    drugName = CleanCharField(required=True, max_length=255, source='drug_name')
    genericName = CleanCharField(max_length=100, source='generic_name')
    form = CleanCharField(max_length=50)
    strength = CleanCharField(max_length=100)
    quantityInStock = serializers.IntegerField(required=False, min_value=0, source='quantity_in_stock')
    reorderLevel = serializers.IntegerField(required=False, min_value=0, source='reorder_level')
    unit = CleanCharField(max_length=50)
    unitCost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False, source='unit_cost')
    sellingPrice = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False,
                                            source='selling_price')
    batchNumber = CleanCharField(max_length=100, source='batch_number')
    expiryDate = serializers.DateField(required=False, allow_null=True, source='expiry_date')
    supplier = CleanCharField(max_length=255)
    isActive = serializers.BooleanField(required=False, source='is_active')
