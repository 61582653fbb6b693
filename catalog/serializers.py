"""
Serializers for catalog API endpoints.
"""
from rest_framework import serializers

from .attributes import AttributeSelection
from .exceptions import InvalidAttributeSelection
from .models import Product


class ProductMinimalSerializer(serializers.ModelSerializer):
    """Minimal serializer for lists and nested representations."""
    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'price', 'published']


class DeletedProductSerializer(serializers.ModelSerializer):
    """Recycle bin entry."""
    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'product_type', 'updated_at']


class ProductIdsSerializer(serializers.Serializer):
    """
    Request body for recycle bin batch operations:
    {"product_ids": [1, 2, 3]}
    """
    product_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
        max_length=1000
    )


class RecycleBinReportSerializer(serializers.Serializer):
    success_count = serializers.IntegerField()
    succeeded = serializers.ListField(child=serializers.IntegerField())
    failed = serializers.ListField(child=serializers.DictField())
    skipped = serializers.ListField(child=serializers.IntegerField())


class InventoryAdjustmentSerializer(serializers.Serializer):
    """
    Request body for stock adjustments:
    {"decrease": true, "quantity": 2, "attribute_selection": {"12": [31]}}
    """
    decrease = serializers.BooleanField()
    quantity = serializers.IntegerField(min_value=0)
    attribute_selection = serializers.JSONField(required=False, allow_null=True)

    def validate_attribute_selection(self, value):
        try:
            return AttributeSelection.from_raw(value)
        except InvalidAttributeSelection as e:
            raise serializers.ValidationError(str(e))


class AdjustInventoryResultSerializer(serializers.Serializer):
    stock_quantity_old = serializers.IntegerField()
    stock_quantity_new = serializers.IntegerField()
