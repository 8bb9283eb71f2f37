from rest_framework import serializers

from .models import InventoryEntry, StoreItem


class PurchaseInputSerializer(serializers.Serializer):
    """
    Validate input for a purchase.

    Fields:
        item (UUID): Store item to buy
    """

    item = serializers.UUIDField()


class StoreItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = StoreItem
        fields = ['id', 'name', 'description', 'cost']
        read_only_fields = fields


class PurchaseResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
    transaction_id = serializers.UUIDField()
    inventory_entry_id = serializers.UUIDField()
    new_balance = serializers.IntegerField()
    item = StoreItemSerializer()


class InventoryEntrySerializer(serializers.ModelSerializer):
    item = StoreItemSerializer(read_only=True)

    class Meta:
        model = InventoryEntry
        fields = ['id', 'item', 'is_equipped', 'acquired_at']
        read_only_fields = fields


class EquipInputSerializer(serializers.Serializer):
    equipped = serializers.BooleanField(default=True)
