from django.contrib import admin
from .models import InventoryEntry, StoreItem


@admin.register(StoreItem)
class StoreItemAdmin(admin.ModelAdmin):
    list_display = ['name', 'cost', 'is_active', 'created_at']
    list_filter = ['is_active']
    search_fields = ['name']


@admin.register(InventoryEntry)
class InventoryEntryAdmin(admin.ModelAdmin):
    """Ownership rows are created by purchases only."""

    list_display = ['student', 'item', 'is_equipped', 'acquired_at']
    list_filter = ['is_equipped']
    search_fields = ['student__display_name', 'item__name']
    readonly_fields = ['student', 'item', 'acquired_at']

    def has_add_permission(self, request):
        return False
