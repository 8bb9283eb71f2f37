# ==========================================
# apps/currency/admin.py
# ==========================================

from django.contrib import admin
from django.utils.html import format_html
from .models import CurrencyTransaction, TransactionType


@admin.register(CurrencyTransaction)
class CurrencyTransactionAdmin(admin.ModelAdmin):
    """
    Read-only view of the ledger.

    Rows are immutable; corrections are made with a new grant or deduction,
    never by editing or deleting an existing row.
    """

    list_display = [
        'created_at',
        'student',
        'amount_badge',
        'transaction_type',
        'description',
        'actor',
    ]
    list_filter = ['transaction_type', 'created_at']
    search_fields = ['student__display_name', 'description', 'actor__email']
    date_hierarchy = 'created_at'
    ordering = ['-created_at']
    list_select_related = ['student', 'actor']

    readonly_fields = [
        'id',
        'student',
        'actor',
        'amount',
        'transaction_type',
        'description',
        'metadata',
        'created_at',
    ]

    def amount_badge(self, obj):
        """Credits green, debits red."""
        color = '#6B8E5E' if obj.transaction_type in (TransactionType.EARN, TransactionType.GRANT) else '#B85C5C'
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, f'{obj.amount:+d}'
        )
    amount_badge.short_description = 'Amount'
    amount_badge.admin_order_field = 'amount'

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
