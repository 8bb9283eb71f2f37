from rest_framework import serializers

from .models import CurrencyTransaction


# =============================================================================
# Input Serializers
# =============================================================================

class CoinAdjustmentInputSerializer(serializers.Serializer):
    """
    Validate input for teacher grants and deductions.

    Fields:
        amount (int): Positive number of coins to add or remove
        reason (str): Optional reason shown in the student's history
    """

    amount = serializers.IntegerField(min_value=1)
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


# =============================================================================
# Output Serializers
# =============================================================================

class BalanceUpdateSerializer(serializers.Serializer):
    new_balance = serializers.IntegerField()
    transaction_id = serializers.UUIDField()


class BalanceSnapshotSerializer(serializers.Serializer):
    student_id = serializers.UUIDField()
    cached = serializers.IntegerField()
    authoritative = serializers.IntegerField()
    in_sync = serializers.BooleanField()


class CurrencyTransactionSerializer(serializers.ModelSerializer):
    """Read-only ledger row for history and audit screens."""

    actor_name = serializers.SerializerMethodField()

    class Meta:
        model = CurrencyTransaction
        fields = [
            'id',
            'student',
            'actor',
            'actor_name',
            'amount',
            'transaction_type',
            'description',
            'metadata',
            'created_at',
        ]
        read_only_fields = fields

    def get_actor_name(self, obj):
        if obj.actor:
            return obj.actor.get_display_name()
        return None


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    code = serializers.CharField()
