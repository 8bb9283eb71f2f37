from rest_framework import serializers

from .models import RewardSource


class RewardIntakeSerializer(serializers.Serializer):
    """
    Validate a reward event from the quiz collaborator.

    Fields:
        student (UUID): Student who earned the reward
        coins_earned (int): Coins the quiz result is worth
        id (UUID, optional): Idempotency key; redelivering it is harmless
    """

    student = serializers.UUIDField()
    coins_earned = serializers.IntegerField(min_value=0)
    id = serializers.UUIDField(required=False)


class RewardSourceSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.display_name', read_only=True)
    transaction_id = serializers.UUIDField(read_only=True, allow_null=True)

    class Meta:
        model = RewardSource
        fields = [
            'id',
            'student',
            'student_name',
            'coins_earned',
            'status',
            'attempts',
            'last_attempt_at',
            'next_attempt_at',
            'last_error',
            'transaction_id',
            'created_at',
            'completed_at',
        ]
        read_only_fields = fields


class RewardGrantSerializer(serializers.Serializer):
    granted = serializers.BooleanField()
    transaction_id = serializers.UUIDField(allow_null=True)
    duplicate = serializers.BooleanField()
    new_balance = serializers.IntegerField(allow_null=True)


class RecoveryStatusSerializer(serializers.Serializer):
    pending = serializers.IntegerField()
    processing = serializers.IntegerField()
    completed = serializers.IntegerField()
    failed = serializers.IntegerField()
