from django.contrib import admin, messages
from django.utils.html import format_html
from .models import RewardSource, RewardStatus
from apps.currency.exceptions import CurrencyServiceError
from .exceptions import RewardsServiceError
from .services import grant_reward


STATUS_COLORS = {
    RewardStatus.PENDING: '#C9A227',
    RewardStatus.PROCESSING: '#5B7DB1',
    RewardStatus.COMPLETED: '#6B8E5E',
    RewardStatus.FAILED: '#B85C5C',
}


@admin.register(RewardSource)
class RewardSourceAdmin(admin.ModelAdmin):
    """
    Reward sources with their retry state.

    The failed filter is the manual review queue. Retrying from here goes
    through grant_reward, so a reward is still paid at most once.
    """

    list_display = [
        'id',
        'student',
        'coins_earned',
        'status_badge',
        'attempts',
        'next_attempt_at',
        'created_at',
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['id', 'student__display_name', 'last_error']
    readonly_fields = [
        'id', 'student', 'coins_earned', 'status', 'attempts',
        'last_attempt_at', 'next_attempt_at', 'last_error',
        'transaction', 'created_at', 'updated_at', 'completed_at',
    ]
    date_hierarchy = 'created_at'

    def status_badge(self, obj):
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 8px; '
            'border-radius: 10px; font-size: 11px;">{}</span>',
            STATUS_COLORS[obj.status], obj.get_status_display()
        )
    status_badge.short_description = 'Status'
    status_badge.admin_order_field = 'status'

    def has_add_permission(self, request):
        return False

    actions = ['retry_rewards']

    @admin.action(description='Grant selected rewards now')
    def retry_rewards(self, request, queryset):
        granted = 0
        for source in queryset.exclude(status=RewardStatus.COMPLETED):
            try:
                if grant_reward(source.id).granted:
                    granted += 1
            except (CurrencyServiceError, RewardsServiceError) as e:
                self.message_user(request, f'Reward {source.id}: {e}', level=messages.ERROR)
        self.message_user(request, f'Granted {granted} reward(s).')
