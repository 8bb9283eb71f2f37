"""
Rewards services.

    from apps.rewards.services import submit_reward, grant_reward, RecoveryTaskManager
"""

from .attempts import backoff_delay, claim_attempt, record_attempt_failure
from .reward_processing import (
    RewardGrant,
    grant_reward,
    record_reward_source,
    submit_reward,
)
from .recovery import RecoveryTaskManager, SweepReport

__all__ = [
    'backoff_delay',
    'claim_attempt',
    'record_attempt_failure',
    'RewardGrant',
    'grant_reward',
    'record_reward_source',
    'submit_reward',
    'RecoveryTaskManager',
    'SweepReport',
]
