"""
Domain-specific exceptions for the rewards app.

A reward source that was already processed is not an error: grant_reward
returns the earlier result with ``duplicate=True``.
"""


class RewardsServiceError(Exception):
    """Base exception for all rewards service errors."""
    pass


class RewardSourceNotFoundError(RewardsServiceError):
    """Raised when a reward source does not exist."""
    pass


class InvalidRewardError(RewardsServiceError):
    """Raised when a reward amount is negative or not an integer."""
    pass


class RewardConflictError(RewardsServiceError):
    """
    Raised when a reward source ID is reused with a different student or
    amount than the one originally recorded.
    """
    pass


class RewardAmountMismatchError(RewardsServiceError):
    """Raised when an explicit grant amount differs from the recorded reward."""
    pass
