"""
Currency app services layer.

``update_balance`` is the single writer of ledger rows and cached balances;
every other module in the project goes through it.
"""

from apps.currency.exceptions import (
    CurrencyServiceError,
    StudentNotFoundError,
    ClassroomNotFoundError,
    InvalidTransactionError,
    InsufficientFundsError,
    ImmutableLedgerError,
    TransientLedgerError,
    LockTimeoutError,
    StorageUnavailableError,
    BalanceDivergenceError,
)

from .ledger import (
    history,
    classroom_history,
)

from .balances import (
    BalanceSnapshot,
    authoritative_balance,
    cached_balance,
    balance_snapshot,
)

from .atomic_update import (
    BalanceUpdate,
    classify_database_error,
    update_balance,
    grant_coins,
    deduct_coins,
)

from .reconciliation import (
    BalanceDivergence,
    ReconciliationReport,
    check_balances,
    find_balance_divergences,
    reconcile_balances,
)


__all__ = [
    # Exceptions
    'CurrencyServiceError',
    'StudentNotFoundError',
    'ClassroomNotFoundError',
    'InvalidTransactionError',
    'InsufficientFundsError',
    'ImmutableLedgerError',
    'TransientLedgerError',
    'LockTimeoutError',
    'StorageUnavailableError',
    'BalanceDivergenceError',

    # Ledger store
    'history',
    'classroom_history',

    # Balance aggregator
    'BalanceSnapshot',
    'authoritative_balance',
    'cached_balance',
    'balance_snapshot',

    # Atomic update service
    'BalanceUpdate',
    'classify_database_error',
    'update_balance',
    'grant_coins',
    'deduct_coins',

    # Reconciliation
    'BalanceDivergence',
    'ReconciliationReport',
    'check_balances',
    'find_balance_divergences',
    'reconcile_balances',
]
