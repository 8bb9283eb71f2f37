"""
Domain-specific exceptions for the currency ledger.

These exceptions represent business rule violations and storage failures.
Views catch them and convert them to HTTP responses; the reward recovery
sweep retries only the ``TransientLedgerError`` family.
"""


class CurrencyServiceError(Exception):
    """Base exception for all currency service errors."""
    pass


class StudentNotFoundError(CurrencyServiceError):
    """Raised when a student does not exist."""
    pass


class ClassroomNotFoundError(CurrencyServiceError):
    """Raised when a classroom does not exist."""
    pass


class InvalidTransactionError(CurrencyServiceError):
    """Raised when an amount, type or metadata variant is not acceptable."""
    pass


class InsufficientFundsError(CurrencyServiceError):
    """Raised when a debit would take a balance below zero."""

    def __init__(self, student_id, balance, amount):
        self.student_id = student_id
        self.balance = balance
        self.amount = amount
        super().__init__(
            f"Insufficient funds: balance is {balance} coins, "
            f"cannot apply {amount}"
        )


class ImmutableLedgerError(CurrencyServiceError):
    """Raised on any attempt to update or delete a ledger row."""
    pass


class TransientLedgerError(CurrencyServiceError):
    """Base for failures where retrying the whole operation may succeed."""
    pass


class LockTimeoutError(TransientLedgerError):
    """Raised when the balance lock or statement timeout expires."""
    pass


class StorageUnavailableError(TransientLedgerError):
    """Raised when the database cannot be reached or fails mid-operation."""
    pass


class BalanceDivergenceError(CurrencyServiceError):
    """Raised when a cached balance disagrees with its ledger sum."""

    def __init__(self, divergences):
        self.divergences = divergences
        super().__init__(
            f"{len(divergences)} student balance(s) diverge from the ledger"
        )
