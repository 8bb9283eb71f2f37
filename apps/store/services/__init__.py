"""
Store app services layer.

Purchases go through ``apps.currency.services.update_balance`` for the debit
and add the inventory row in the same transaction.
"""

from apps.store.exceptions import (
    StoreServiceError,
    ItemNotFoundError,
    AlreadyOwnedError,
    NotOwnedError,
)

from .purchase import (
    PurchaseResult,
    purchase,
    student_inventory,
    set_equipped,
)


__all__ = [
    'StoreServiceError',
    'ItemNotFoundError',
    'AlreadyOwnedError',
    'NotOwnedError',
    'PurchaseResult',
    'purchase',
    'student_inventory',
    'set_equipped',
]
