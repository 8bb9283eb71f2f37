"""
Typed metadata attached to ledger rows.

Each transaction type has exactly one metadata variant. Variants are pydantic
models tagged with ``kind`` and form a discriminated union; they are dumped
into ``CurrencyTransaction.metadata`` and parsed back with ``parse_metadata``.
Anything else is rejected at the boundary so free-form dictionaries never
reach the ledger.
"""
from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, TypeAdapter, ValidationError

from .models import TransactionType
from .exceptions import InvalidTransactionError


class LedgerMetadata(BaseModel):
    model_config = ConfigDict(frozen=True, extra='forbid')


class EarnMetadata(LedgerMetadata):
    """Quiz reward; links the row to its reward source."""

    kind: Literal['earn'] = 'earn'
    reward_source_id: UUID


class SpendMetadata(LedgerMetadata):
    """Store purchase; keeps the item and its price at purchase time."""

    kind: Literal['spend'] = 'spend'
    item_id: UUID
    item_name: StrictStr = Field(min_length=1)
    unit_cost: StrictInt = Field(gt=0)


class GrantMetadata(LedgerMetadata):
    kind: Literal['grant'] = 'grant'
    reason: StrictStr = ''


class DeductMetadata(LedgerMetadata):
    kind: Literal['deduct'] = 'deduct'
    reason: StrictStr = ''


TransactionMetadata = Annotated[
    Union[EarnMetadata, SpendMetadata, GrantMetadata, DeductMetadata],
    Field(discriminator='kind'),
]

metadata_adapter = TypeAdapter(TransactionMetadata)


def metadata_to_dict(variant):
    """Serialize a variant for storage, tagged with its kind."""
    return variant.model_dump(mode='json')


def format_validation_error(exc):
    return '; '.join(
        f"{'.'.join(str(part) for part in error['loc']) or 'metadata'}: {error['msg']}"
        for error in exc.errors()
    )


def parse_metadata(transaction_type, data):
    """
    Build the metadata variant for ``transaction_type`` from ``data``.

    ``data`` may already be a variant instance or a dict as stored in the
    database. A dict without ``kind`` is tagged with the transaction type.
    Raises InvalidTransactionError if the variant does not match the
    transaction type, carries unknown or missing fields, or a field has the
    wrong type.
    """
    transaction_type = TransactionType(transaction_type)

    if isinstance(data, LedgerMetadata):
        variant = data
    elif isinstance(data, dict):
        payload = dict(data)
        payload.setdefault('kind', transaction_type.value)
        try:
            variant = metadata_adapter.validate_python(payload)
        except ValidationError as e:
            raise InvalidTransactionError(
                f"Invalid {transaction_type} metadata: {format_validation_error(e)}"
            )
    else:
        raise InvalidTransactionError(
            f"{transaction_type} transactions require {transaction_type.label}Metadata"
        )

    if variant.kind != transaction_type.value:
        raise InvalidTransactionError(
            f"Metadata of kind '{variant.kind}' cannot be attached to a {transaction_type} transaction"
        )

    return variant
