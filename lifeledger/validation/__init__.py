"""Transaction validation package."""

from lifeledger.validation.validator import (
    AMOUNT_LIMIT,
    AMOUNT_MAX_DECIMALS,
    CATEGORY_KIND_MISMATCH,
    CATEGORY_REQUIRED,
    INVALID_AMOUNT,
    TAG_REQUIRED,
    LedgerError,
    TransactionEditor,
    TransactionNotFoundError,
    TransactionRejectedError,
    TransactionValidator,
    normalize_timestamp,
    parse_amount,
)

__all__ = [
    "AMOUNT_LIMIT",
    "AMOUNT_MAX_DECIMALS",
    "CATEGORY_KIND_MISMATCH",
    "CATEGORY_REQUIRED",
    "INVALID_AMOUNT",
    "TAG_REQUIRED",
    "LedgerError",
    "TransactionEditor",
    "TransactionNotFoundError",
    "TransactionRejectedError",
    "TransactionValidator",
    "normalize_timestamp",
    "parse_amount",
]
