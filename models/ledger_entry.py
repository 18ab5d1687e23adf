"""Ledger entry model for file-based ingestion."""

from dataclasses import dataclass

from models.request import TransactionRequest


@dataclass(frozen=True)
class LedgerEntry:
    """A single transaction write read from a ledger file.

    Attributes:
        id: Caller-supplied transaction ID.
        request: Validated amount, type and optional parent.
    """

    id: int
    request: TransactionRequest
