"""Boundary request models for incoming transaction writes."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class TransactionRequest(BaseModel):
    """Payload for creating or updating a transaction.

    Malformed input (non-positive amount, empty type) is rejected here with a
    ``pydantic.ValidationError`` so it never reaches the service write path.
    """

    model_config = ConfigDict(frozen=True)

    amount: Decimal
    type: str
    parent_id: Optional[int] = None

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_from_text(cls, value):
        # Floats go through str() so 0.1 stays Decimal("0.1")
        if isinstance(value, float):
            return str(value)
        return value

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, value: Decimal) -> Decimal:
        if not value.is_finite() or value <= 0:
            raise ValueError("amount must be positive")
        return value

    @field_validator("type")
    @classmethod
    def _type_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("type must not be empty")
        return value


def status_response() -> dict:
    """Acknowledgement returned after a successful write."""
    return {"status": "ok"}


def sum_response(total: Decimal) -> dict:
    """Shape returned by the subtree sum query."""
    return {"sum": str(total)}
