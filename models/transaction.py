from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class Transaction:
    id: int
    amount: Decimal  # always positive, validated at the boundary
    type: str
    parent_id: Optional[int] = None  # None means root

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> dict:
        """Convert transaction to its external representation.

        The amount is rendered as a decimal string and ``parent_id`` is only
        present when the transaction has a parent.
        """
        data = {
            "id": self.id,
            "amount": str(self.amount),
            "type": self.type,
        }
        if self.parent_id is not None:
            data["parent_id"] = self.parent_id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Build a Transaction from a dictionary produced by to_dict()."""
        parent_id = data.get("parent_id")
        return cls(
            id=int(data["id"]),
            amount=Decimal(str(data["amount"])),
            type=data["type"],
            parent_id=int(parent_id) if parent_id is not None else None,
        )
