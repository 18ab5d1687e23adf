"""Transaction service: parent validation, cycle safety and subtree sums."""

import threading
from decimal import Decimal
from typing import List, Optional

from db.store import TransactionStore
from logger import get_logger
from models.transaction import Transaction
from services.result import ErrorKind, Result

logger = get_logger()


class TransactionService:
    """Service for managing the transaction hierarchy.

    This is the only write path into the store. Every parent reference is
    checked before the write reaches the store, so a rejected write never
    shows up in stored state.
    """

    def __init__(self, store: TransactionStore):
        """Initialize the transaction service.

        Args:
            store: Transaction store the service reads from and writes to.
        """
        self.store = store
        # Held across validate-then-upsert so concurrent writers cannot
        # each pass the cycle check and jointly close a loop.
        self._write_lock = threading.Lock()

    def create_or_update(
        self,
        transaction_id: int,
        amount: Decimal,
        type: str,
        parent_id: Optional[int] = None,
    ) -> Result:
        """Create a transaction, or replace every field of an existing one.

        Re-submitting the same values is a no-op as far as observable state
        goes; an existing ID is an update, never an error.

        Args:
            transaction_id: Caller-supplied transaction ID.
            amount: Positive amount (validated by the caller).
            type: Non-empty category label (validated by the caller).
            parent_id: Optional ID of the parent transaction.

        Returns:
            Result with the stored Transaction, or an INVALID_PARENT failure
            if the parent is the transaction itself, does not exist, or would
            create a cycle.

        Raises:
            ValueError: If transaction_id is None.
        """
        if transaction_id is None:
            raise ValueError("Transaction ID cannot be None")

        with self._write_lock:
            if parent_id is not None:
                message = self._validate_parent(transaction_id, parent_id)
                if message is not None:
                    logger.warning(
                        f"Rejected write to transaction {transaction_id}: {message}"
                    )
                    return Result.failure(
                        "create_or_update", ErrorKind.INVALID_PARENT, message
                    )

            transaction = Transaction(
                id=transaction_id,
                amount=amount,
                type=type,
                parent_id=parent_id,
            )
            self.store.upsert(transaction)

        logger.debug(
            f"Stored transaction {transaction_id} (type={type}, parent={parent_id})"
        )
        return Result.success("create_or_update", transaction)

    def get_by_id(self, transaction_id: int) -> Result:
        """Get a single transaction by ID.

        Returns:
            Result with the Transaction, or a NOT_FOUND failure.
        """
        transaction = self.store.get(transaction_id)
        if transaction is None:
            return _not_found("get_by_id", transaction_id)
        return Result.success("get_by_id", transaction)

    def ids_by_type(self, type: str) -> List[int]:
        """Get the IDs of all transactions with the given type.

        Returns:
            Sorted list of IDs; empty if no transaction has this type.
        """
        return sorted(self.store.ids_by_type(type))

    def find_all(self) -> List[Transaction]:
        """Get all transactions, ordered by ID."""
        return self.store.all()

    def get_children(self, transaction_id: int) -> List[Transaction]:
        """Get the direct children of a transaction, ordered by ID."""
        return self.store.children_of(transaction_id)

    def get_ancestors(self, transaction_id: int) -> Result:
        """Get the ancestor chain of a transaction.

        Returns:
            Result with the list of ancestors from the direct parent up to
            the root (empty for a root), or a NOT_FOUND failure. The walk
            stops early at a dangling reference or a revisited node.
        """
        transaction = self.store.get(transaction_id)
        if transaction is None:
            return _not_found("get_ancestors", transaction_id)

        ancestors = []
        visited = {transaction_id}
        current_id = transaction.parent_id
        while current_id is not None and current_id not in visited:
            visited.add(current_id)
            current = self.store.get(current_id)
            if current is None:
                break
            ancestors.append(current)
            current_id = current.parent_id

        return Result.success("get_ancestors", ancestors)

    def calculate_sum(self, transaction_id: int) -> Result:
        """Calculate the total amount of a transaction and all its descendants.

        The subtree is read from the store in one locked walk, so the total
        matches a single state of the hierarchy even while writers reparent
        nodes. The walk skips nodes it has already visited, so a corrupted
        hierarchy cannot loop forever. All arithmetic stays in Decimal.

        Args:
            transaction_id: Root of the subtree to total.

        Returns:
            Result with the Decimal total, or a NOT_FOUND failure.
        """
        nodes = self.store.subtree(transaction_id)
        if not nodes:
            return _not_found("calculate_sum", transaction_id)

        total = Decimal("0")
        for node in nodes:
            if node.amount is not None:
                total += node.amount

        return Result.success("calculate_sum", total)

    def would_create_cycle(self, transaction_id: int, parent_id: int) -> bool:
        """Check whether making ``parent_id`` the parent of ``transaction_id``
        would create a cycle.

        Walks up the ancestor chain starting at ``parent_id``. Reaching
        ``transaction_id`` or revisiting a node means a cycle; reaching a root
        or a dangling reference means no cycle.
        """
        visited = set()
        current_id = parent_id

        while current_id is not None:
            if current_id == transaction_id:
                return True
            if current_id in visited:
                return True
            visited.add(current_id)

            current = self.store.get(current_id)
            if current is None:
                break
            current_id = current.parent_id

        return False

    def _validate_parent(self, transaction_id: int, parent_id: int) -> Optional[str]:
        """Return the reason a parent assignment is invalid, or None if valid."""
        if parent_id == transaction_id:
            return f"Transaction {transaction_id} cannot be its own parent"

        if not self.store.exists_by_id(parent_id):
            return f"Parent transaction {parent_id} does not exist"

        if self.would_create_cycle(transaction_id, parent_id):
            return (
                f"Assigning parent {parent_id} to transaction {transaction_id} "
                f"would create a cycle"
            )

        return None


def _not_found(op: str, transaction_id: int) -> Result:
    return Result.failure(
        op, ErrorKind.NOT_FOUND, f"Transaction {transaction_id} not found"
    )
