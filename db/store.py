"""In-memory transaction store with derived category and parent indexes."""

import threading
from typing import Dict, List, Optional, Set, Tuple

from models.transaction import Transaction


class TransactionStore:
    """Owns the transaction table and the indexes derived from it.

    The table, the category index (type -> ids) and the parent index
    (parent_id -> child ids) are guarded by a single lock, so every
    operation sees them in step with each other. Returned collections are
    fresh copies and Transaction instances are immutable, so callers never
    alias internal state.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._transactions: Dict[int, Transaction] = {}
        self._ids_by_type: Dict[str, Set[int]] = {}
        self._ids_by_parent: Dict[int, Set[int]] = {}

    def upsert(self, transaction: Transaction) -> None:
        """Insert a transaction or replace the one stored under its ID.

        Args:
            transaction: Transaction to store. No business validation is done.
        """
        with self._lock:
            existing = self._transactions.get(transaction.id)
            if existing is not None:
                self._unindex(existing)

            self._transactions[transaction.id] = transaction
            self._ids_by_type.setdefault(transaction.type, set()).add(transaction.id)
            if transaction.parent_id is not None:
                self._ids_by_parent.setdefault(transaction.parent_id, set()).add(
                    transaction.id
                )

    def get(self, transaction_id: int) -> Optional[Transaction]:
        """Get a transaction by ID.

        Returns:
            Transaction if found, None otherwise.
        """
        with self._lock:
            return self._transactions.get(transaction_id)

    def exists_by_id(self, transaction_id: int) -> bool:
        with self._lock:
            return transaction_id in self._transactions

    def ids_by_type(self, type: str) -> Set[int]:
        """Get the IDs of all transactions with the given type.

        Returns:
            A new set of IDs, empty if the type is unknown.
        """
        with self._lock:
            return set(self._ids_by_type.get(type, ()))

    def children_of(self, parent_id: int) -> List[Transaction]:
        """Get all transactions whose parent is ``parent_id``.

        Returns:
            List of direct children, ordered by ID. Empty if none.
        """
        with self._lock:
            return [
                self._transactions[child_id] for child_id in self._child_ids(parent_id)
            ]

    def subtree(self, transaction_id: int) -> List[Transaction]:
        """Get a transaction and all of its descendants as of one instant.

        The walk holds the lock throughout, so a concurrent reparent lands
        either wholly before or wholly after it. A node reached twice is
        only returned once.

        Returns:
            List of transactions in depth-first order, starting with the
            requested one. Empty if the ID is unknown.
        """
        with self._lock:
            nodes = []
            visited = set()
            stack = [transaction_id]
            while stack:
                current_id = stack.pop()
                if current_id in visited:
                    continue
                visited.add(current_id)

                current = self._transactions.get(current_id)
                if current is None:
                    continue
                nodes.append(current)

                for child_id in self._child_ids(current_id):
                    if child_id not in visited:
                        stack.append(child_id)
            return nodes

    def all(self) -> List[Transaction]:
        """Get a snapshot of every stored transaction, ordered by ID."""
        with self._lock:
            return [self._transactions[key] for key in sorted(self._transactions)]

    def snapshot(self) -> Tuple[List[Transaction], Dict[str, Set[int]]]:
        """Get every transaction and the category index as of one instant.

        Returns:
            Tuple of (transactions ordered by ID, copy of the type -> IDs index).
        """
        with self._lock:
            index = {type: set(ids) for type, ids in self._ids_by_type.items()}
            return self.all(), index

    def types(self) -> List[str]:
        """Get every type that currently has at least one transaction."""
        with self._lock:
            return sorted(self._ids_by_type)

    def __len__(self) -> int:
        with self._lock:
            return len(self._transactions)

    def _unindex(self, transaction: Transaction) -> None:
        # Caller must hold self._lock
        bucket = self._ids_by_type.get(transaction.type)
        if bucket is not None:
            bucket.discard(transaction.id)
            if not bucket:
                del self._ids_by_type[transaction.type]

        if transaction.parent_id is not None:
            children = self._ids_by_parent.get(transaction.parent_id)
            if children is not None:
                children.discard(transaction.id)
                if not children:
                    del self._ids_by_parent[transaction.parent_id]

    def _child_ids(self, parent_id: int) -> List[int]:
        # Caller must hold self._lock
        return sorted(self._ids_by_parent.get(parent_id, ()))
