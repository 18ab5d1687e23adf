"""Integrity checks over the transaction hierarchy.

Reports violations of the stored-data invariants without modifying
anything: dangling parent references, cycles in ancestor chains, and
category index entries out of step with the stored types.
"""

from dataclasses import dataclass
from typing import Dict, List, Set

from db.store import TransactionStore
from logger import get_logger
from models.transaction import Transaction

logger = get_logger()

SEVERITY_ERROR = "error"

CAT_DANGLING_PARENT = "dangling_parent"
CAT_CYCLE = "cycle"
CAT_INDEX = "index_mismatch"


@dataclass(frozen=True)
class Issue:
    """A single integrity problem found by CheckService."""

    severity: str
    category: str
    transaction_id: int
    message: str


class CheckService:
    """Service for checking store integrity."""

    def __init__(self, store: TransactionStore):
        self.store = store

    def check(self) -> List[Issue]:
        """Report integrity issues found in a snapshot of the store.

        Returns:
            List of Issue objects, empty if every invariant holds.
        """
        snapshot, index = self.store.snapshot()
        transactions = {t.id: t for t in snapshot}

        issues = []
        issues.extend(_check_parents(transactions))
        issues.extend(_check_cycles(transactions))
        issues.extend(_check_index(transactions, index))

        if issues:
            logger.warning(f"Integrity check found {len(issues)} issue(s)")
        else:
            logger.info(f"Integrity check passed for {len(transactions)} transactions")
        return issues


def _check_index(
    transactions: Dict[int, Transaction], index: Dict[str, Set[int]]
) -> List[Issue]:
    issues = []
    types = {t.type for t in transactions.values()} | set(index)
    for type in sorted(types):
        indexed = index.get(type, set())
        expected = {t.id for t in transactions.values() if t.type == type}
        for transaction_id in sorted(expected - indexed):
            issues.append(
                Issue(
                    SEVERITY_ERROR,
                    CAT_INDEX,
                    transaction_id,
                    f"Transaction {transaction_id} missing from index for type '{type}'",
                )
            )
        for transaction_id in sorted(indexed - expected):
            issues.append(
                Issue(
                    SEVERITY_ERROR,
                    CAT_INDEX,
                    transaction_id,
                    f"Transaction {transaction_id} wrongly indexed under type '{type}'",
                )
            )
    return issues


def _check_parents(transactions: Dict[int, Transaction]) -> List[Issue]:
    return [
        Issue(
            SEVERITY_ERROR,
            CAT_DANGLING_PARENT,
            t.id,
            f"Transaction {t.id} references missing parent {t.parent_id}",
        )
        for t in transactions.values()
        if t.parent_id is not None and t.parent_id not in transactions
    ]


def _check_cycles(transactions: Dict[int, Transaction]) -> List[Issue]:
    issues = []
    # IDs whose ancestor chain is known to end at a root or dangling reference
    terminated = set()
    for start_id in sorted(transactions):
        chain = []
        seen = set()
        current_id = start_id
        while (
            current_id is not None
            and current_id in transactions
            and current_id not in terminated
        ):
            if current_id in seen:
                issues.append(
                    Issue(
                        SEVERITY_ERROR,
                        CAT_CYCLE,
                        start_id,
                        f"Ancestor chain of transaction {start_id} revisits {current_id}",
                    )
                )
                break
            seen.add(current_id)
            chain.append(current_id)
            current_id = transactions[current_id].parent_id
        else:
            terminated.update(chain)
    return issues
