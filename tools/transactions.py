"""Transaction analysis tools."""

from decimal import Decimal
from typing import Dict


def get_type_summary(services) -> Dict[str, Dict]:
    """Summarize transactions by type.

    Only each transaction's own amount is counted, not its descendants.

    Args:
        services: Services container with transaction service.

    Returns:
        Dictionary mapping each type to a summary dictionary:
        - "count": Number of transactions with that type (int)
        - "total": Sum of their own amounts (Decimal)

    Example:
        {
            "cars": {"count": 2, "total": Decimal("15000")},
            "shopping": {"count": 1, "total": Decimal("5000")},
        }
    """
    summary: Dict[str, Dict] = {}
    for transaction in services.transactions.find_all():
        if transaction.type not in summary:
            summary[transaction.type] = {"count": 0, "total": Decimal("0")}
        summary[transaction.type]["count"] += 1
        summary[transaction.type]["total"] += transaction.amount

    return dict(sorted(summary.items()))


def get_root_rollups(services) -> Dict[int, Decimal]:
    """Get the subtree sum of every root transaction.

    Args:
        services: Services container with transaction service.

    Returns:
        Dictionary mapping root transaction ID to its subtree sum, ordered by ID.
    """
    rollups = {}
    for transaction in services.transactions.find_all():
        if not transaction.is_root:
            continue
        result = services.transactions.calculate_sum(transaction.id)
        # A root seen in the snapshot stays present; no delete exists
        rollups[transaction.id] = result.unwrap()
    return rollups
