import logging
from typing import List, TextIO

import yaml
from pydantic import ValidationError

from models.ledger_entry import LedgerEntry
from models.request import TransactionRequest

logger = logging.getLogger(__name__)


def ingest(source: TextIO) -> List[LedgerEntry]:
    """
    Ingest ledger entries from YAML.

    Expected format: a top-level list of mappings, each with ``id``,
    ``amount``, ``type`` and an optional ``parent_id``.

    Raises:
        yaml.YAMLError: If the document is not valid YAML.
    """
    entries = []
    data = yaml.safe_load(source)

    if data is None:
        logger.error("Empty YAML ledger")
        return entries
    if not isinstance(data, list):
        logger.error(f"Expected a list of transactions, got {type(data).__name__}")
        return entries

    for item_num, item in enumerate(data, start=1):
        if not isinstance(item, dict):
            logger.warning(f"Skipping item {item_num}: not a mapping")
            continue

        try:
            entries.append(item_to_entry(item))
        except (KeyError, TypeError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping item {item_num}: {e}")

    return entries


def item_to_entry(item: dict) -> LedgerEntry:
    """Convert a YAML mapping into a LedgerEntry.

    Raises:
        ValueError: If the ID or parent ID is missing or not a whole number.
        ValidationError: If the amount or type is invalid.
    """
    if item.get("id") is None:
        raise ValueError("missing id")

    # YAML reads 10.50 as a float; keep the literal digits instead
    amount = item.get("amount")
    if isinstance(amount, float):
        amount = repr(amount)

    parent_id = item.get("parent_id")
    request = TransactionRequest(
        amount=amount,
        type=item.get("type"),
        parent_id=_as_id(parent_id, "parent_id") if parent_id is not None else None,
    )
    return LedgerEntry(id=_as_id(item["id"], "id"), request=request)


def _as_id(value, field: str) -> int:
    # bool is an int subclass, so `id: true` must be caught explicitly
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{field} must be an integer, got {value!r}")
    return value
