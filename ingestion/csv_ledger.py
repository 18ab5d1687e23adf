import csv
import logging
from typing import List, TextIO

from pydantic import ValidationError

from models.ledger_entry import LedgerEntry
from models.request import TransactionRequest

logger = logging.getLogger(__name__)

EXPECTED_HEADER = ["id", "amount", "type", "parent_id"]


def ingest(source: TextIO) -> List[LedgerEntry]:
    """
    Ingest ledger entries from CSV.

    Expected format:
    - Header row (line 1): id,amount,type,parent_id
    - Entry rows (line 2+): an empty parent_id means the entry is a root
    """
    entries = []
    reader = csv.reader(source)

    try:
        header = [column.strip().lower() for column in next(reader)]
        if header[:4] != EXPECTED_HEADER:
            logger.error(f"Invalid header format: {header}")
            return entries
    except StopIteration:
        logger.error("Empty CSV file")
        return entries

    line_num = 1
    for row in reader:
        line_num += 1

        if not row or not any(cell.strip() for cell in row):
            continue

        if len(row) < 3:
            logger.warning(f"Skipping malformed line {line_num}: {row}")
            continue

        try:
            entries.append(row_to_entry(row))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Skipping line {line_num}: {e}")

    return entries


def row_to_entry(row: List[str]) -> LedgerEntry:
    """Convert a CSV row into a LedgerEntry.

    Raises:
        ValueError: If the ID or parent ID is not an integer.
        ValidationError: If the amount or type is invalid.
    """
    transaction_id = int(row[0].strip())
    parent_raw = row[3].strip() if len(row) > 3 else ""

    request = TransactionRequest(
        amount=row[1].strip(),
        type=row[2],
        parent_id=int(parent_raw) if parent_raw else None,
    )
    return LedgerEntry(id=transaction_id, request=request)
