"""Apply ledger entries to the transaction hierarchy."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from ingestion import detect_format, get_ingestion_module
from logger import get_logger
from models.ledger_entry import LedgerEntry

logger = get_logger()


@dataclass(frozen=True)
class Rejection:
    """A ledger entry the service refused to store."""

    id: int
    message: str


@dataclass
class LoadReport:
    """Outcome of applying a batch of ledger entries."""

    applied: int = 0
    rejected: List[Rejection] = field(default_factory=list)


def apply_entries(services, entries: List[LedgerEntry]) -> LoadReport:
    """Apply ledger entries in order through the transaction service.

    Entries are applied one by one, so a child must come after its parent.
    Rejected entries are recorded and logged; they do not stop the load.

    Args:
        services: Services container with the transaction service.
        entries: Ledger entries, in file order.

    Returns:
        LoadReport with the count of applied entries and each rejection.
    """
    report = LoadReport()
    for entry in entries:
        result = services.transactions.create_or_update(
            entry.id,
            entry.request.amount,
            entry.request.type,
            entry.request.parent_id,
        )
        if result.ok:
            report.applied += 1
        else:
            logger.warning(f"Ledger entry {entry.id} rejected: {result.error.message}")
            report.rejected.append(Rejection(id=entry.id, message=result.error.message))
    return report


def load_ledger_file(services, path: Path, fmt: Optional[str] = "auto") -> LoadReport:
    """Read a ledger file and apply its entries.

    Args:
        services: Services container with the transaction service.
        path: Path to the ledger file.
        fmt: Ingestion module name, or "auto"/None to detect from the extension.

    Returns:
        LoadReport for the applied entries.

    Raises:
        FileNotFoundError: If the ledger file doesn't exist.
        ValueError: If the format is unknown or cannot be detected.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ledger file not found: {path}")

    if fmt in (None, "auto"):
        fmt = detect_format(path)
    ingestion_module = get_ingestion_module(fmt)

    logger.info(f"Loading {fmt} ledger from {path}")
    with open(path, "r", newline="") as f:
        entries = ingestion_module.ingest(f)

    report = apply_entries(services, entries)
    logger.info(
        f"Loaded {report.applied} transactions ({len(report.rejected)} rejected)"
    )
    return report
