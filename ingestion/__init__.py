from pathlib import Path

import ingestion.csv_ledger as csv_ledger
import ingestion.yaml_ledger as yaml_ledger

_INGESTION_MODULES = {
    "csv": csv_ledger,
    "yaml": yaml_ledger,
}

_EXTENSIONS = {
    ".csv": "csv",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def get_ingestion_module(module_name: str):
    """Get an ingestion module by name."""
    if module_name not in _INGESTION_MODULES:
        raise ValueError(f"Unknown ingestion module: {module_name}")
    return _INGESTION_MODULES[module_name]


def get_available_modules():
    """Get list of available ingestion modules."""
    return list(_INGESTION_MODULES.keys())


def detect_format(path: Path) -> str:
    """Pick an ingestion module name from a ledger file's extension."""
    suffix = Path(path).suffix.lower()
    if suffix not in _EXTENSIONS:
        raise ValueError(f"Cannot detect ledger format for file: {path}")
    return _EXTENSIONS[suffix]
