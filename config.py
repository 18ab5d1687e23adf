"""Configuration management for ledgertree.

Reads configuration from ~/.config/ledgertree.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w

LEDGER_FORMATS = ("auto", "yaml", "csv")


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    log_level: str
    log_dir: Path
    ledger_file: Optional[Path]
    ledger_format: str

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        base_dir = Path.home() / "data" / "ledgertree"
        return cls(
            base_dir=base_dir,
            log_level="INFO",
            log_dir=base_dir / "logs",
            ledger_file=None,
            ledger_format="auto",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "ledgertree.toml"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.

    Raises:
        ValueError: If the configured ledger format is unknown.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return _parse_config(data)


def _parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML data, with defaults for missing values."""
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "ledgertree"))

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    ledger_config = data.get("ledger", {})
    ledger_file = ledger_config.get("file")
    ledger_format = ledger_config.get("format", "auto")
    if ledger_format not in LEDGER_FORMATS:
        raise ValueError(f"Unknown ledger format in config: {ledger_format}")

    return Config(
        base_dir=base_dir,
        log_level=log_level,
        log_dir=log_dir,
        ledger_file=Path(ledger_file) if ledger_file else None,
        ledger_format=ledger_format,
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # TOML has no null, so an unset ledger file is simply left out
    ledger = {"format": config.ledger_format}
    if config.ledger_file is not None:
        ledger["file"] = str(config.ledger_file)

    data = {
        "base_dir": str(config.base_dir),
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "ledger": ledger,
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
