"""Shared pytest fixtures for all tests."""

import pytest

from config import Config
from db.store import TransactionStore
from services.base import Services


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration pointing to a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object.
    """
    return Config(
        base_dir=tmp_path / "ledgertree",
        log_level="DEBUG",
        log_dir=tmp_path / "ledgertree" / "logs",
        ledger_file=None,
        ledger_format="auto",
    )


@pytest.fixture
def store():
    """Create an empty transaction store."""
    return TransactionStore()


@pytest.fixture
def services(test_config, store):
    """Create a Services container around the test store.

    Args:
        test_config: Test configuration fixture.
        store: Empty transaction store fixture.

    Returns:
        Services: Services container for testing.
    """
    return Services(test_config, store=store)
