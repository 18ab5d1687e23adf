"""Base services container for dependency injection."""

from config import Config
from db.store import TransactionStore
from services.check import CheckService
from services.transactions import TransactionService


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject a pre-populated store for testing.

    Args:
        config: Application configuration object.
        store: Optional transaction store. If None, an empty store is created.
    """

    def __init__(self, config: Config, store=None):
        """Initialize services with configuration.

        Args:
            config: Config object containing application configuration.
            store: Optional TransactionStore for dependency injection (testing).
        """
        self.config = config
        self.store = store if store is not None else TransactionStore()

        self.transactions = TransactionService(self.store)
        self.check = CheckService(self.store)
