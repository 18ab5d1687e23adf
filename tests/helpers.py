"""Helper utilities for tests."""

from decimal import Decimal

from models.transaction import Transaction


def put(services, transaction_id, amount, type="test", parent_id=None):
    """Write a transaction through the service and return the result."""
    return services.transactions.create_or_update(
        transaction_id, Decimal(str(amount)), type, parent_id
    )


def corrupt(store, transaction_id, amount, type="test", parent_id=None):
    """Write directly to the store, bypassing parent validation.

    Used to build states the service would never produce (cycles, dangling
    parents) to check that reads stay bounded.
    """
    store.upsert(
        Transaction(
            id=transaction_id,
            amount=Decimal(str(amount)),
            type=type,
            parent_id=parent_id,
        )
    )
