import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

from db.store import TransactionStore
from services.base import Services
from tests.helpers import put


class TestConcurrentWrites:
    """Tests for concurrent access to the transaction service."""

    def test_disjoint_writers_lose_nothing(self, services):
        """Test that concurrent writes to distinct IDs are all retrievable."""
        count = 500

        with ThreadPoolExecutor(max_workers=16) as executor:
            results = list(
                executor.map(
                    lambda i: put(services, i, i + 1, f"type-{i % 7}"), range(count)
                )
            )

        assert all(result.ok for result in results)
        for i in range(count):
            found = services.transactions.get_by_id(i).value
            assert found.amount == Decimal(i + 1)
            assert found.type == f"type-{i % 7}"
        assert services.check.check() == []

    def test_same_id_writers_keep_index_consistent(self, services):
        """Test that racing type changes on one ID leave it in exactly one bucket."""
        types = ["cars", "food", "rent", "travel"]
        barrier = threading.Barrier(len(types))

        def writer(type):
            barrier.wait()
            for _ in range(200):
                put(services, 1, "10", type)

        with ThreadPoolExecutor(max_workers=len(types)) as executor:
            list(executor.map(writer, types))

        final_type = services.transactions.get_by_id(1).value.type
        buckets = [t for t in types if services.transactions.ids_by_type(t) == [1]]
        assert buckets == [final_type]

    def test_readers_never_see_id_in_two_buckets(self, services):
        """Test that a reader never observes a half-applied type change."""
        put(services, 1, "10", "a")
        stop = threading.Event()
        violations = []

        def writer():
            for i in range(2000):
                put(services, 1, "10", "a" if i % 2 else "b")
            stop.set()

        def reader():
            while not stop.is_set():
                snapshot, index = services.store.snapshot()
                in_a = 1 in index.get("a", set())
                in_b = 1 in index.get("b", set())
                if in_a == in_b:
                    violations.append("bucket")
                if in_a != (snapshot[0].type == "a"):
                    violations.append("type")
                if len(snapshot) != 1:
                    violations.append("table")

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert violations == []
        assert services.check.check() == []

    def test_opposing_reparents_cannot_form_cycle(self, services):
        """Test that concurrently linking two roots to each other leaves no cycle."""
        for _ in range(50):
            put(services, 1, "1")
            put(services, 2, "1")
            barrier = threading.Barrier(2)

            def link(ids):
                child, parent = ids
                barrier.wait()
                return put(services, child, "1", parent_id=parent)

            with ThreadPoolExecutor(max_workers=2) as executor:
                results = list(executor.map(link, [(1, 2), (2, 1)]))

            assert sum(result.ok for result in results) == 1
            assert services.check.check() == []


class _ReparentingStore(TransactionStore):
    """Store that starts a reparent of 4 from 2 to 3 right after 3's children are read."""

    def __init__(self):
        super().__init__()
        self.services = None
        self.writer = None

    def _child_ids(self, parent_id):
        child_ids = super()._child_ids(parent_id)
        if parent_id == 3 and self.writer is None:
            self.writer = threading.Thread(
                target=put, args=(self.services, 4, "100", "t", 3)
            )
            self.writer.start()
            # The writer must wait for the walk to release the store lock
            self.writer.join(timeout=0.2)
        return child_ids


class TestConsistentSum:
    """Tests that subtree sums reflect one state of the hierarchy."""

    def test_reparent_during_sum_is_not_lost(self, test_config):
        """Test that moving a node between branches mid-walk keeps it in the total."""
        store = _ReparentingStore()
        services = Services(test_config, store=store)
        store.services = services
        put(services, 1, "1", "t")
        put(services, 2, "1", "t", parent_id=1)
        put(services, 3, "1", "t", parent_id=1)
        put(services, 4, "100", "t", parent_id=2)

        total = services.transactions.calculate_sum(1).value
        store.writer.join()

        assert total == Decimal("103")
        assert services.transactions.get_by_id(4).value.parent_id == 3
        assert services.transactions.calculate_sum(1).value == Decimal("103")
        assert services.transactions.calculate_sum(2).value == Decimal("1")
