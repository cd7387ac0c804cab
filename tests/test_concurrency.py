"""
Concurrent order creation on one table.

Uses a file-backed SQLite database so every worker thread gets its own
connection, the way separate requests would.
"""
import threading

import pytest

from restaurant_pos import create_app, db
from restaurant_pos.config import TestingConfig
from restaurant_pos.errors import StorageTimeout, TableOccupied
from restaurant_pos.models import Order, Table, ROLE_USER
from restaurant_pos.services.locks import KeyedLock
from restaurant_pos.services.orders import create_order
from restaurant_pos.services.permissions import Caller

WORKERS = 8


@pytest.fixture
def file_app(tmp_path):
    class FileConfig(TestingConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'pos.db'}"
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {"check_same_thread": False, "timeout": 5}
        }

    app = create_app(FileConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


class TestConcurrentOrderCreation:

    def test_exactly_one_order_wins_the_table(self, file_app):
        table = Table(table_name="Contested", number_of_guests=2)
        db.session.add(table)
        db.session.commit()
        table_id = table.id

        barrier = threading.Barrier(WORKERS)
        results = []
        results_lock = threading.Lock()

        def place(worker):
            with file_app.app_context():
                caller = Caller(worker + 1, ROLE_USER)
                barrier.wait()
                try:
                    order = create_order(caller, {"table_id": table_id})
                    outcome = ("created", order.id)
                except TableOccupied:
                    outcome = ("occupied", None)
                finally:
                    db.session.remove()
                with results_lock:
                    results.append(outcome)

        threads = [threading.Thread(target=place, args=(n,)) for n in range(WORKERS)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        created = [r for r in results if r[0] == "created"]
        assert len(results) == WORKERS
        assert len(created) == 1
        assert Order.query.filter_by(table_id=table_id).count() == 1


class TestKeyedLock:

    def test_lock_wait_is_bounded(self):
        locks = KeyedLock("table")
        with locks.hold(1, timeout=1):
            outcome = []

            def contender():
                try:
                    with locks.hold(1, timeout=0.05):
                        outcome.append("acquired")
                except StorageTimeout:
                    outcome.append("timeout")

            thread = threading.Thread(target=contender)
            thread.start()
            thread.join()

        assert outcome == ["timeout"]

    def test_different_keys_do_not_block(self):
        locks = KeyedLock("order")
        with locks.hold(1, timeout=1):
            with locks.hold(2, timeout=0.05):
                assert len(locks) == 2

    def test_entries_are_released(self):
        locks = KeyedLock("order")
        with locks.hold(5, timeout=1):
            pass
        assert len(locks) == 0
