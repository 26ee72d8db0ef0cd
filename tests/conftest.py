import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Initialize the bookstore domain and push its context once, so that every
    aggregate can be built the way the running application builds it.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    from bookstore.domain import initialize

    initialize()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture()
def ledger():
    from bookstore.catalogue.ledger import InventoryLedger

    return InventoryLedger()


@pytest.fixture()
def blob_store():
    from bookstore.persistence.store import MemoryBlobStore

    return MemoryBlobStore()


@pytest.fixture()
def settings(tmp_path):
    from bookstore.config import Settings

    return Settings(data_dir=tmp_path / "bookstore_data", seed_on_first_run=False)


@pytest.fixture()
def facade(blob_store, settings):
    """Empty bookstore with one customer, persisting to memory."""
    from bookstore.facade import BookstoreFacade

    bookstore = BookstoreFacade.open(store=blob_store, settings=settings)
    bookstore.register_customer("alice", "secret", address="1 Main St", phone="555-0100")
    return bookstore
