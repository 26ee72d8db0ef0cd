"""The bookstore's in-process state and how it is opened.

One ``BookstoreState`` per process holds the ledger (catalogue and orders),
the user directory and the review log. It is built explicitly and handed to
whoever needs it; nothing is reachable through module globals.
"""

from dataclasses import dataclass, field

from bookstore.catalogue.ledger import InventoryLedger
from bookstore.catalogue.seed import seed
from bookstore.config import Settings
from bookstore.domain import initialize
from bookstore.identity.directory import UserDirectory
from bookstore.persistence.snapshot import LedgerSnapshotter
from bookstore.persistence.store import FileBlobStore
from bookstore.reviews.log import ReviewLog
from bookstore.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BookstoreState:
    ledger: InventoryLedger = field(default_factory=InventoryLedger)
    users: UserDirectory = field(default_factory=UserDirectory)
    reviews: ReviewLog = field(default_factory=ReviewLog)


def open_state(store=None, settings=None):
    """Initialize the domain and rebuild state from the blob store.

    On a first run (nothing stored) the seed catalogue is loaded and saved
    unless seeding is disabled in the settings.
    """
    initialize()
    settings = settings or Settings.from_env()
    if store is None:
        store = FileBlobStore(settings.data_dir)

    snapshotter = LedgerSnapshotter(store)
    state = BookstoreState()

    if snapshotter.has_data():
        snapshotter.load(state)
    elif settings.seed_on_first_run:
        logger.info("bookstore.seeding", data_dir=str(settings.data_dir))
        seed(state)
        snapshotter.save(state)
    else:
        logger.info("bookstore.empty_start")

    return state, snapshotter
