"""Domain initialization and configuration."""

import threading

from protean.domain import Domain

from bookstore.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
bookstore = Domain(name="bookstore")

_init_lock = threading.Lock()
_initialized = False


def initialize():
    """Initialize the bookstore domain once per process.

    Safe to call from every entry point; only the first call runs
    ``Domain.init()`` and pushes the process-wide domain context.
    """
    global _initialized

    with _init_lock:
        if _initialized:
            return bookstore

        # Register every element before init resolves cross references
        from bookstore.catalogue import item  # noqa: F401
        from bookstore.identity import user  # noqa: F401
        from bookstore.ordering import cart, order  # noqa: F401
        from bookstore.reviews import review  # noqa: F401

        bookstore.init(traverse=False)
        bookstore.domain_context().push()
        _initialized = True
        logger.debug("domain.initialized", domain=bookstore.name)

    return bookstore
