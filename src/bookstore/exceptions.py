"""Error kinds surfaced by ledger, lifecycle and persistence operations.

``ValidationError`` is protean's own, raised with a ``{field: [messages]}``
dict like every aggregate in the domain.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError

__all__ = ["InvalidStateError", "NotFoundError", "PersistenceError", "ValidationError"]


class NotFoundError(ObjectNotFoundError):
    """Unknown item, order or user."""


class InvalidStateError(InvalidOperationError):
    """Illegal lifecycle transition or a mutation that would break an invariant."""


class PersistenceError(Exception):
    """A collection could not be read from or written to the blob store."""

    def __init__(self, collection, message):
        super().__init__(f"{collection}: {message}")
        self.collection = collection
