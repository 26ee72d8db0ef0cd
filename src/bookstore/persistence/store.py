"""Blob stores — one text blob per entity collection name."""

import os
from abc import ABC, abstractmethod
from pathlib import Path

from bookstore.exceptions import PersistenceError


class BlobStore(ABC):
    @abstractmethod
    def read(self, collection):
        """Return the stored payload, or None if the collection was never written."""

    @abstractmethod
    def write(self, collection, payload):
        """Overwrite the collection's payload."""

    @abstractmethod
    def delete(self, collection):
        """Forget the collection; a missing collection is not an error."""


class MemoryBlobStore(BlobStore):
    def __init__(self, blobs=None):
        self.blobs = dict(blobs or {})

    def read(self, collection):
        return self.blobs.get(collection)

    def write(self, collection, payload):
        self.blobs[collection] = payload

    def delete(self, collection):
        self.blobs.pop(collection, None)


class FileBlobStore(BlobStore):
    """Stores each collection as ``<directory>/<collection>.json``.

    Writes go to a temporary sibling first and are moved into place, so a
    failed write leaves the previous file intact.
    """

    def __init__(self, directory):
        self.directory = Path(directory)

    def _path(self, collection):
        return self.directory / f"{collection}.json"

    def read(self, collection):
        path = self._path(collection)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise PersistenceError(collection, f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise PersistenceError(collection, f"cannot read {path}: {exc}") from exc

    def write(self, collection, payload):
        path = self._path(collection)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise PersistenceError(collection, f"cannot write {path}: {exc}") from exc

    def delete(self, collection):
        try:
            self._path(collection).unlink(missing_ok=True)
        except OSError as exc:
            raise PersistenceError(collection, f"cannot delete: {exc}") from exc
