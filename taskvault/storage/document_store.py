"""
JSON-backed document store.

Each collection lives in <root>/<collection>.json as {"documents": [...]}.
Documents are plain dicts matched by field equality, mirroring the small
subset of a document database the services need:

- insert_one (optionally enforcing a unique field)
- find_one / find / count
- find_one_and_update / find_one_and_delete, each a single atomic step

Writes are serialized per collection (thread lock + lock file) and land via
temp file + rename, so readers never observe a partial write.
"""

from __future__ import annotations

import json
import shutil
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Generator, Iterable, List, Optional

from ..utils.exceptions import TaskVaultError
from ..utils.logger import get_logger
from .locks import acquire_lock, lock_key_collection

logger = get_logger(__name__)

Document = Dict[str, Any]
Query = Dict[str, Any]


class DuplicateKeyError(TaskVaultError):
    """Insert would violate a unique field"""

    def __init__(self, collection: str, field: str, value: Any):
        self.collection = collection
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for {collection}.{field}")


class StoreError(TaskVaultError):
    """Collection file could not be read"""
    pass


def _atomic_write(path: Path, payload: Dict) -> None:
    """Atomically write JSON to the target path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
    ) as tf:
        json.dump(payload, tf, indent=2, ensure_ascii=False, default=str)
        temp_path = Path(tf.name)
    try:
        shutil.move(str(temp_path), str(path))
    except Exception:
        if temp_path.exists():
            temp_path.unlink()
        raise


def _matches(doc: Document, query: Query) -> bool:
    return all(doc.get(k) == v for k, v in query.items())


def _project(doc: Document, exclude: Iterable[str] = ()) -> Document:
    out = dict(doc)
    for field in exclude:
        out.pop(field, None)
    return out


class DocumentStore:
    """File-backed collections of JSON documents."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.locks_dir = self.root / "locks"
        self._guard = threading.Lock()
        self._thread_locks: Dict[str, threading.RLock] = {}

    def _path(self, collection: str) -> Path:
        return self.root / f"{collection}.json"

    def _thread_lock(self, collection: str) -> threading.RLock:
        with self._guard:
            lock = self._thread_locks.get(collection)
            if lock is None:
                lock = threading.RLock()
                self._thread_locks[collection] = lock
            return lock

    @contextmanager
    def _write_lock(self, collection: str) -> Generator[None, None, None]:
        with self._thread_lock(collection):
            with acquire_lock(self.locks_dir, lock_key_collection(collection)):
                yield

    def _load(self, collection: str) -> List[Document]:
        path = self._path(collection)
        if not path.exists():
            return []
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error("Failed to read collection", collection=collection, error=str(e))
            raise StoreError(f"Collection {collection} is unreadable")
        return list(raw.get("documents", []))

    def _save(self, collection: str, documents: List[Document]) -> None:
        _atomic_write(self._path(collection), {"documents": documents})

    def insert_one(
        self, collection: str, document: Document, unique: Optional[str] = None
    ) -> Document:
        """
        Insert a document.

        Args:
            unique: Field whose value must not already exist in the collection

        Raises:
            DuplicateKeyError: if the unique field value is taken
        """
        with self._write_lock(collection):
            documents = self._load(collection)
            if unique is not None:
                value = document.get(unique)
                if any(d.get(unique) == value for d in documents):
                    raise DuplicateKeyError(collection, unique, value)
            documents.append(dict(document))
            self._save(collection, documents)
        return dict(document)

    def find_one(
        self, collection: str, query: Query, exclude: Iterable[str] = ()
    ) -> Optional[Document]:
        for doc in self._load(collection):
            if _matches(doc, query):
                return _project(doc, exclude)
        return None

    def find(
        self,
        collection: str,
        query: Query,
        sort_key: Optional[str] = None,
        descending: bool = False,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Document]:
        """
        Return matching documents, optionally sorted and sliced.

        With descending=True, documents sharing a sort value come out
        most recently inserted first.
        """
        docs = [d for d in self._load(collection) if _matches(d, query)]
        if sort_key is not None:
            if descending:
                docs.reverse()
            docs.sort(key=lambda d: d.get(sort_key) or "", reverse=descending)
        end = None if limit is None else skip + limit
        return docs[skip:end]

    def count(self, collection: str, query: Query) -> int:
        return sum(1 for d in self._load(collection) if _matches(d, query))

    def find_one_and_update(
        self, collection: str, query: Query, update: Document
    ) -> Optional[Document]:
        """Set fields on the first match and return the updated document, or None."""
        with self._write_lock(collection):
            documents = self._load(collection)
            for idx, doc in enumerate(documents):
                if _matches(doc, query):
                    updated = {**doc, **update}
                    documents[idx] = updated
                    self._save(collection, documents)
                    return dict(updated)
        return None

    def find_one_and_delete(self, collection: str, query: Query) -> Optional[Document]:
        """Remove the first match and return it, or None."""
        with self._write_lock(collection):
            documents = self._load(collection)
            for idx, doc in enumerate(documents):
                if _matches(doc, query):
                    removed = documents.pop(idx)
                    self._save(collection, documents)
                    return removed
        return None

