"""
Cross-process collection locks for the document store.

File-based (no Redis required): a lock is held while its lock file exists.
"""

from __future__ import annotations

import contextlib
import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

LOCK_TIMEOUT_SECONDS = 30
LOCK_POLL_INTERVAL = 0.02
# A lock file older than this is left over from a crashed process
LOCK_STALE_SECONDS = 120


def lock_path(locks_dir: Path, key: str) -> Path:
    safe = "".join(c if c.isalnum() or c in "-_" else "_" for c in key)
    return locks_dir / f"{safe}.lock"


def _break_if_stale(path: Path) -> None:
    with contextlib.suppress(FileNotFoundError):
        if time.time() - path.stat().st_mtime > LOCK_STALE_SECONDS:
            path.unlink()


@contextmanager
def acquire_lock(
    locks_dir: Path, key: str, timeout_seconds: float = LOCK_TIMEOUT_SECONDS
) -> Generator[None, None, None]:
    """
    Acquire a named lock (e.g. collection:todos).
    Blocks until acquired or timeout.
    """
    locks_dir.mkdir(parents=True, exist_ok=True)
    path = lock_path(locks_dir, key)
    start = time.monotonic()
    while True:
        try:
            fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            if (time.monotonic() - start) >= timeout_seconds:
                raise TimeoutError(f"Could not acquire lock {key} within {timeout_seconds}s")
            _break_if_stale(path)
            time.sleep(LOCK_POLL_INTERVAL)
            continue
        try:
            os.write(fd, str(os.getpid()).encode())
        finally:
            os.close(fd)
        break

    try:
        yield
    finally:
        with contextlib.suppress(FileNotFoundError):
            path.unlink()


def lock_key_collection(collection: str) -> str:
    return f"lock:collection:{collection}"
