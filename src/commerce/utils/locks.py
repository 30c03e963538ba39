"""Per-key mutual exclusion for in-process serialization.

Stock counters are locked per product and order records per order id. Locks
are re-entrant so a caller holding a key may call into another component
that takes the same key. An entry lives only while some thread holds or
waits on it, so the table does not grow with every id ever seen.
"""

import threading
from collections.abc import Iterable, Iterator
from contextlib import ExitStack, contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class KeyedLock:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _Entry] = {}

    def _acquire_entry(self, key: str) -> _Entry:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _Entry()
            entry.users += 1
            return entry

    def _release_entry(self, key: str, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[key]

    @contextmanager
    def hold(self, key) -> Iterator[None]:
        """Hold the lock for ``key`` for the duration of the block."""
        key = str(key)
        entry = self._acquire_entry(key)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(key, entry)

    @contextmanager
    def hold_all(self, keys: Iterable) -> Iterator[None]:
        """Hold the locks for every key, taken in sorted order."""
        with ExitStack() as stack:
            for key in sorted({str(k) for k in keys}):
                stack.enter_context(self.hold(key))
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
