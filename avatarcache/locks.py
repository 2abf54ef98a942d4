"""Per-key locks for collapsing duplicate work within a process."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Hashable, Iterator, List


class KeyedLock:
    """A set of locks addressed by key.

    Each key gets its own lock for as long as somebody holds or waits on
    it. Callers that lose the race should re-check the cache after
    acquiring, since the winner has likely done the work already.

    This only coordinates threads of a single process. Separate processes
    may still duplicate work, which is safe since cache writes are atomic.
    """

    def __init__(self) -> None:
        """Initialize the lock map."""
        self._guard = threading.Lock()
        self._locks: Dict[Hashable, List] = {}

    @contextmanager
    def hold(
        self,
        key: Hashable,
    ) -> Iterator[None]:
        """Hold the lock for a key.

        Args:
            key (object):
                The key, such as ``(namespace, hash, size)``.

        Context:
            The lock for the key is held.
        """
        with self._guard:
            entry = self._locks.get(key)

            if entry is None:
                # [lock, number of holders and waiters]
                entry = [threading.Lock(), 0]
                self._locks[key] = entry

            entry[1] += 1

        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1

                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self) -> int:
        """Return the number of keys currently in use."""
        with self._guard:
            return len(self._locks)
