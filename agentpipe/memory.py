"""
Shared memory and private agent memory.

SharedMemory is the only structure mutated by several agents inside one
round. Every access goes through a single lock, so a completed ``put`` is
visible to any later ``get`` from any worker thread and concurrent writers
never corrupt the map. Racing writers on the same key are last-writer-wins.

Scratchpad is the private key/value store each agent owns. It is never
shared between agents; the environment never runs two ``act`` calls for
the same agent at once, so it needs no locking.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional


class SharedMemory:
    """Thread-safe key/value store visible to every agent in an environment.

    Values are stored as-is (no copying). Mutating a stored mutable value
    in place bypasses the lock; use ``update`` for read-modify-write.
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = dict(initial or {})

    def put(self, key: str, value: Any) -> None:
        """Associate ``key`` with ``value``, replacing any previous value."""
        with self._lock:
            self._data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for ``key`` or ``default`` if it was never set."""
        with self._lock:
            return self._data.get(key, default)

    def contains(self, key: str) -> bool:
        """Return True if a value has been set for ``key``."""
        with self._lock:
            return key in self._data

    def update(self, key: str, func: Callable[[Any], Any], default: Any = None) -> Any:
        """Atomically replace ``key`` with ``func(current)`` and return the new value.

        ``current`` is ``default`` when the key is absent. ``func`` runs while
        the lock is held, so it must not touch this SharedMemory itself.

        Example:
            memory.update("visits", lambda n: n + 1, default=0)
        """
        with self._lock:
            value = func(self._data.get(key, default))
            self._data[key] = value
            return value

    def snapshot(self) -> Dict[str, Any]:
        """Return a shallow copy of the current contents."""
        with self._lock:
            return dict(self._data)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __repr__(self) -> str:
        return f"SharedMemory(keys={self.keys()!r})"


@dataclass
class Scratchpad:
    """Private working memory owned by a single agent.

    Notes
    -----
    * ``state`` accumulates across rounds; agents record their most recent
      output under ``"last_output"``.
    * Stages never see the scratchpad, only SharedMemory.
    """

    state: Dict[str, Any] = field(default_factory=dict)

    def remember(self, key: str, value: Any) -> None:
        self.state[key] = value

    def recall(self, key: str, default: Any = None) -> Any:
        return self.state.get(key, default)

    def clear(self) -> None:
        """Reset the scratchpad completely."""

        self.state.clear()
