"""In-memory queue and history storage for Imagen Studio.

This module isolates the two collections the pipeline mutates so the
admission controller and the execution engine can share them through one
explicit :class:`StudioState` container instead of module-level globals.

- :class:`RequestQueue` is a bounded FIFO.  Only the head is ever inspected
  or removed, and it is removed only once the engine has finished with it.
- :class:`HistoryStore` keeps every accepted request newest-first.  Entries
  are added at acceptance, updated in place by id, and only ever removed in
  bulk by :meth:`HistoryStore.clear`.

Nothing here is persisted; history lives for the lifetime of the process.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass, field

from imagen_studio.core.errors import QueueFull
from imagen_studio.core.models import HistoryEntry, QueueEntry, QueueStatus

logger = logging.getLogger(__name__)


class RequestQueue:
    """Bounded FIFO of pending requests.

    Args:
        capacity: Maximum number of entries, in-flight head included.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError(f"Queue capacity must be at least 1, got {capacity}")
        self._capacity = capacity
        self._entries: deque[QueueEntry] = deque()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[QueueEntry]:
        return iter(tuple(self._entries))

    def is_full(self) -> bool:
        return len(self._entries) >= self._capacity

    def append(self, entry: QueueEntry) -> None:
        """Append *entry* to the tail.

        Raises:
            QueueFull: If the queue is already at capacity
        """
        if self.is_full():
            raise QueueFull(self._capacity)
        self._entries.append(entry)

    def peek(self) -> QueueEntry | None:
        """Return the head without removing it, or ``None`` when empty."""
        return self._entries[0] if self._entries else None

    def pop_head(self) -> QueueEntry:
        """Remove and return the head.

        Raises:
            IndexError: If the queue is empty
        """
        return self._entries.popleft()

    def mark_processing(self) -> QueueEntry:
        """Flag the head as in flight and return it.

        Raises:
            IndexError: If the queue is empty
        """
        head = self._entries[0]
        head.queue_status = QueueStatus.PROCESSING
        return head

    def processing_count(self) -> int:
        return sum(1 for entry in self._entries if entry.queue_status is QueueStatus.PROCESSING)

    def discard_pending(self) -> list[QueueEntry]:
        """Drop every entry that is not in flight.

        Returns:
            The discarded entries, in queue order
        """
        kept = [e for e in self._entries if e.queue_status is QueueStatus.PROCESSING]
        dropped = [e for e in self._entries if e.queue_status is not QueueStatus.PROCESSING]
        self._entries = deque(kept)
        if dropped:
            logger.info("Discarded %d pending request(s)", len(dropped))
        return dropped


class HistoryStore:
    """Newest-first record of every accepted request."""

    def __init__(self) -> None:
        self._entries: list[HistoryEntry] = []
        self._index: dict[str, HistoryEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(tuple(self._entries))

    def __contains__(self, request_id: object) -> bool:
        return request_id in self._index

    def add(self, entry: HistoryEntry) -> None:
        """Insert *entry* at the front of the history.

        Raises:
            ValueError: If an entry with the same id already exists
        """
        if entry.id in self._index:
            raise ValueError(f"Duplicate history entry: {entry.id}")
        # Newest first
        self._entries.insert(0, entry)
        self._index[entry.id] = entry

    def get(self, request_id: str) -> HistoryEntry | None:
        return self._index.get(request_id)

    def complete(self, request_id: str, image: str, attempts: int = 0) -> HistoryEntry | None:
        """Mark the entry completed.  Returns ``None`` if the id is unknown."""
        entry = self._index.get(request_id)
        if entry is not None:
            entry.complete(image, attempts=attempts)
        return entry

    def fail(self, request_id: str, message: str, attempts: int = 0) -> HistoryEntry | None:
        """Mark the entry failed.  Returns ``None`` if the id is unknown."""
        entry = self._index.get(request_id)
        if entry is not None:
            entry.fail(message, attempts=attempts)
        return entry

    def clear(self) -> int:
        """Remove every entry and return how many were removed."""
        count = len(self._entries)
        self._entries.clear()
        self._index.clear()
        return count


@dataclass
class StudioState:
    """Mutable session state shared by the admission controller and the engine.

    Attributes:
        queue: Pending and in-flight requests
        history: Every accepted request, newest first
        latest: History entry currently foregrounded, or ``None``
        last_accepted_at: Monotonic clock reading of the last accepted
            submission, or ``None`` before the first one
    """

    queue: RequestQueue
    history: HistoryStore = field(default_factory=HistoryStore)
    latest: HistoryEntry | None = None
    last_accepted_at: float | None = None

    @classmethod
    def create(cls, capacity: int) -> StudioState:
        return cls(queue=RequestQueue(capacity))
