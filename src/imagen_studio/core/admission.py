"""Admission control for validated generation requests.

Two checks run, in order, before a request joins the queue:

1. **Debounce** – a submission arriving less than ``debounce_seconds`` after
   the last *accepted* one is rejected with :class:`RateLimited`.  Rejected
   submissions do not move the debounce clock.
2. **Capacity** – a submission arriving while the queue holds
   ``max_queue_size`` entries is rejected with :class:`QueueFull`.

A rejection leaves the shared state untouched.  An accepted request is
appended to the queue, materialised as a ``processing`` history entry and
made the latest result in one step, with no suspension point in between.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable

from imagen_studio.core.errors import QueueFull, RateLimited
from imagen_studio.core.models import (
    GenerationRequest,
    HistoryEntry,
    QueueEntry,
    ValidatedRequest,
)
from imagen_studio.core.store import StudioState

logger = logging.getLogger(__name__)


class AdmissionController:
    """Enforces the debounce interval and queue capacity.

    Args:
        state: Shared session state
        debounce_seconds: Minimum interval between accepted submissions
        clock: Monotonic clock used for the debounce check
        wall_clock: Clock used for ``submitted_at`` timestamps
        id_factory: Produces request identifiers
    """

    def __init__(
        self,
        state: StudioState,
        *,
        debounce_seconds: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ) -> None:
        self._state = state
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._wall_clock = wall_clock
        self._id_factory = id_factory

    def check(self) -> None:
        """Raise if a submission made now would be rejected.

        Raises:
            RateLimited: Inside the debounce interval
            QueueFull: Queue at capacity
        """
        last = self._state.last_accepted_at
        if last is not None:
            elapsed = self._clock() - last
            if elapsed < self._debounce_seconds:
                retry_after = self._debounce_seconds - elapsed
                logger.warning("Submission rate limited (retry after %.3fs)", retry_after)
                raise RateLimited(retry_after)

        queue = self._state.queue
        if queue.is_full():
            logger.warning("Submission rejected: queue full (%d)", queue.capacity)
            raise QueueFull(queue.capacity)

    def admit(self, validated: ValidatedRequest) -> GenerationRequest:
        """Accept *validated* into the queue and history.

        Returns:
            The newly created :class:`GenerationRequest`

        Raises:
            RateLimited: Inside the debounce interval
            QueueFull: Queue at capacity
            ValueError: If ``id_factory`` repeats an id still in use; nothing
                is recorded
        """
        self.check()

        request = GenerationRequest(
            id=self._id_factory(),
            prompt=validated.prompt,
            model=validated.model,
            aspect_ratio=validated.aspect_ratio,
            submitted_at=self._wall_clock(),
        )

        if request.id in self._state.history or any(
            queued.id == request.id for queued in self._state.queue
        ):
            raise ValueError(f"Duplicate request id: {request.id}")

        entry = HistoryEntry(request=request)
        self._state.queue.append(QueueEntry(request=request))
        self._state.history.add(entry)
        self._state.latest = entry
        self._state.last_accepted_at = self._clock()

        logger.info(
            "Accepted request %s (model=%s, ratio=%s, queue=%d/%d)",
            request.id,
            request.model.value,
            request.aspect_ratio.value,
            len(self._state.queue),
            self._state.queue.capacity,
        )
        return request
