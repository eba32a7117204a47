"""Single-in-flight execution engine.

The engine drains the request queue one entry at a time.  It never polls and
never reacts to state changes on its own: callers push a signal onto its work
channel whenever something may have made a dispatch possible.

Signals
-------
``ENQUEUED``
    Sent by the studio after a request is admitted.
``IDLE``
    Sent by the engine itself once it has finished with a request.

The single consumer task handles one signal at a time and applies the same
rule to both: dispatch only when not busy and the queue is non-empty.  Any
number of redundant signals is therefore harmless, and a request can neither
be stranded (every state change that could enable a dispatch produces a
signal) nor processed twice (the head is removed before ``IDLE`` is sent).

Dispatch
--------
1. Peek the head (it stays in the queue) and set ``busy``.
2. Mark it ``processing`` and make its history entry the latest result.
3. Await the generation client, which handles retries.
4. Complete or fail the history entry.  Every exception is caught here.
5. Point the latest result at the finalised entry, remove the head, clear
   ``busy`` and send ``IDLE``.

If the history was cleared while the request was in flight, the finalised
entry is not put back into the history but still becomes the latest result.
A request that was still waiting in the queue when the history was cleared
gets a fresh ``processing`` entry in the history when it is dispatched.

An unexpected error escaping a dispatch fails and drops the in-flight head,
clears ``busy`` and sends ``IDLE``, so the rest of the queue keeps moving.
"""

from __future__ import annotations

import asyncio
import logging
from enum import Enum

from imagen_studio.core.generation import GenerationClient
from imagen_studio.core.models import HistoryEntry, QueueEntry, QueueStatus
from imagen_studio.core.store import StudioState

logger = logging.getLogger(__name__)


class Signal(str, Enum):
    ENQUEUED = "enqueued"
    IDLE = "idle"


class ExecutionEngine:
    """Consumes the queue head by head, one remote call at a time.

    Args:
        state: Shared session state
        client: Generation client used for every request
    """

    def __init__(self, state: StudioState, client: GenerationClient) -> None:
        self._state = state
        self._client = client
        self._signals: asyncio.Queue[Signal] = asyncio.Queue()
        self._idle = asyncio.Event()
        self._idle.set()
        self._busy = False
        self._task: asyncio.Task | None = None

    @property
    def busy(self) -> bool:
        """Whether a request is currently being executed."""
        return self._busy

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def notify(self, signal: Signal = Signal.ENQUEUED) -> None:
        """Push a dispatch check onto the work channel."""
        if len(self._state.queue):
            self._idle.clear()
        self._signals.put_nowait(signal)

    async def start(self) -> None:
        """Start the consumer task.  Requests already queued are picked up."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="imagen-execution-engine")
        self.notify(Signal.IDLE)
        logger.info("Execution engine started.")

    async def stop(self) -> None:
        """Cancel the consumer task, including any in-flight call."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Execution engine stopped.")

    async def wait_until_idle(self) -> None:
        """Wait until nothing is in flight and the queue is empty."""
        await self._idle.wait()

    async def _run(self) -> None:
        while True:
            signal = await self._signals.get()
            try:
                await self._maybe_dispatch(signal)
            except Exception:
                logger.exception("Unexpected error while handling %s signal.", signal.value)
                self._recover()
            finally:
                self._signals.task_done()

    def _recover(self) -> None:
        """Drop a head whose dispatch broke and re-check the queue."""
        self._busy = False
        state = self._state
        head = state.queue.peek()
        if head is not None and head.queue_status is QueueStatus.PROCESSING:
            state.queue.pop_head()
            entry = state.history.get(head.id)
            if entry is not None and not entry.status.is_terminal:
                entry.fail("Failed to generate image.")
        self.notify(Signal.IDLE)

    async def _maybe_dispatch(self, signal: Signal) -> None:
        if self._busy:
            logger.debug("Ignoring %s signal: engine busy.", signal.value)
            return
        head = self._state.queue.peek()
        if head is None:
            self._idle.set()
            return
        await self._dispatch(head)

    async def _dispatch(self, head: QueueEntry) -> None:
        state = self._state
        request = head.request

        self._busy = True
        try:
            state.queue.mark_processing()
            entry = state.history.get(request.id)
            if entry is None:
                # History was cleared while this request waited in the queue.
                entry = HistoryEntry(request=request)
                state.history.add(entry)
            state.latest = entry

            attempts = 0

            def record_attempt(number: int) -> None:
                nonlocal attempts
                attempts = number

            logger.info("Dispatching request %s to %s.", request.id, request.model.value)
            try:
                image = await self._client.generate(
                    request.prompt,
                    request.model,
                    request.aspect_ratio,
                    on_attempt=record_attempt,
                )
            except Exception as e:
                message = str(e) or "Failed to generate image."
                entry.fail(message, attempts=attempts)
                logger.error(
                    "Request %s failed after %d attempt(s): %s", request.id, attempts, message
                )
            else:
                entry.complete(image, attempts=attempts)
                logger.info("Request %s completed after %d attempt(s).", request.id, attempts)

            if request.id not in state.history:
                logger.info("History was cleared while request %s was in flight.", request.id)
            state.latest = entry
            state.queue.pop_head()
        finally:
            self._busy = False

        self.notify(Signal.IDLE)
