"""Studio controller: the one object that owns a session's pipeline state.

:class:`Studio` wires the validator, admission controller, generation client
and execution engine around a single :class:`StudioState`.  The presentation
layer talks only to this class: it submits requests, clears history, signs
users in and out, and reads snapshots of the queue, history and latest
result.  Everything else is read-only from the outside.

Usage
-----
::

    studio = Studio(config, GeminiProvider(api_key=config.gemini_api_key))
    await studio.start()
    await studio.login("google")
    request = studio.submit("a lighthouse at dusk", "16:9")
    await studio.wait_until_idle()
    print(studio.latest.status)
    await studio.stop()
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from imagen_studio.core.admission import AdmissionController
from imagen_studio.core.auth import DemoIdentityProvider, ProviderKind, User
from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.config import ImagenStudioConfig
from imagen_studio.core.engine import ExecutionEngine, Signal
from imagen_studio.core.errors import NotAuthenticated
from imagen_studio.core.generation import GenerationClient, RetryPolicy
from imagen_studio.core.models import GenerationRequest, HistoryEntry, QueueEntry
from imagen_studio.core.providers import GenerationProvider
from imagen_studio.core.store import StudioState
from imagen_studio.core.validation import validate_request

logger = logging.getLogger(__name__)


class Studio:
    """Session controller for queued image generation.

    Args:
        config: Application configuration
        provider: Remote generation provider
        identity_provider: Sign-in backend; defaults to the demo provider
        clock: Monotonic clock for the debounce check
        sleep: Coroutine function used for retry back-off
    """

    def __init__(
        self,
        config: ImagenStudioConfig,
        provider: GenerationProvider,
        *,
        identity_provider: DemoIdentityProvider | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._config = config
        self.state = StudioState.create(config.max_queue_size)
        self.admission = AdmissionController(
            self.state,
            debounce_seconds=config.debounce_seconds,
            clock=clock,
        )
        self.client = GenerationClient(
            provider,
            retry_policy=RetryPolicy(
                max_retries=config.max_retries,
                initial_delay=config.retry_initial_delay,
                multiplier=config.retry_backoff,
                sleep=sleep,
            ),
            size_hint=config.pro_image_size,
        )
        self.engine = ExecutionEngine(self.state, self.client)
        self.identity_provider = identity_provider or DemoIdentityProvider(
            delay=config.auth_delay
        )
        self.user: User | None = None

    # -- Lifecycle ----------------------------------------------------------

    async def start(self) -> None:
        await self.engine.start()

    async def stop(self) -> None:
        await self.engine.stop()

    async def wait_until_idle(self) -> None:
        await self.engine.wait_until_idle()

    async def __aenter__(self) -> Studio:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()

    # -- Identity -----------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.user.is_authenticated

    async def login(self, provider: ProviderKind | str) -> User:
        """Sign in through the identity provider.

        Raises:
            AuthError: If the identity provider rejects the request
        """
        self.user = await self.identity_provider.authenticate(provider)
        return self.user

    def logout(self) -> None:
        """Sign out and drop session data.

        Clears the history and the latest result and discards queued
        requests.  A request already in flight runs to completion.
        """
        if self.user is not None:
            logger.info("Signing out %s.", self.user.email)
        self.user = None
        self.state.queue.discard_pending()
        self.clear_history()

    # -- Submission ---------------------------------------------------------

    def submit(
        self,
        prompt: str,
        aspect_ratio: AspectRatio | str,
        model: ModelType | str | None = None,
    ) -> GenerationRequest:
        """Validate, admit and enqueue a generation request.

        Returns:
            The accepted request

        Raises:
            NotAuthenticated: If nobody is signed in
            ValidationError: If the input is invalid
            RateLimited: If submitted inside the debounce interval
            QueueFull: If the queue is at capacity
        """
        if not self.is_authenticated:
            raise NotAuthenticated()

        validated = validate_request(
            prompt,
            aspect_ratio,
            model,
            default_model=self._config.default_model,
            min_length=self._config.prompt_min_length,
            max_length=self._config.prompt_max_length,
        )
        request = self.admission.admit(validated)
        self.engine.notify(Signal.ENQUEUED)
        return request

    def clear_history(self) -> int:
        """Empty the history and reset the latest result.

        The queue and any in-flight request are not affected.

        Returns:
            Number of history entries removed
        """
        removed = self.state.history.clear()
        self.state.latest = None
        logger.info("Cleared %d history entries.", removed)
        return removed

    # -- Read-only views ----------------------------------------------------

    @property
    def queue(self) -> list[QueueEntry]:
        return list(self.state.queue)

    @property
    def history(self) -> list[HistoryEntry]:
        return list(self.state.history)

    @property
    def latest(self) -> HistoryEntry | None:
        return self.state.latest

    def snapshot(self) -> dict:
        """Serialisable view of the queue, history and latest result."""
        latest = self.state.latest
        return {
            "queue": [entry.to_dict() for entry in self.state.queue],
            "history": [entry.to_dict() for entry in self.state.history],
            "latest": latest.to_dict() if latest is not None else None,
            "busy": self.engine.busy,
        }
