"""Generation client and retry policy.

:class:`GenerationClient` turns one remote provider call into either a data
URI or a :class:`~imagen_studio.core.errors.GenerationError`, and wraps the
call in a :class:`RetryPolicy`.

Response interpretation
-----------------------
- image payload present → ``data:<mime>;base64,<payload>`` (MIME defaults to
  ``image/png`` when the provider does not report one)
- no image, but text → ``"Model declined to generate image: <text>"``
- neither → ``"Model response did not contain inline image data."``
- provider raised → the provider's message, verbatim

Retry policy
------------
Every failure is retried, whatever its kind, until ``1 + max_retries``
attempts have been made.  The delay before retry *n* is
``initial_delay * multiplier ** (n - 1)``: with the defaults that is 1 s then
2 s.  When attempts run out the last error is re-raised unchanged.  The sleep
function is injectable so tests can observe the schedule without waiting.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import TypeVar

from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.errors import GenerationError
from imagen_studio.core.providers import GenerationProvider, ProviderResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MIME_TYPE = "image/png"


@dataclass
class RetryPolicy:
    """Bounded retry loop with exponential backoff.

    Attributes:
        max_retries: Additional attempts after the first one
        initial_delay: Seconds to wait before the first retry
        multiplier: Factor applied to the delay after each retry
        sleep: Coroutine function used to wait between attempts
    """

    max_retries: int = 2
    initial_delay: float = 1.0
    multiplier: float = 2.0
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def delays(self) -> Iterator[float]:
        """Yield the wait before each retry, in order."""
        delay = self.initial_delay
        for _ in range(self.max_retries):
            yield delay
            delay *= self.multiplier

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        on_attempt: Callable[[int], None] | None = None,
    ) -> T:
        """Await *operation* until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument coroutine function, called once per attempt
            on_attempt: Called with the 1-based attempt number before each call

        Returns:
            The first successful result

        Raises:
            Exception: The last error raised by *operation*, unchanged
        """
        delays = self.delays()
        attempt = 0
        while True:
            attempt += 1
            if on_attempt is not None:
                on_attempt(attempt)
            try:
                return await operation()
            except Exception as e:
                delay = next(delays, None)
                if delay is None:
                    raise
                logger.warning(
                    "Operation failed, retrying in %dms... (%d retries left): %s",
                    round(delay * 1000),
                    self.max_attempts - attempt,
                    e,
                )
                await self.sleep(delay)


def to_data_uri(payload: bytes | str, mime_type: str | None = None) -> str:
    """Build a ``data:`` URI from raw bytes or an already base64-encoded string."""
    if isinstance(payload, bytes):
        encoded = base64.b64encode(payload).decode("ascii")
    else:
        encoded = payload
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{encoded}"


def interpret_response(response: ProviderResponse) -> str:
    """Convert a provider response into a data URI.

    Raises:
        GenerationError: If the response carries no image
    """
    if response.image_bytes:
        return to_data_uri(response.image_bytes, response.mime_type)
    if response.text:
        raise GenerationError(f"Model declined to generate image: {response.text}")
    raise GenerationError("Model response did not contain inline image data.")


class GenerationClient:
    """Calls a :class:`GenerationProvider` with model-specific shaping and retries.

    Args:
        provider: Remote provider; the client is its only caller
        retry_policy: Retry schedule; defaults to 3 attempts, 1 s / 2 s backoff
        size_hint: Resolution hint sent to models that support one
    """

    def __init__(
        self,
        provider: GenerationProvider,
        *,
        retry_policy: RetryPolicy | None = None,
        size_hint: str = "1K",
    ) -> None:
        self._provider = provider
        self._retry_policy = retry_policy or RetryPolicy()
        self._size_hint = size_hint

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def generate(
        self,
        prompt: str,
        model: ModelType,
        aspect_ratio: AspectRatio,
        *,
        on_attempt: Callable[[int], None] | None = None,
    ) -> str:
        """Generate one image, retrying on any failure.

        Returns:
            A ``data:`` URI with the base64-encoded image

        Raises:
            GenerationError: After the final attempt fails
        """
        return await self._retry_policy.run(
            lambda: self._attempt(prompt, model, aspect_ratio),
            on_attempt=on_attempt,
        )

    async def _attempt(self, prompt: str, model: ModelType, aspect_ratio: AspectRatio) -> str:
        size_hint = self._size_hint if model.supports_size_hint else None
        try:
            response = await self._provider.generate(
                prompt,
                model.value,
                aspect_ratio.value,
                size_hint,
            )
        except Exception as e:
            logger.error("Gemini generation error: %s", e)
            raise GenerationError(str(e) or "Failed to generate image.") from e
        return interpret_response(response)
