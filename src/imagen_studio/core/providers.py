"""Remote image-generation providers for Imagen Studio.

A provider is the single point of contact with a remote generative-image API.
It performs exactly one call per :meth:`GenerationProvider.generate` and
reports what came back as a :class:`ProviderResponse`; interpreting that
response (declines, missing payloads) and retrying failures are the job of
:class:`~imagen_studio.core.generation.GenerationClient`.

:class:`GeminiProvider` talks to Google's Gemini image models through the
``google-genai`` SDK.  The SDK client is created lazily on the first call so
that importing this module, or starting the server without an API key, never
touches the network.

Usage
-----
::

    provider = GeminiProvider(api_key="...")
    response = await provider.generate(
        prompt="a lighthouse at dusk",
        model_id="gemini-3-pro-image-preview",
        aspect_ratio="16:9",
        size_hint="1K",
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderResponse:
    """What a single provider call returned.

    Attributes:
        image_bytes: Raw image payload, or ``None`` if the response had none.
        mime_type: MIME type reported alongside the payload, if any.
        text: Text returned instead of (or next to) an image.  Providers use
            it to explain refusals such as safety filtering.
    """

    image_bytes: bytes | None = None
    mime_type: str | None = None
    text: str | None = None


class GenerationProvider(Protocol):
    """Contract for remote image-generation backends."""

    async def generate(
        self,
        prompt: str,
        model_id: str,
        aspect_ratio: str,
        size_hint: str | None = None,
    ) -> ProviderResponse: ...


class GeminiProvider:
    """Gemini image generation through ``google.genai``.

    Args:
        api_key: Gemini API key.  When ``None`` the SDK falls back to its own
            environment lookup and raises if nothing is configured.
        client: Pre-built ``genai.Client``; mainly for tests.
    """

    def __init__(self, api_key: str | None = None, client: Any = None) -> None:
        self._api_key = api_key
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            from google import genai

            logger.info("Creating Gemini client.")
            self._client = genai.Client(api_key=self._api_key)
        return self._client

    async def generate(
        self,
        prompt: str,
        model_id: str,
        aspect_ratio: str,
        size_hint: str | None = None,
    ) -> ProviderResponse:
        """Request one image from Gemini.

        The aspect ratio is always sent.  ``size_hint`` is attached as
        ``image_size`` only when given; callers decide based on the model's
        capabilities.

        Returns:
            The first inline image found in the first candidate, or the first
            text part when no image is present.

        Raises:
            Exception: Whatever the SDK raises for transport, auth or quota
                failures, unchanged.
        """
        image_config: dict[str, str] = {"aspect_ratio": aspect_ratio}
        if size_hint:
            image_config["image_size"] = size_hint

        logger.info("Calling %s (aspect_ratio=%s, size=%s).", model_id, aspect_ratio, size_hint)
        response = await self._get_client().aio.models.generate_content(
            model=model_id,
            contents=prompt,
            config={"image_config": image_config},
        )
        return parse_response(response)


def parse_response(response: Any) -> ProviderResponse:
    """Extract the image or explanatory text from a ``GenerateContentResponse``."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return ProviderResponse()

    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []

    text: str | None = None
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            return ProviderResponse(image_bytes=inline.data, mime_type=inline.mime_type)
        if text is None and getattr(part, "text", None):
            text = part.text

    return ProviderResponse(text=text)
