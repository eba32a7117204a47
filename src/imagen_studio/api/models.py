"""Pydantic request models for the Imagen Studio API.

FastAPI uses these models for request parsing and OpenAPI documentation.
They deliberately accept plain strings for the prompt, aspect ratio and model
so that domain validation (and its user-facing messages) stays in
:mod:`imagen_studio.core.validation` rather than being split between two
layers.

Models
------
GenerateRequest
    Payload for ``POST /api/generate``.
LoginRequest
    Payload for ``POST /api/auth/login``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateRequest(BaseModel):
    """Request body for the ``POST /api/generate`` endpoint.

    Attributes:
        prompt: Natural-language description of the image (3–1000 characters).
        aspect_ratio: Aspect ratio value, e.g. ``"1:1"`` or ``"16:9"``.
        model: Model identifier.  ``None`` selects the configured default.
    """

    prompt: str = Field(
        ...,
        description="Image description (3-1000 characters).",
    )
    aspect_ratio: str = Field(
        default="1:1",
        description="Aspect ratio value (e.g. '1:1', '3:4', '16:9').",
    )
    model: str | None = Field(
        default=None,
        description="Model identifier; omit to use the configured default.",
    )


class LoginRequest(BaseModel):
    """Request body for the ``POST /api/auth/login`` endpoint.

    Attributes:
        provider: Identity provider, ``"google"`` or ``"linkedin"``.
    """

    provider: str = Field(
        ...,
        description="Identity provider: 'google' or 'linkedin'.",
    )
