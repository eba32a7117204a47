"""Model and aspect-ratio catalogue for Imagen Studio.

The catalogue is the closed set of choices a user can make when submitting a
request.  Both enumerations are ``str`` enums so their members compare equal
to the raw values sent by API clients (``"16:9"``, ``"gemini-2.5-flash-image"``).

Aspect ratios
-------------
``AspectRatio.WIDE`` has the same value as ``AspectRatio.LANDSCAPE``.  Python
turns a duplicate enum value into an alias, so ``AspectRatio.WIDE is
AspectRatio.LANDSCAPE`` and the pair behaves as a single ratio everywhere
(validation, provider calls, serialisation).

Model capabilities
------------------
The higher-capability Pro model accepts an explicit output-resolution hint
(``image_size``); the Flash model only accepts the aspect ratio.  The flag is
exposed as :attr:`ModelType.supports_size_hint` so request shaping never has
to compare model identifiers directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ModelType(str, Enum):
    """Gemini image model variants offered to users."""

    GEMINI_FLASH_IMAGE = "gemini-2.5-flash-image"
    GEMINI_PRO_IMAGE = "gemini-3-pro-image-preview"

    @property
    def supports_size_hint(self) -> bool:
        """Whether the model accepts an explicit output-resolution hint."""
        return MODEL_INFO[self].supports_size_hint

    @property
    def label(self) -> str:
        return MODEL_INFO[self].label


class AspectRatio(str, Enum):
    """Supported width:height ratios."""

    SQUARE = "1:1"
    PORTRAIT = "3:4"
    LANDSCAPE = "16:9"
    WIDE = "16:9"  # alias of LANDSCAPE


@dataclass(frozen=True)
class ModelInfo:
    """Display metadata and capability flags for one model variant."""

    label: str
    description: str
    supports_size_hint: bool = False


@dataclass(frozen=True)
class AspectRatioPreset:
    """Display label and nominal pixel dimensions for an aspect ratio."""

    ratio: AspectRatio
    label: str
    width: int
    height: int


MODEL_INFO: dict[ModelType, ModelInfo] = {
    ModelType.GEMINI_FLASH_IMAGE: ModelInfo(
        label="Flash",
        description="Fast generation, aspect ratio control.",
    ),
    ModelType.GEMINI_PRO_IMAGE: ModelInfo(
        label="Pro",
        description="Higher fidelity output with an explicit resolution hint.",
        supports_size_hint=True,
    ),
}

ASPECT_RATIOS: tuple[AspectRatioPreset, ...] = (
    AspectRatioPreset(AspectRatio.SQUARE, "Square (1:1)", 1024, 1024),
    AspectRatioPreset(AspectRatio.PORTRAIT, "Portrait (3:4)", 768, 1024),
    AspectRatioPreset(AspectRatio.LANDSCAPE, "Landscape (16:9)", 1024, 576),
)

DEFAULT_MODEL = ModelType.GEMINI_FLASH_IMAGE
MAX_QUEUE_SIZE = 5
DEBOUNCE_TIME_MS = 500
