"""Imagen Studio - queued text-to-image generation on Gemini image models."""

__version__ = "0.1.0"

from imagen_studio.core.config import ImagenStudioConfig, config
from imagen_studio.core.studio import Studio

__all__ = [
    "ImagenStudioConfig",
    "Studio",
    "config",
]
