"""Validation utilities for generation submissions."""

import logging

from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.errors import ValidationError
from imagen_studio.core.models import ValidatedRequest

logger = logging.getLogger(__name__)


def validate_prompt(prompt: str, min_length: int = 3, max_length: int = 1000) -> str:
    """Validate prompt length.

    Args:
        prompt: Prompt text as typed by the user
        min_length: Minimum number of characters
        max_length: Maximum number of characters

    Returns:
        The prompt, unchanged

    Raises:
        ValidationError: If the prompt is missing, too short or too long
    """
    if not isinstance(prompt, str):
        raise ValidationError("Prompt is required")

    if len(prompt) < min_length:
        raise ValidationError("Prompt is too short")

    if len(prompt) > max_length:
        raise ValidationError(f"Prompt exceeds {max_length} characters")

    return prompt


def validate_aspect_ratio(value: AspectRatio | str) -> AspectRatio:
    """Resolve an aspect ratio value against the supported enumeration.

    Raises:
        ValidationError: If the ratio is not supported
    """
    try:
        return AspectRatio(value)
    except ValueError as e:
        raise ValidationError(f"Invalid aspect ratio: {value}") from e


def validate_model(value: ModelType | str | None, default: ModelType) -> ModelType:
    """Resolve a model identifier, substituting *default* when none is given.

    Raises:
        ValidationError: If a model is given but not supported
    """
    if value is None or value == "":
        return default
    try:
        return ModelType(value)
    except ValueError as e:
        raise ValidationError(f"Invalid model: {value}") from e


def validate_request(
    prompt: str,
    aspect_ratio: AspectRatio | str,
    model: ModelType | str | None = None,
    *,
    default_model: ModelType = ModelType.GEMINI_FLASH_IMAGE,
    min_length: int = 3,
    max_length: int = 1000,
) -> ValidatedRequest:
    """Validate a proposed submission.

    Rules are checked in order and the first failure wins: prompt too short,
    prompt too long, unsupported aspect ratio, unsupported model.  A missing
    model is replaced by *default_model*.  This function has no side effects.

    Args:
        prompt: Prompt text
        aspect_ratio: Enum member or its string value (e.g. ``"16:9"``)
        model: Enum member, its string value, or ``None``
        default_model: Model substituted when *model* is ``None``
        min_length: Minimum prompt length
        max_length: Maximum prompt length

    Returns:
        Normalized :class:`ValidatedRequest`

    Raises:
        ValidationError: With a single user-facing reason
    """
    prompt = validate_prompt(prompt, min_length=min_length, max_length=max_length)
    ratio = validate_aspect_ratio(aspect_ratio)
    resolved_model = validate_model(model, default_model)

    logger.debug("Validated request: model=%s ratio=%s", resolved_model.value, ratio.value)
    return ValidatedRequest(prompt=prompt, aspect_ratio=ratio, model=resolved_model)
