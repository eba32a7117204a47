"""Unit tests for submission validation."""

import pytest

from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.errors import ImagenStudioError, ValidationError
from imagen_studio.core.validation import (
    validate_aspect_ratio,
    validate_model,
    validate_prompt,
    validate_request,
)


class TestValidationError:
    """Tests for ValidationError exception."""

    def test_validation_error_is_domain_error(self):
        """Test that ValidationError belongs to the domain hierarchy."""
        assert issubclass(ValidationError, ImagenStudioError)

    def test_validation_error_message(self):
        """Test that ValidationError preserves error message."""
        msg = "Custom validation error"
        with pytest.raises(ValidationError, match=msg):
            raise ValidationError(msg)


class TestValidatePrompt:
    """Tests for validate_prompt function."""

    @pytest.mark.parametrize("length", [0, 1, 2])
    def test_short_prompts_rejected(self, length):
        """Test that prompts under 3 characters are too short."""
        with pytest.raises(ValidationError, match="too short"):
            validate_prompt("x" * length)

    @pytest.mark.parametrize("length", [3, 4, 500, 999, 1000])
    def test_prompts_within_bounds_accepted(self, length):
        """Test that every length from 3 to 1000 is accepted."""
        prompt = "x" * length
        assert validate_prompt(prompt) == prompt

    @pytest.mark.parametrize("length", [1001, 5000])
    def test_long_prompts_rejected(self, length):
        """Test that prompts over 1000 characters are rejected."""
        with pytest.raises(ValidationError, match="exceeds 1000 characters"):
            validate_prompt("x" * length)

    def test_custom_bounds(self):
        """Test that configured bounds replace the defaults."""
        with pytest.raises(ValidationError, match="exceeds 10 characters"):
            validate_prompt("x" * 11, min_length=3, max_length=10)

    def test_non_string_rejected(self):
        """Test that a missing prompt is rejected."""
        with pytest.raises(ValidationError, match="required"):
            validate_prompt(None)

    def test_prompt_not_stripped(self):
        """Test that the prompt is returned exactly as given."""
        assert validate_prompt("  a cat  ") == "  a cat  "


class TestValidateAspectRatio:
    """Tests for validate_aspect_ratio function."""

    @pytest.mark.parametrize("value", ["1:1", "3:4", "16:9"])
    def test_supported_values(self, value):
        """Test that string values resolve to enum members."""
        assert validate_aspect_ratio(value).value == value

    def test_enum_member_passes_through(self):
        """Test that enum members are accepted unchanged."""
        assert validate_aspect_ratio(AspectRatio.PORTRAIT) is AspectRatio.PORTRAIT

    def test_wide_alias_is_landscape(self):
        """Test that WIDE resolves to the same ratio as LANDSCAPE."""
        assert validate_aspect_ratio(AspectRatio.WIDE) is AspectRatio.LANDSCAPE

    @pytest.mark.parametrize("value", ["4:3", "", "square", "21:9"])
    def test_unsupported_values(self, value):
        """Test that unsupported ratios are rejected."""
        with pytest.raises(ValidationError, match="Invalid aspect ratio"):
            validate_aspect_ratio(value)


class TestValidateModel:
    """Tests for validate_model function."""

    def test_none_uses_default(self):
        """Test that a missing model is replaced by the default."""
        assert validate_model(None, ModelType.GEMINI_PRO_IMAGE) is ModelType.GEMINI_PRO_IMAGE

    def test_empty_string_uses_default(self):
        """Test that an empty model string is treated as missing."""
        assert validate_model("", ModelType.GEMINI_FLASH_IMAGE) is ModelType.GEMINI_FLASH_IMAGE

    def test_known_model(self):
        """Test that a supported model identifier resolves."""
        result = validate_model("gemini-3-pro-image-preview", ModelType.GEMINI_FLASH_IMAGE)
        assert result is ModelType.GEMINI_PRO_IMAGE

    def test_unknown_model_rejected(self):
        """Test that an unsupported model identifier is rejected."""
        with pytest.raises(ValidationError, match="Invalid model"):
            validate_model("dall-e-3", ModelType.GEMINI_FLASH_IMAGE)


class TestValidateRequest:
    """Tests for validate_request function."""

    def test_valid_request_normalized(self):
        """Test that a valid submission returns enum-typed fields."""
        result = validate_request("A red fox", "16:9", "gemini-2.5-flash-image")

        assert result.prompt == "A red fox"
        assert result.aspect_ratio is AspectRatio.LANDSCAPE
        assert result.model is ModelType.GEMINI_FLASH_IMAGE

    def test_default_model_substituted(self):
        """Test that the configured default fills a missing model."""
        result = validate_request(
            "A red fox", "1:1", default_model=ModelType.GEMINI_PRO_IMAGE
        )
        assert result.model is ModelType.GEMINI_PRO_IMAGE

    def test_prompt_checked_before_aspect_ratio(self):
        """Test that the first failing rule wins."""
        with pytest.raises(ValidationError, match="too short"):
            validate_request("ab", "bogus", "bogus")

    def test_aspect_ratio_checked_before_model(self):
        """Test that an invalid ratio is reported before an invalid model."""
        with pytest.raises(ValidationError, match="Invalid aspect ratio"):
            validate_request("A red fox", "bogus", "bogus")

    def test_long_prompt_checked_before_aspect_ratio(self):
        """Test that a too-long prompt is reported before an invalid ratio."""
        with pytest.raises(ValidationError, match="exceeds"):
            validate_request("x" * 1001, "bogus")
