"""Tests for imagen_studio.core.config — configuration management.

Tests cover:
- Default values for all configuration fields.
- Environment variable overrides via the IMAGEN_ prefix.
- The unprefixed GEMINI_API_KEY / API_KEY fallbacks.
- Pydantic validation constraints (port range, queue size, log level).
"""

from __future__ import annotations

import pytest

from imagen_studio.core.catalog import ModelType
from imagen_studio.core.config import ImagenStudioConfig


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Remove every variable the config reads and leave no .env in reach."""
    for name in (
        "GEMINI_API_KEY",
        "API_KEY",
        "IMAGEN_GEMINI_API_KEY",
        "IMAGEN_MAX_QUEUE_SIZE",
        "IMAGEN_DEBOUNCE_MS",
        "IMAGEN_DEFAULT_MODEL",
        "IMAGEN_SERVER_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch


class TestConfigDefaults:
    """Verify that ImagenStudioConfig provides sensible defaults."""

    def test_admission_defaults(self, clean_env):
        """Queue capacity 5 and a 500 ms debounce."""
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.max_queue_size == 5
        assert cfg.debounce_ms == 500
        assert cfg.debounce_seconds == 0.5

    def test_retry_defaults(self, clean_env):
        """Two retries starting at one second, doubling."""
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.max_retries == 2
        assert cfg.retry_initial_delay == 1.0
        assert cfg.retry_backoff == 2.0

    def test_prompt_bounds(self, clean_env):
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.prompt_min_length == 3
        assert cfg.prompt_max_length == 1000

    def test_default_model_is_flash(self, clean_env):
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.default_model is ModelType.GEMINI_FLASH_IMAGE

    def test_default_server_port(self, clean_env):
        """Default server port should be 3000."""
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.server_port == 3000

    def test_api_key_optional(self, clean_env):
        """The service starts without an API key."""
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.gemini_api_key is None


class TestConfigEnvironment:
    """Verify environment variable loading."""

    def test_prefixed_override(self, clean_env):
        clean_env.setenv("IMAGEN_MAX_QUEUE_SIZE", "8")
        clean_env.setenv("IMAGEN_DEBOUNCE_MS", "250")
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.max_queue_size == 8
        assert cfg.debounce_seconds == 0.25

    def test_default_model_from_env(self, clean_env):
        clean_env.setenv("IMAGEN_DEFAULT_MODEL", "gemini-3-pro-image-preview")
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.default_model is ModelType.GEMINI_PRO_IMAGE

    def test_gemini_api_key_fallback(self, clean_env):
        """GEMINI_API_KEY is read without the prefix."""
        clean_env.setenv("GEMINI_API_KEY", "from-env")
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.gemini_api_key == "from-env"

    def test_api_key_fallback(self, clean_env):
        clean_env.setenv("API_KEY", "legacy")
        cfg = ImagenStudioConfig(_env_file=None)
        assert cfg.gemini_api_key == "legacy"

    def test_env_file(self, clean_env, tmp_path):
        """Values are read from a .env file."""
        env_file = tmp_path / "custom.env"
        env_file.write_text("IMAGEN_MAX_QUEUE_SIZE=3\n")
        cfg = ImagenStudioConfig(_env_file=str(env_file))
        assert cfg.max_queue_size == 3


class TestConfigValidation:
    """Verify Pydantic validation constraints on config fields."""

    def test_invalid_port_too_low(self, clean_env):
        """Server port below 1024 should raise a validation error."""
        with pytest.raises(Exception):
            ImagenStudioConfig(_env_file=None, server_port=80)

    def test_zero_queue_size_rejected(self, clean_env):
        with pytest.raises(Exception):
            ImagenStudioConfig(_env_file=None, max_queue_size=0)

    def test_negative_debounce_rejected(self, clean_env):
        with pytest.raises(Exception):
            ImagenStudioConfig(_env_file=None, debounce_ms=-1)

    def test_invalid_log_level(self, clean_env):
        with pytest.raises(Exception):
            ImagenStudioConfig(_env_file=None, log_level="VERBOSE")

    def test_unknown_default_model(self, clean_env):
        with pytest.raises(Exception):
            ImagenStudioConfig(_env_file=None, default_model="dall-e-3")
