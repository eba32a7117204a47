"""Shared pytest fixtures for Imagen Studio tests."""

import asyncio
import io
from collections.abc import Callable, Iterator
from contextlib import ExitStack

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from imagen_studio.api.main import create_app
from imagen_studio.core.config import ImagenStudioConfig
from imagen_studio.core.providers import ProviderResponse
from imagen_studio.core.studio import Studio


def make_png_bytes(width: int = 8, height: int = 8) -> bytes:
    """Create a small valid PNG image."""
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color=(255, 0, 0)).save(buf, "PNG")
    return buf.getvalue()


class FakeProvider:
    """Scripted stand-in for a remote generation provider.

    Each call pops the next outcome from ``outcomes``; an exception instance
    is raised, anything else is returned.  When the script is exhausted the
    ``default`` response is returned.  Setting ``gate`` to an unset
    ``asyncio.Event`` holds every call until the event is set.
    """

    def __init__(self, outcomes: list | None = None) -> None:
        self.outcomes = list(outcomes or [])
        self.default = ProviderResponse(image_bytes=make_png_bytes(), mime_type="image/png")
        self.calls: list[dict] = []
        self.gate: asyncio.Event | None = None
        self.in_flight = 0
        self.max_in_flight = 0

    async def generate(self, prompt, model_id, aspect_ratio, size_hint=None):
        self.calls.append(
            {
                "prompt": prompt,
                "model_id": model_id,
                "aspect_ratio": aspect_ratio,
                "size_hint": size_hint,
            }
        )
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if self.gate is not None:
                await self.gate.wait()
            outcome = self.outcomes.pop(0) if self.outcomes else self.default
            if isinstance(outcome, BaseException):
                raise outcome
            return outcome
        finally:
            self.in_flight -= 1

    @property
    def prompts(self) -> list[str]:
        return [call["prompt"] for call in self.calls]


class RecordingSleep:
    """Async sleep replacement that records requested delays and returns at once."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_config(tmp_path, monkeypatch) -> ImagenStudioConfig:
    """Create a test configuration isolated from the environment.

    Debounce and simulated sign-in latency are kept at their production
    values so tests exercise them through the injected clock and sleep.
    """
    for name in ("GEMINI_API_KEY", "API_KEY", "IMAGEN_GEMINI_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)

    return ImagenStudioConfig(
        _env_file=None,
        gemini_api_key="test-key",
        max_queue_size=5,
        debounce_ms=500,
        max_retries=2,
        retry_initial_delay_ms=1000,
        retry_backoff=2.0,
        auth_delay_ms=0,
    )


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_studio(
    test_config, fake_provider, fake_clock, recording_sleep
) -> Callable[..., Studio]:
    """Factory for a Studio wired to the fake provider, clock and sleep.

    Keyword overrides are applied to the test configuration.
    """

    def factory(**overrides) -> Studio:
        cfg = test_config.model_copy(update=overrides) if overrides else test_config
        return Studio(cfg, fake_provider, clock=fake_clock, sleep=recording_sleep)

    return factory


@pytest.fixture
def png_bytes() -> bytes:
    return make_png_bytes()


@pytest.fixture
def make_client(test_config, fake_provider) -> Iterator[Callable[..., TestClient]]:
    """Factory for a FastAPI TestClient running the full lifespan.

    Debounce and retry delays default to zero so polling tests run quickly;
    keyword overrides are applied to the test configuration.  Every client is
    closed at teardown, which stops the studio's engine.
    """
    with ExitStack() as stack:

        def factory(provider=None, **overrides) -> TestClient:
            settings = test_config.model_copy(
                update={"debounce_ms": 0, "retry_initial_delay_ms": 0, **overrides}
            )
            app = create_app(settings, provider=provider or fake_provider)
            return stack.enter_context(TestClient(app))

        yield factory


@pytest.fixture
def test_client(make_client) -> TestClient:
    """Signed-in TestClient with default test settings."""
    client = make_client()
    client.post("/api/auth/login", json={"provider": "google"})
    return client
