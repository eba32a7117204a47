"""Imagen Studio — FastAPI Application.

This module is the HTTP entry point for the studio.  It defines the
``create_app()`` factory, the module-level ``app`` instance, all REST routes,
and the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
- **Pipeline state** lives in a single :class:`~imagen_studio.core.studio.Studio`
  created in the lifespan handler and stored on ``app.state``.
- **Image generation** is performed in the background by the studio's
  execution engine; ``POST /api/generate`` only enqueues and returns ``202``.
- **Clients** poll ``/api/queue``, ``/api/history`` and ``/api/latest`` for
  progress.  All state is read-only except through submit, clear, login and
  logout.

Endpoints
---------
========  ============================  ====================================
Method    Path                          Purpose
========  ============================  ====================================
GET       ``/api/config``               Models, aspect ratios, limits
POST      ``/api/auth/login``           Simulated sign-in
POST      ``/api/auth/logout``          Sign out, drop session data
GET       ``/api/session``              Current user
POST      ``/api/generate``             Submit a generation request
GET       ``/api/queue``                Pending and in-flight requests
GET       ``/api/history``              All requests, newest first
GET       ``/api/history/{id}``         Single history entry
DELETE    ``/api/history``              Clear history
GET       ``/api/latest``               Foregrounded result
========  ============================  ====================================

Usage
-----
CLI (installed entry point)::

    imagen-studio

Direct invocation::

    python -m imagen_studio.api.main
"""

from __future__ import annotations

import logging
import math
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from imagen_studio import __version__
from imagen_studio.api.models import GenerateRequest, LoginRequest
from imagen_studio.core.catalog import ASPECT_RATIOS, MODEL_INFO
from imagen_studio.core.config import ImagenStudioConfig, config
from imagen_studio.core.errors import (
    AuthError,
    NotAuthenticated,
    QueueFull,
    RateLimited,
    ValidationError,
)
from imagen_studio.core.providers import GeminiProvider, GenerationProvider
from imagen_studio.core.studio import Studio

logger = logging.getLogger(__name__)


def create_app(
    settings: ImagenStudioConfig | None = None,
    provider: GenerationProvider | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    The application runs a single session: one :class:`Studio` is shared by
    every HTTP client.  A login through ``/api/auth/login`` signs in all
    callers, and a logout through ``/api/auth/logout`` clears the history and
    queued requests for everyone.  Deploy one instance per user.

    Args:
        settings: Configuration; defaults to the global ``config``.
        provider: Generation provider; defaults to a :class:`GeminiProvider`
            using ``settings.gemini_api_key``.

    Returns:
        Configured FastAPI application.
    """
    settings = settings or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the studio and run its engine for the application lifetime."""
        # --- Startup -------------------------------------------------------
        studio = Studio(
            settings,
            provider or GeminiProvider(api_key=settings.gemini_api_key),
        )
        await studio.start()
        app.state.studio = studio
        logger.info("Studio started (queue capacity %d).", settings.max_queue_size)

        yield  # Application runs here.

        # --- Shutdown ------------------------------------------------------
        await studio.stop()
        logger.info("Studio stopped.")

    app = FastAPI(
        title="Imagen Studio",
        description="Queued text-to-image generation on Gemini image models.",
        version=__version__,
        lifespan=lifespan,
    )

    # Allow cross-origin requests so a separately served frontend can poll
    # the API during development.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_routes(app, settings)
    return app


def _studio(request: Request) -> Studio:
    return request.app.state.studio


def _register_routes(app: FastAPI, settings: ImagenStudioConfig) -> None:
    @app.get("/api/config")
    async def get_config() -> dict:
        """Return the catalogue and admission limits for the frontend.

        Returns:
            Dictionary with ``version``, ``models``, ``aspect_ratios``,
            ``default_model``, ``max_queue_size``, ``debounce_ms`` and the
            prompt length bounds.
        """
        return {
            "version": __version__,
            "models": [
                {
                    "id": model.value,
                    "label": info.label,
                    "description": info.description,
                    "supports_size_hint": info.supports_size_hint,
                }
                for model, info in MODEL_INFO.items()
            ],
            "aspect_ratios": [
                {
                    "id": preset.ratio.value,
                    "label": preset.label,
                    "width": preset.width,
                    "height": preset.height,
                }
                for preset in ASPECT_RATIOS
            ],
            "default_model": settings.default_model.value,
            "max_queue_size": settings.max_queue_size,
            "debounce_ms": settings.debounce_ms,
            "prompt_min_length": settings.prompt_min_length,
            "prompt_max_length": settings.prompt_max_length,
        }

    @app.post("/api/auth/login")
    async def login(req: LoginRequest, request: Request) -> dict:
        """Sign in through the demo identity provider.

        Raises:
            HTTPException: 400 for an unsupported provider.
        """
        try:
            user = await _studio(request).login(req.provider)
        except AuthError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        return {"success": True, "user": user.to_dict()}

    @app.post("/api/auth/logout")
    async def logout(request: Request) -> dict:
        """Sign out.  Clears history and drops queued requests."""
        _studio(request).logout()
        return {"success": True}

    @app.get("/api/session")
    async def get_session(request: Request) -> dict:
        """Return the signed-in user.

        Raises:
            HTTPException: 401 if nobody is signed in.
        """
        studio = _studio(request)
        if not studio.is_authenticated:
            raise HTTPException(status_code=401, detail="Not signed in")
        return {"user": studio.user.to_dict()}

    @app.post("/api/generate", status_code=202)
    async def generate(req: GenerateRequest, request: Request) -> dict:
        """Submit a generation request.

        The request is validated, admitted and queued; generation happens in
        the background.  Poll ``/api/history/{id}`` for the outcome.

        Returns:
            Dictionary with ``success``, ``request`` and ``queue_length``.

        Raises:
            HTTPException: 401 when signed out, 400 for invalid input, 429
                inside the debounce interval, 503 when the queue is full.
        """
        studio = _studio(request)
        try:
            accepted = studio.submit(req.prompt, req.aspect_ratio, req.model)
        except NotAuthenticated as e:
            raise HTTPException(status_code=401, detail=str(e)) from e
        except ValidationError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e
        except RateLimited as e:
            raise HTTPException(
                status_code=429,
                detail=str(e),
                headers={"Retry-After": str(max(1, math.ceil(e.retry_after)))},
            ) from e
        except QueueFull as e:
            raise HTTPException(status_code=503, detail=str(e)) from e

        return {
            "success": True,
            "request": accepted.to_dict(),
            "queue_length": len(studio.state.queue),
        }

    @app.get("/api/queue")
    async def get_queue(request: Request) -> dict:
        """Return queued and in-flight requests in processing order."""
        studio = _studio(request)
        return {
            "busy": studio.engine.busy,
            "capacity": studio.state.queue.capacity,
            "items": [entry.to_dict() for entry in studio.queue],
        }

    @app.get("/api/history")
    async def get_history(request: Request, status: str | None = None) -> dict:
        """Return the history, newest first.

        Args:
            status: Optional filter (``processing``, ``completed``, ``failed``).
        """
        entries = [entry.to_dict() for entry in _studio(request).history]
        if status:
            entries = [entry for entry in entries if entry["status"] == status]
        return {"total": len(entries), "items": entries}

    @app.get("/api/history/{request_id}")
    async def get_history_entry(request_id: str, request: Request) -> dict:
        """Return a single history entry.

        Raises:
            HTTPException: 404 if the entry is not in the history.
        """
        entry = _studio(request).state.history.get(request_id)
        if entry is None:
            raise HTTPException(status_code=404, detail="Request not found")
        return entry.to_dict()

    @app.delete("/api/history")
    async def clear_history(request: Request) -> dict:
        """Clear the history and the latest result.  The queue is untouched."""
        removed = _studio(request).clear_history()
        return {"success": True, "removed": removed}

    @app.get("/api/latest")
    async def get_latest(request: Request) -> dict:
        """Return the foregrounded history entry, or ``null``."""
        latest = _studio(request).latest
        return {"latest": latest.to_dict() if latest is not None else None}


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~imagen_studio.core.config.config`
    (``IMAGEN_SERVER_HOST``, ``IMAGEN_SERVER_PORT``, ``IMAGEN_LOG_LEVEL``).

    This function is registered as the ``imagen-studio`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "imagen_studio.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
