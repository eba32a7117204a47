"""Core request pipeline for Imagen Studio.

This module provides the components that take a prompt from submission to a
finished (or failed) image:

- **validation**: checks prompt length, aspect ratio and model
- **AdmissionController**: debounce interval and queue capacity
- **RequestQueue / HistoryStore**: bounded FIFO and newest-first history
- **GenerationClient / RetryPolicy**: remote call with exponential back-off
- **ExecutionEngine**: single-in-flight consumer of the queue
- **Studio**: session controller that owns the state and wires it together
- **ImagenStudioConfig**: configuration management using Pydantic Settings

Architecture Overview
---------------------
1. **Configuration Layer** (config.py, catalog.py):
   - Environment-based configuration using Pydantic Settings
   - All settings prefixed with IMAGEN_ in .env files
   - Closed catalogue of models and aspect ratios

2. **Admission Layer** (validation.py, admission.py):
   - Synchronous; rejects before any state is touched

3. **Execution Layer** (engine.py, generation.py, providers.py):
   - One asyncio consumer task, one remote call at a time
   - Failures are recorded on the request's history entry

Usage Example
-------------
    from imagen_studio.core import Studio, GeminiProvider, config

    studio = Studio(config, GeminiProvider(api_key=config.gemini_api_key))
    await studio.start()
    await studio.login("google")
    studio.submit("a lighthouse at dusk", "16:9")
"""

from imagen_studio.core.catalog import AspectRatio, ModelType
from imagen_studio.core.config import ImagenStudioConfig, config
from imagen_studio.core.engine import ExecutionEngine
from imagen_studio.core.generation import GenerationClient, RetryPolicy
from imagen_studio.core.providers import GeminiProvider, ProviderResponse
from imagen_studio.core.studio import Studio

__all__ = [
    "AspectRatio",
    "ExecutionEngine",
    "GeminiProvider",
    "GenerationClient",
    "ImagenStudioConfig",
    "ModelType",
    "ProviderResponse",
    "RetryPolicy",
    "Studio",
    "config",
]
