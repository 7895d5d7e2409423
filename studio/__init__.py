"""
Image Studio
============

Proxy utilities for a chat-completions style text-to-image provider.

Available modules:
    - provider_client: Configuration, authentication headers, model catalog
    - images: Single image generation and response probing
    - batch: Parallel batch generation with progress reporting
    - history: Capped, newest-first generation history
    - presets: Style and resolution presets
    - errors: ValidationError, ProviderError, NotFoundError, StorageError

Quick Start:
    from studio.models import GenerationRequest
    from studio.images import generate_image
    url = generate_image(GenerationRequest(prompt="A sunset over mountains"))

    from studio.batch import run_batch
    results = run_batch(GenerationRequest(prompt="A red fox", seed=1), count=3)

    from studio.history import HistoryStore, JsonFileBackend
    store = HistoryStore(JsonFileBackend("history.json"), max_entries=50)
"""

from studio.provider_client import get_config
