"""
Core Provider Client Configuration
==================================

Reads provider credentials from a settings.json file and provides shared
configuration for all studio modules.

Settings file format (first file found wins):
    {"env": {"IMAGE_API_KEY": "...", "IMAGE_API_BASE_URL": "...", ...}}

Environment variables override anything read from the settings file:
    IMAGE_API_KEY          - Bearer token for the provider
    IMAGE_API_BASE_URL     - Base URL of the provider
    IMAGE_API_PATH         - Path of the chat completions endpoint
    IMAGE_CUSTOMER_ID      - Value of the CustomerId header (optional)
    IMAGE_MODEL            - Model alias or full model ID
    IMAGE_REQUEST_TIMEOUT  - Per-request timeout in seconds
    HISTORY_PATH           - JSON file backing the generation history
    HISTORY_MAX_ENTRIES    - History cap
"""

import os
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Settings discovery
# ---------------------------------------------------------------------------

SETTINGS_PATHS = [
    Path.home() / ".image-studio" / "settings.json",
    Path(__file__).resolve().parent.parent / "backend" / "settings.json",
    Path(__file__).resolve().parent.parent / "settings.json",
]

DEFAULTS = {
    "api_key": "",
    "base_url": "https://oi-server.onrender.com",
    "api_path": "/chat/completions",
    "customer_id": "",
    "model": "flux-pro",
    "timeout": 120.0,
    "history_path": str(Path(__file__).resolve().parent.parent / "generated-history" / "history.json"),
    "history_max_entries": 100,
}

ENV_KEYS = {
    "api_key": "IMAGE_API_KEY",
    "base_url": "IMAGE_API_BASE_URL",
    "api_path": "IMAGE_API_PATH",
    "customer_id": "IMAGE_CUSTOMER_ID",
    "model": "IMAGE_MODEL",
    "timeout": "IMAGE_REQUEST_TIMEOUT",
    "history_path": "HISTORY_PATH",
    "history_max_entries": "HISTORY_MAX_ENTRIES",
}

_config_cache = None


def _load_settings() -> dict:
    """Load settings from the first available settings file."""
    for path in SETTINGS_PATHS:
        if path.exists():
            try:
                with open(path) as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                logger.warning("Ignoring unreadable settings file %s: %s", path, e)
                continue
            env = data.get("env", {})
            settings = {
                key: env[env_name]
                for key, env_name in ENV_KEYS.items()
                if env_name in env
            }
            settings["source"] = str(path)
            return settings
    return {}


def get_config() -> dict:
    """
    Get the provider configuration.

    Returns a dict with keys: api_key, base_url, api_path, customer_id, model,
    timeout, history_path, history_max_entries, source.
    Values set in the environment take precedence over the settings file,
    which takes precedence over DEFAULTS.
    """
    global _config_cache
    if _config_cache is None:
        _config_cache = _load_settings()

    cfg = {}
    for key, env_name in ENV_KEYS.items():
        cfg[key] = os.environ.get(env_name, _config_cache.get(key, DEFAULTS[key]))
    cfg["timeout"] = float(cfg["timeout"])
    cfg["history_max_entries"] = int(cfg["history_max_entries"])
    cfg["source"] = _config_cache.get("source", "env")
    return cfg


def reset_config() -> None:
    """Forget the cached settings file so the next get_config() re-reads it."""
    global _config_cache
    _config_cache = None


def get_headers(extra: dict | None = None) -> dict:
    """Return standard Authorization + Content-Type (+ CustomerId) headers."""
    cfg = get_config()
    h = {
        "Authorization": f"Bearer {cfg['api_key']}",
        "Content-Type": "application/json",
    }
    if cfg["customer_id"]:
        h["CustomerId"] = cfg["customer_id"]
    if extra:
        h.update(extra)
    return h


def api_url(path: str | None = None) -> str:
    """Build a full API URL, defaulting to the configured completions path."""
    cfg = get_config()
    base = cfg["base_url"].rstrip("/")
    return f"{base}{path if path is not None else cfg['api_path']}"


# ---------------------------------------------------------------------------
# Model catalog
# ---------------------------------------------------------------------------

MODELS = {
    "flux-pro": "replicate/black-forest-labs/flux-1.1-pro",
    "flux-schnell": "replicate/black-forest-labs/flux-schnell",
    "flux-dev": "replicate/black-forest-labs/flux-dev",
}


def resolve_model(name: str) -> str:
    """
    Resolve a short model alias to its full provider model ID.

    Examples:
        resolve_model("flux-pro")  -> "replicate/black-forest-labs/flux-1.1-pro"

    If the name is not a known alias, it is returned as-is (assumed to be
    a full model ID already).
    """
    return MODELS.get(name, name)


# ---------------------------------------------------------------------------
# Quick self-test
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    cfg = get_config()
    print(f"Source:   {cfg['source']}")
    print(f"Endpoint: {api_url()}")
    print(f"Key:      {cfg['api_key'][:6]}...")
    print(f"Model:    {resolve_model(cfg['model'])}")
    print(f"History:  {cfg['history_path']} (max {cfg['history_max_entries']})")
    print(f"\nModel aliases:")
    for alias, full in MODELS.items():
        print(f"  {alias:15s} -> {full}")
