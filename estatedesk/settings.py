"""Load console settings from config/settings.yaml."""

from pathlib import Path
from typing import Any

import yaml

_DEFAULTS: dict[str, Any] = {
    "search": {
        "app_id": "",
        "api_key_secret": "ALGOLIA_API_KEY",
        "timeout_sec": 10.0,
        "debounce_sec": 0.3,
        # Index names the sort tables are validated against at startup.
        # Empty list disables validation.
        "known_indices": [],
    },
    "domains": {
        "agents": {"index": "agents", "hits_per_page": 50, "max_values_per_facet": 1000},
        "campaigns": {
            "index": "canvashomescampaigns",
            "hits_per_page": 20,
            "max_values_per_facet": 100,
        },
        "tasks": {"index": "canvashomestasks", "hits_per_page": 20, "max_values_per_facet": 100},
        "leads": {"index": "canvashomeleads", "hits_per_page": 20, "max_values_per_facet": 100},
    },
    "firestore": {
        "project_id": "",
        "database": "(default)",
    },
    "logging": {
        "file": "data/logs/estatedesk.log",
        "level": "INFO",
        "log_to_console": False,
        "max_bytes": 10485760,  # 10 MB
        "backup_count": 3,
        # Per-logger overrides, e.g. {"estatedesk.search": "DEBUG"}.
        "levels": {"httpx": "WARNING", "httpcore": "WARNING"},
    },
}

_cached: dict[str, Any] | None = None


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base recursively. Mutates base."""
    for key, value in overlay.items():
        if value is None:
            continue
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def get_default_settings() -> dict[str, Any]:
    """Return a deep copy of default settings."""
    return _deep_copy_nested(_DEFAULTS)


def get_setting(settings: dict[str, Any], path: str, default: Any = None) -> Any:
    """Get a nested value by dot path (e.g. 'search.timeout_sec')."""
    current: Any = settings
    for part in path.split("."):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def reload_settings() -> None:
    """Clear the settings cache. Call after config files change."""
    global _cached
    _cached = None


def load_settings(config_dir: Path | None = None) -> dict[str, Any]:
    """Load settings from config/settings.yaml. Returns merged defaults + file values."""
    global _cached
    if _cached is not None:
        return _cached

    if config_dir is None:
        config_dir = Path(__file__).resolve().parent.parent / "config"
    path = config_dir / "settings.yaml"

    result = get_default_settings()

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
            if isinstance(data, dict):
                _deep_merge(result, data)
        except (yaml.YAMLError, OSError):
            pass

    _cached = result
    return result


def _deep_copy_nested(obj: Any) -> Any:
    """Return a deep copy of nested dicts/lists for defaults."""
    if isinstance(obj, dict):
        return {k: _deep_copy_nested(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_deep_copy_nested(x) for x in obj]
    return obj
