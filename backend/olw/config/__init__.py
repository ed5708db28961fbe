from typing import Any

from .settings import Settings, get_settings


def env(key: str, default: Any = None) -> Any:
    """Access any environment variable through settings.

    Declared settings fields are returned with their validated type; any
    other key falls back to the raw values captured by ``extra="allow"``.
    """
    settings = get_settings()

    value = getattr(settings, key.upper(), None)
    if value is not None:
        return value

    extra = settings.model_extra or {}
    value = extra.get(key.lower(), extra.get(key.upper()))
    return default if value is None else value


__all__ = ["Settings", "env", "get_settings"]
