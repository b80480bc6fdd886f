"""Process-wide default settings.

Prefer passing a ``Settings`` instance from the composition root. This module
exists for hosts that want one shared configuration without threading it
through every collaborator: values set here are used by ``create_settings()``
and therefore by collaborators built without explicit settings.

Precedence: keyword overrides > configured defaults > environment > field defaults.
"""
from __future__ import annotations

from typing import Any

from loguru import logger

from deki.app.config.settings import Settings
from deki.app.core import SERVICE_NAME

_overrides: dict[str, Any] = {}


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).debug("")


def _check_names(values: dict[str, Any]) -> None:
    unknown = sorted(set(values) - set(Settings.model_fields))
    if unknown:
        raise KeyError(f"unknown settings: {', '.join(unknown)}")


def configure_defaults(**values: Any) -> None:
    """Override default values (e.g. ``host``, ``token``, ``cookie_manager``)."""
    _check_names(values)
    _overrides.update(values)
    _log("defaults_configured", fields=sorted(values))


def reset_defaults() -> None:
    """Drop every configured override, restoring the built-in defaults."""
    _overrides.clear()
    _log("defaults_reset")


def current_defaults() -> Settings:
    return create_settings()


def create_settings(**overrides: Any) -> Settings:
    _check_names(overrides)
    return Settings(**{**_overrides, **overrides})
