"""Shared plumbing for collaborators: the API root Plug and response parsing."""
from __future__ import annotations

from typing import Any

from deki.app.config.defaults import create_settings
from deki.app.config.settings import Settings
from deki.app.domain.model_parser import ModelParser, SchemaLike
from deki.app.domain.plug import Plug
from deki.app.ports.http_client import AbstractHttpClient, HttpResponse

API_ROOT = ("@api", "deki")


def api_plug(
    settings: Settings | None,
    http_client: AbstractHttpClient | None,
    *segments: Any,
) -> Plug:
    """Plug at ``{host}/@api/deki/{segments}``. Raises ConstructionError for a bad host."""
    settings = settings or create_settings()
    return Plug(settings.host, settings.plug_config(http_client)).at(*API_ROOT, *segments)


def parse_json(response: HttpResponse, schema: SchemaLike) -> dict[str, Any]:
    return ModelParser(schema)(response.json())
