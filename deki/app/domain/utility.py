"""Helpers collaborators use to build resource ids, bodies and query params."""
from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Mapping
from urllib.parse import quote

from deki.app.errors import ConstructionError

# Characters a URI component may carry unencoded.
_COMPONENT_SAFE = "!*'()"

_HTML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "&": "&amp;",
    "'": "&#39;",
}
_HTML_ESCAPE_RE = re.compile("[" + re.escape("".join(_HTML_ESCAPES)) + "]")
_SEARCH_SPECIAL = '\\+-&|!(){}[]^"~*?:'


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


def double_encode(value: str) -> str:
    return encode_component(encode_component(value))


def get_resource_id(resource_id: Any, default_id: Any = None) -> Any:
    """Map a numeric id or a name to its API resource id.

    Names become ``=`` followed by the double-encoded name; the default id and
    numbers pass through unchanged.
    """
    if not resource_id and not default_id:
        raise ConstructionError("Unable to resolve the input ID to an API resource ID")
    if isinstance(resource_id, str) and resource_id != default_id:
        return f"={double_encode(resource_id)}"
    if resource_id:
        return resource_id
    return default_id


def get_filename_id(filename: str) -> str:
    if not isinstance(filename, str):
        raise ConstructionError("The filename must be a string")
    encoded = double_encode(filename)
    if "." not in filename:
        # No extension: the API expects the name-only form.
        encoded = f"={encoded}"
    return encoded


def escape_html(text: Any = "") -> str:
    return _HTML_ESCAPE_RE.sub(lambda match: _HTML_ESCAPES[match.group(0)], str(text))


def search_escape(query: Any) -> str:
    return "".join(f"\\{char}" if char in _SEARCH_SPECIAL else char for char in str(query))


def get_api_date_string(value: datetime) -> str:
    return value.strftime("%Y%m%d%H%M%S")


def clean_params(params: Mapping[str, Any] | None = None) -> dict[str, Any]:
    return {key: value for key, value in (params or {}).items() if value is not None and value != ""}
