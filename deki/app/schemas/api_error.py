"""API error payload schema and the HttpError -> ApiRequestError translation."""
from __future__ import annotations

import json
from typing import Any

from deki.app.domain.model_parser import ModelParser, PropertyRule, Schema
from deki.app.errors import ApiRequestError, HttpError


def _decode_response_text(data: Any) -> Any:
    if not isinstance(data, dict) or "responseText" not in data:
        return data
    decoded = dict(data)
    text = decoded.pop("responseText")
    try:
        info = json.loads(text)
    except (TypeError, ValueError):
        info = None
    if isinstance(info, dict):
        decoded["errorInfo"] = info
    else:
        decoded["errorText"] = text
    return decoded


API_ERROR_SCHEMA = Schema(
    pre_processor=_decode_response_text,
    rules=(
        PropertyRule("status"),
        PropertyRule("message"),
        PropertyRule(
            "errorInfo",
            name="info",
            transform=[
                PropertyRule(["arguments", "argument"], name="arguments", is_array=True),
                PropertyRule("exception"),
                PropertyRule("message"),
                PropertyRule("resource"),
                PropertyRule("data"),
            ],
        ),
        PropertyRule("errorText"),
    ),
)

_parse_api_error = ModelParser(API_ERROR_SCHEMA)


def parse_http_error(error: HttpError) -> dict[str, Any]:
    return _parse_api_error(error.to_dict())


def to_api_request_error(error: HttpError) -> ApiRequestError:
    return ApiRequestError(error, parse_http_error(error))
