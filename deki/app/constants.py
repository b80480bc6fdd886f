"""Client-level constants shared across modules."""
from __future__ import annotations

DEFAULT_QUERY_PARAMS = {"dream.out.format": "json"}
DEFAULT_HEADERS = {"X-Deki-Client": "deki-client"}
DEFAULT_MAX_REDIRECTS = 20
DEFAULT_UPLOAD_CHUNK_SIZE = 64 * 1024

TOKEN_HEADER = "X-Deki-Token"
REQUESTED_WITH_HEADER = "X-Deki-Requested-With"
SESSION_HEADER = "X-Deki-Session"


class HTTP_METHOD:
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    DELETE = "DELETE"


class CONTENT_TYPE:
    XML = "application/xml; charset=utf-8"
    TEXT = "text/plain; charset=utf-8"
    JSON = "application/json; charset=utf-8"


REDIRECT_STATUS_CODES = frozenset({301, 302, 303, 307, 308})
METHOD_PRESERVING_REDIRECTS = frozenset({307, 308})
NOT_MODIFIED = 304
