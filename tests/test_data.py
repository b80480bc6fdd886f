"""
Shared endpoints for integration tests that exercise the request pipeline over the network.

httpbin.org echoes requests, issues redirects and sets cookies, which covers
Plug, Transport and UploadTransport without a live Deki site.
"""

HTTPBIN = "https://httpbin.org"

# ---- Expected to return 2xx after redirects are followed ----
TEST_PATHS_SUCCESS = [
    ("get",),
    ("redirect", 2),
    ("relative-redirect", 3),
    ("xml",),
]

# ---- Expected to return non-2xx (for HttpError assertions) ----
TEST_PATHS_ERROR_STATUS = [
    (("status", 404), 404),
    (("status", 500), 500),
]

# ---- Cookie-set endpoints: 302 to /cookies with Set-Cookie ----
TEST_COOKIES = [
    ("testcookie", "1"),
    ("session", "abc123"),
]
