"""Shared identifiers for log binding."""
from __future__ import annotations

SERVICE_NAME = "deki-client"
