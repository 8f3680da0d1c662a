"""Security helpers."""

from __future__ import annotations

from typing import Mapping


SENSITIVE_HEADERS = {"authorization"}


def sanitize_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Return headers with sensitive values redacted for logging."""
    redacted: dict[str, str] = {}
    for key, value in headers.items():
        if key.lower() in SENSITIVE_HEADERS:
            redacted[key] = "[REDACTED]"
        else:
            redacted[key] = value
    return redacted


def bearer_header(token: str) -> dict[str, str]:
    """Build the Authorization header for a static access token."""
    return {"Authorization": f"Bearer {token}"}
