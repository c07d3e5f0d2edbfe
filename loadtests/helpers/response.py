"""Response error extraction for load test observability.

Parses storefront API error envelopes into human-readable messages:
``{"success": false, "message": "...", "errors": [{"field": ..., "message": ...}], "requestId": ...}``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except Exception:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict) or "message" not in body:
        return str(body)[:300]

    parts = [str(body["message"])]
    for error in body.get("errors") or []:
        field = error.get("field")
        parts.append(f"{field}: {error.get('message')}" if field else str(error.get("message")))
    if body.get("requestId"):
        parts.append(f"requestId={body['requestId']}")
    return " | ".join(parts)
