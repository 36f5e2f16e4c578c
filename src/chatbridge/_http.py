"""Small HTTP-related constants shared across chatbridge.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"
VERTEX_HOST_TEMPLATE = "https://{location}-aiplatform.googleapis.com"

JSON_HEADERS: dict[str, str] = {"Content-Type": "application/json"}

# Status codes with a dedicated error kind; 5xx is handled as a range.
BAD_REQUEST = 400
UNAUTHORIZED = 401
FORBIDDEN = 403
TOO_MANY_REQUESTS = 429
