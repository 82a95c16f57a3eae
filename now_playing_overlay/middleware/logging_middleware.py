"""Redaction of credentials from logged URLs."""

import re

# Query parameters whose values never reach the logs
SENSITIVE_PARAMS = [
    "code",
    "state",
    "token",
    "refresh_token",
    "access_token",
    "client_secret",
    "authorization",
]


def redact_sensitive_data(url: str) -> str:
    """Redact sensitive query parameter values from a URL."""
    redacted = url
    for param in SENSITIVE_PARAMS:
        pattern = rf"([?&]){param}=([^&\s\"]+)"
        redacted = re.sub(pattern, rf"\g<1>{param}=***REDACTED***", redacted)
    return redacted
