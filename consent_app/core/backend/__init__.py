"""Consent service client library.

Architecture:
- client.py: HTTP client for grant/revoke/application lookup
- exceptions.py: Typed exceptions for transport and service errors

Usage:
    from consent_app.core.backend import ConsentBackendClient

    client = ConsentBackendClient("http://consent:8000")
    code = client.grant_consent(decision, params)
"""
from .client import (
    ConsentBackendClient,
    REQUEST_TIMEOUT,
    GRANT_CONSENT_PATH,
    REVOKE_CONSENT_PATH,
    GET_APPLICATION_PATH,
)
from .exceptions import (
    ConsentBackendError,
    ConsentAPIError,
    ConsentConnectionError,
    ConsentServiceError,
)

__all__ = [
    # Client
    "ConsentBackendClient",
    "REQUEST_TIMEOUT",
    "GRANT_CONSENT_PATH",
    "REVOKE_CONSENT_PATH",
    "GET_APPLICATION_PATH",

    # Exceptions
    "ConsentBackendError",
    "ConsentAPIError",
    "ConsentConnectionError",
    "ConsentServiceError",
]
