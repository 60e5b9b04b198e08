"""HTTP client for the consent persistence service.

Builds grant/revoke requests and interprets the service envelope
``{"status": "ok"|"error", "data": ..., "msg": ...}``.
"""
from __future__ import annotations
import logging
import os
from typing import Any, Dict, Optional

import requests

from ..models import Application, ConsentDecision, ConsentRecord, OAuthRequestParams
from .exceptions import (
    ConsentAPIError,
    ConsentConnectionError,
    ConsentServiceError,
)

REQUEST_TIMEOUT = 5

GRANT_CONSENT_PATH = "/api/grant-consent"
REVOKE_CONSENT_PATH = "/api/revoke-consent"
GET_APPLICATION_PATH = "/api/get-application"

logger = logging.getLogger(__name__)


class ConsentBackendClient:
    """HTTP client for the grant/revoke endpoints of the consent service.

    Features:
    - One outbound call per operation, no retries
    - Caller headers (cookie, bearer token, language) forwarded as-is
    - Centralized envelope and HTTP error handling

    Usage:
        client = ConsentBackendClient("http://consent:8000")
        code = client.grant_consent(decision, params)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: float = REQUEST_TIMEOUT,
        headers: Optional[Dict[str, str]] = None,
    ):
        """Initialize consent service client.

        Args:
            base_url: Service base URL (defaults to CONSENT_BACKEND_URL env var)
            timeout: Per-request timeout in seconds
            headers: Headers sent with every request (e.g. forwarded Cookie)
        """
        self.base_url = (base_url or os.environ.get("CONSENT_BACKEND_URL", "http://127.0.0.1:8000")).rstrip("/")
        self.timeout = timeout
        self.headers: Dict[str, str] = dict(headers or {})

    def get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Execute GET request and return the decoded envelope.

        Raises:
            ConsentConnectionError: Call could not complete
            ConsentAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        try:
            resp = requests.get(url, params=params, headers=dict(self.headers), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"Consent service unreachable | method=GET | url={url} | error={exc}")
            raise ConsentConnectionError(str(exc), url) from exc
        return self._decode(resp, url)

    def post(self, path: str, json: Optional[Dict] = None) -> Dict[str, Any]:
        """Execute POST request and return the decoded envelope.

        Raises:
            ConsentConnectionError: Call could not complete
            ConsentAPIError: On HTTP error
        """
        url = f"{self.base_url}{path}"
        try:
            resp = requests.post(url, json=json, headers=dict(self.headers), timeout=self.timeout)
        except requests.RequestException as exc:
            logger.error(f"Consent service unreachable | method=POST | url={url} | error={exc}")
            raise ConsentConnectionError(str(exc), url) from exc
        return self._decode(resp, url)

    def grant_consent(self, decision: ConsentDecision, params: OAuthRequestParams) -> str:
        """Record the decision and obtain an authorization code.

        Args:
            decision: Scopes the user approved
            params: Authorization parameters of the current attempt

        Returns:
            Authorization code

        Raises:
            ConsentServiceError: Service answered ``status: "error"``
            ConsentBackendError: Transport failure
        """
        body = self.post(GRANT_CONSENT_PATH, json=decision.to_grant_payload(params))
        self._raise_for_status(body)
        code = body.get("data")
        if not isinstance(code, str) or not code:
            raise ConsentServiceError("Consent service returned no authorization code")
        return code

    def revoke_consent(self, record: ConsentRecord) -> None:
        """Ask the service to remove ``record.granted_scopes`` from the stored consent.

        Raises:
            ConsentServiceError: Service answered ``status: "error"``
            ConsentBackendError: Transport failure
        """
        body = self.post(REVOKE_CONSENT_PATH, json=record.to_dict())
        self._raise_for_status(body)

    def get_application(self, owner: str, name: str) -> Optional[Application]:
        """Return the application ``owner/name`` or None if it does not exist."""
        body = self.get(GET_APPLICATION_PATH, params={"id": f"{owner}/{name}"})
        self._raise_for_status(body)
        data = body.get("data")
        if not data:
            return None
        return Application.from_dict(data)

    def _decode(self, resp: requests.Response, url: str) -> Dict[str, Any]:
        """Centralized error handling for HTTP responses.

        Raises:
            ConsentAPIError: If response status indicates error
            ConsentConnectionError: If the body is not a JSON object
        """
        if resp.status_code >= 400:
            raise ConsentAPIError(resp.status_code, resp.text, url)
        try:
            body = resp.json()
        except ValueError as exc:
            raise ConsentConnectionError("Invalid JSON response", url) from exc
        if not isinstance(body, dict):
            raise ConsentConnectionError("Unexpected response format", url)
        return body

    @staticmethod
    def _raise_for_status(body: Dict[str, Any]) -> None:
        if body.get("status") != "ok":
            raise ConsentServiceError(body.get("msg") or "Unknown error")
