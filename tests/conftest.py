"""Pytest shared fixtures for consent tests."""
import json
import os
import pathlib
import sys

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Configure test environment BEFORE any app imports
os.environ.setdefault("DEMO_MODE", "true")
os.environ.setdefault("CONSENT_BACKEND_URL", "http://consent.test")

import pytest
import requests

from consent_app.core.models import Application, CustomScopeDefinition
from scripts import audit


BACKEND_URL = "http://consent.test"


class StubResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload, status_code: int = 200, url: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.url = url
        self.text = payload if isinstance(payload, str) else json.dumps(payload)

    def json(self):
        if isinstance(self._payload, str):
            raise ValueError("not json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(response=self)


class ConsentServiceStub:
    """Records calls and answers like the consent service.

    ``routes`` maps a path suffix to a payload, a StubResponse, an exception
    instance to raise, or a callable ``(url, kwargs) -> response``.
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.routes: dict[str, object] = {}

    def _dispatch(self, method: str, url: str, kwargs: dict):
        self.calls.append({"method": method, "url": url, **kwargs})
        for suffix, answer in self.routes.items():
            if url.endswith(suffix):
                if isinstance(answer, Exception):
                    raise answer
                if callable(answer):
                    return answer(url, kwargs)
                if isinstance(answer, StubResponse):
                    return answer
                return StubResponse(answer, url=url)
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    def get(self, url, *args, **kwargs):
        return self._dispatch("GET", url, kwargs)

    def post(self, url, *args, **kwargs):
        return self._dispatch("POST", url, kwargs)

    def calls_to(self, suffix: str) -> list[dict]:
        return [call for call in self.calls if call["url"].endswith(suffix)]


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def consent_service(monkeypatch):
    """Replace requests.get/post so no test reaches a real consent service."""
    stub = ConsentServiceStub()
    monkeypatch.setattr(requests, "get", stub.get)
    monkeypatch.setattr(requests, "post", stub.post)
    return stub


@pytest.fixture(autouse=True)
def temp_audit_dir(monkeypatch, tmp_path):
    """Provide isolated audit directory for each test."""
    audit_dir = tmp_path / "audit"
    audit_file = audit_dir / "consent-events.jsonl"
    monkeypatch.setattr(audit, "AUDIT_LOG_DIR", audit_dir)
    monkeypatch.setattr(audit, "AUDIT_LOG_FILE", audit_file)
    monkeypatch.setenv("AUDIT_LOG_SIGNING_KEY", "test-signing-key-for-audit-trail")
    return audit_dir, audit_file


# ─────────────────────────────────────────────────────────────────────────────
# Domain Fixtures
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def application():
    return Application(
        owner="admin",
        name="app-demo",
        display_name="Demo App",
        custom_scopes=(
            CustomScopeDefinition("profile", "Profile", "Read all user profile data"),
            CustomScopeDefinition("email", "", "Access user email addresses (read-only)"),
        ),
    )


@pytest.fixture()
def application_payload():
    """Backend JSON for the same application."""
    return {
        "owner": "admin",
        "name": "app-demo",
        "displayName": "Demo App",
        "logo": "https://cdn.example.com/logo.png",
        "homepageUrl": "https://app.example.com",
        "customScopes": [
            {"scope": "profile", "displayName": "Profile", "description": "Read all user profile data"},
            {"scope": "email", "displayName": "", "description": "Access user email addresses (read-only)"},
        ],
    }


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def flask_app(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("CONSENT_BACKEND_URL", BACKEND_URL)
    from consent_app.flask_app import create_app

    app = create_app()
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(flask_app):
    with flask_app.test_client() as client:
        with flask_app.app_context():
            yield client


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires running stack)"
    )
