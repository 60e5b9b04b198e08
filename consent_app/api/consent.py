"""Consent endpoints.

The consent page itself is rendered elsewhere; these routes expose what it
needs (resolved scopes) and the actions behind its buttons.

Architecture:
    Consent page ──> /consent/* ──> consent_app.core ──> consent service (HTTP)

Endpoints:
    GET  /consent/<application>          resolved scopes for the OAuth query
    POST /consent/<application>/grant    grant, then redirect with ?code=
    POST /consent/<application>/deny     redirect with error=access_denied
    POST /consent/revoke                 revoke one scope or a whole record
"""
from __future__ import annotations
import logging
import threading
from typing import Callable, Optional

from flask import Blueprint, abort, current_app, jsonify, redirect, request

from consent_app.api.errors import wants_json
from consent_app.core.backend import ConsentBackendClient, ConsentBackendError
from consent_app.core.consent_engine import ConsentDecisionEngine, ConsentState
from consent_app.core.consent_records import ConsentRecordManager
from consent_app.core.exceptions import (
    ConsentGrantError,
    EmptyScopeError,
    GrantInProgressError,
)
from consent_app.core.models import Application, ConsentRecord, OAuthRequestParams
from consent_app.core.oauth_params import extract_oauth_params
from consent_app.core.scope_resolver import (
    check_consent_required,
    resolve_scopes,
    validate_custom_scopes,
)
from scripts import audit

bp = Blueprint("consent", __name__, url_prefix="/consent")

FORWARDED_HEADERS = ("Cookie", "Authorization", "Accept-Language")

logger = logging.getLogger(__name__)


# ─────────────────────────────────────────────────────────────────────────────
# Interaction registry
# ─────────────────────────────────────────────────────────────────────────────
InteractionKey = tuple[str, str, str]


class InteractionRegistry:
    """In-flight consent interactions, keyed by (application, client_id, state).

    Holding the engine of an outstanding grant lets a duplicate submission
    hit the GRANTING guard instead of requesting a second authorization code.
    """

    def __init__(self):
        self._engines: dict[InteractionKey, ConsentDecisionEngine] = {}
        self._lock = threading.Lock()

    def acquire(self, key: InteractionKey, factory: Callable[[], ConsentDecisionEngine]) -> ConsentDecisionEngine:
        with self._lock:
            engine = self._engines.get(key)
            if engine is None:
                engine = factory()
                self._engines[key] = engine
            return engine

    def peek(self, key: InteractionKey) -> Optional[ConsentDecisionEngine]:
        with self._lock:
            return self._engines.get(key)

    def release(self, key: InteractionKey, engine: ConsentDecisionEngine) -> None:
        with self._lock:
            if self._engines.get(key) is engine and engine.state != ConsentState.GRANTING:
                del self._engines[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._engines)


def _registry() -> InteractionRegistry:
    return current_app.extensions.setdefault("consent_interactions", InteractionRegistry())


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────
def _backend() -> ConsentBackendClient:
    """Consent service client carrying the caller's identity headers."""
    cfg = current_app.config["APP_CONFIG"]
    headers = {name: request.headers[name] for name in FORWARDED_HEADERS if request.headers.get(name)}
    return ConsentBackendClient(cfg.consent_backend_url, timeout=cfg.request_timeout, headers=headers)


def _load_application(backend: ConsentBackendClient, name: str) -> Application:
    """Fetch the application or abort with 404 (invalid application is terminal)."""
    cfg = current_app.config["APP_CONFIG"]
    owner = request.args.get("owner") or cfg.default_owner
    try:
        application = backend.get_application(owner, name)
    except ConsentBackendError as exc:
        logger.error(f"Application lookup failed | application={owner}/{name} | error={exc}")
        abort(502, description=str(exc))
    if application is None:
        abort(404, description="Invalid application")

    try:
        validate_custom_scopes(application.custom_scopes)
    except ValueError as exc:
        logger.warning(f"Custom scope catalog invalid | application={application.id} | error={exc}")
    return application


def _interaction_key(application: Application, params: OAuthRequestParams) -> InteractionKey:
    return (application.id, params.client_id, params.state)


def _redirect_response(url: str):
    if wants_json():
        return jsonify({"status": "ok", "redirect": url})
    return redirect(url, code=302)


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────
@bp.route("/<application_name>", methods=["GET"])
def consent_scopes(application_name: str):
    """Resolved scope list for the consent page."""
    params = extract_oauth_params(request.args)
    application = _load_application(_backend(), application_name)
    scopes = resolve_scopes(params.scope, application)

    engine = _registry().peek(_interaction_key(application, params))
    can_submit = engine.can_submit(scopes) if engine is not None else bool(scopes)

    return jsonify({
        "application": application.to_display_dict(),
        "scopes": [entry.to_dict() for entry in scopes],
        "canSubmit": can_submit,
        "consentRequired": check_consent_required(application, params.scope),
    })


@bp.route("/<application_name>/grant", methods=["POST"])
def grant_consent(application_name: str):
    """Grant every resolved scope and redirect back to the client with a code."""
    params = extract_oauth_params(request.args)
    backend = _backend()
    application = _load_application(backend, application_name)
    scopes = resolve_scopes(params.scope, application)
    if not scopes:
        abort(400, description="No scopes to consent to")

    registry = _registry()
    key = _interaction_key(application, params)
    engine = registry.acquire(key, lambda: ConsentDecisionEngine(backend))
    granted = [entry.scope for entry in scopes]
    try:
        redirect_url = engine.grant(application, params, scopes)
    except GrantInProgressError as exc:
        abort(409, description=str(exc))
    except ConsentGrantError as exc:
        audit.safe_log_consent_event(
            "consent_grant",
            application.id,
            client_id=params.client_id,
            scopes=granted,
            details={"error": exc.message},
            success=False,
        )
        return jsonify({"status": "error", "msg": exc.message}), 502
    finally:
        registry.release(key, engine)

    audit.safe_log_consent_event(
        "consent_grant",
        application.id,
        client_id=params.client_id,
        scopes=granted,
    )
    return _redirect_response(redirect_url)


@bp.route("/<application_name>/deny", methods=["POST"])
def deny_consent(application_name: str):
    """Redirect back to the client with error=access_denied."""
    params = extract_oauth_params(request.args)
    backend = _backend()
    application = _load_application(backend, application_name)
    scopes = resolve_scopes(params.scope, application)

    engine = _registry().peek(_interaction_key(application, params)) or ConsentDecisionEngine(backend)
    try:
        redirect_url = engine.deny(params, scopes)
    except EmptyScopeError as exc:
        abort(400, description=str(exc))
    except GrantInProgressError as exc:
        abort(409, description=str(exc))

    audit.safe_log_consent_event(
        "consent_deny",
        application.id,
        client_id=params.client_id,
        scopes=[entry.scope for entry in scopes],
    )
    return _redirect_response(redirect_url)


@bp.route("/revoke", methods=["POST"])
def revoke_consent():
    """Revoke a single scope (``scope``) or a whole consent record."""
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}
    record = ConsentRecord.from_dict(payload)
    if not record.application:
        abort(400, description="Application cannot be empty")

    scope = payload.get("scope") or None
    if scope is not None and not isinstance(scope, str):
        abort(400, description="Scope must be a string")
    if scope is None and not record.granted_scopes:
        abort(400, description="Granted scopes cannot be empty")

    manager = ConsentRecordManager(_backend(), [record])
    outcome = manager.revoke(record, scope)

    audit.safe_log_consent_event(
        "consent_revoke",
        record.application,
        scopes=list(outcome.revoked_scopes) or ([scope] if scope else list(record.granted_scopes)),
        details={} if outcome.success else {"error": outcome.message},
        success=outcome.success,
    )
    return jsonify(outcome.to_dict()), (200 if outcome.success else 502)
