"""Consent decision engine: grant/deny actions and redirect construction.

One engine instance drives one consent interaction:

    IDLE ──grant()──> GRANTING ──ok──> REDIRECTING
                         └──error──> IDLE

``deny()`` goes straight from IDLE to REDIRECTING without a network call.
REDIRECTING is terminal.
"""
from __future__ import annotations
import logging
import threading
from enum import Enum
from typing import Optional, Sequence

from .backend import ConsentBackendClient, ConsentBackendError, ConsentServiceError
from .exceptions import (
    ConsentGrantError,
    EmptyScopeError,
    GrantInProgressError,
    InvalidApplicationError,
)
from .models import Application, ConsentDecision, OAuthRequestParams, ResolvedScopeEntry

CONNECTION_FAILED_MESSAGE = "Failed to connect to server"

logger = logging.getLogger(__name__)


class ConsentState(str, Enum):
    IDLE = "idle"
    GRANTING = "granting"
    REDIRECTING = "redirecting"


# ─────────────────────────────────────────────────────────────────────────────
# Redirect construction
# ─────────────────────────────────────────────────────────────────────────────
def append_query(uri: str, query: str) -> str:
    """Append ``query`` to ``uri`` with ``&`` if it already has a ``?``, else ``?``."""
    separator = "&" if "?" in uri else "?"
    return f"{uri}{separator}{query}"


def build_grant_redirect(redirect_uri: str, code: str, state: str) -> str:
    """Success redirect. ``state`` is echoed verbatim, even when empty."""
    return append_query(redirect_uri, f"code={code}&state={state}")


def build_deny_redirect(redirect_uri: str, state: str) -> str:
    """Denial redirect carrying ``error=access_denied``. ``state`` is echoed verbatim."""
    return append_query(
        redirect_uri,
        f"error=access_denied&error_description=User denied consent&state={state}",
    )


def build_consent_decision(application: Application, resolved_scopes: Sequence[ResolvedScopeEntry]) -> ConsentDecision:
    """Approval covers exactly the resolved scope list."""
    return ConsentDecision(
        owner=application.owner,
        application=application.id,
        granted_scopes=tuple(entry.scope for entry in resolved_scopes),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────────────────────
class ConsentDecisionEngine:
    """State machine for a single consent interaction.

    Usage:
        engine = ConsentDecisionEngine(ConsentBackendClient(url))
        scopes = resolve_scopes(params.scope, application)
        redirect_url = engine.grant(application, params, scopes)
    """

    def __init__(self, backend: ConsentBackendClient):
        self.backend = backend
        self._state = ConsentState.IDLE
        self._lock = threading.Lock()
        self.last_error: Optional[str] = None
        self.redirect_url: Optional[str] = None

    @property
    def state(self) -> ConsentState:
        return self._state

    def can_submit(self, resolved_scopes: Sequence[ResolvedScopeEntry]) -> bool:
        """Whether grant/deny may be invoked right now."""
        return self._state == ConsentState.IDLE and bool(resolved_scopes)

    def grant(
        self,
        application: Optional[Application],
        oauth_params: OAuthRequestParams,
        resolved_scopes: Sequence[ResolvedScopeEntry],
    ) -> str:
        """Send the user's approval and return the redirect carrying the code.

        Raises:
            InvalidApplicationError: No application
            EmptyScopeError: Nothing to consent to
            GrantInProgressError: A grant is outstanding or the interaction ended
            ConsentGrantError: The grant failed; the engine is IDLE again
        """
        if application is None:
            raise InvalidApplicationError()
        if not resolved_scopes:
            raise EmptyScopeError()

        with self._lock:
            if self._state != ConsentState.IDLE:
                logger.warning(
                    f"Grant rejected | application={application.id} | "
                    f"client_id={oauth_params.client_id} | state={self._state.value}"
                )
                raise GrantInProgressError(f"Consent interaction is {self._state.value}")
            self._state = ConsentState.GRANTING
            self.last_error = None

        decision = build_consent_decision(application, resolved_scopes)
        try:
            code = self.backend.grant_consent(decision, oauth_params)
        except ConsentServiceError as exc:
            self._fail(exc.message, application)
            raise ConsentGrantError(exc.message) from exc
        except ConsentBackendError as exc:
            message = f"{CONNECTION_FAILED_MESSAGE}: {exc}"
            self._fail(message, application)
            raise ConsentGrantError(message) from exc
        except BaseException as exc:
            self._fail(f"Unexpected error: {exc!r}", application)
            raise

        redirect_url = build_grant_redirect(oauth_params.redirect_uri, code, oauth_params.state)
        with self._lock:
            self._state = ConsentState.REDIRECTING
            self.redirect_url = redirect_url
        logger.info(
            f"Consent granted | application={decision.application} | "
            f"client_id={oauth_params.client_id} | scopes={' '.join(decision.granted_scopes)}"
        )
        return redirect_url

    def deny(self, oauth_params: OAuthRequestParams, resolved_scopes: Sequence[ResolvedScopeEntry]) -> str:
        """Return the denial redirect. Local only, never fails once allowed.

        Raises:
            EmptyScopeError: Nothing to consent to
            GrantInProgressError: A grant is outstanding or the interaction ended
        """
        if not resolved_scopes:
            raise EmptyScopeError()

        with self._lock:
            if self._state != ConsentState.IDLE:
                raise GrantInProgressError(f"Consent interaction is {self._state.value}")
            redirect_url = build_deny_redirect(oauth_params.redirect_uri, oauth_params.state)
            self._state = ConsentState.REDIRECTING
            self.redirect_url = redirect_url

        logger.info(f"Consent denied | client_id={oauth_params.client_id}")
        return redirect_url

    def _fail(self, message: str, application: Application) -> None:
        with self._lock:
            self._state = ConsentState.IDLE
            self.last_error = message
        logger.error(f"Consent grant failed | application={application.id} | error={message}")
