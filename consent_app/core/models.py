"""Consent data model.

Plain dataclasses shared by the extractor, resolver, decision engine and
record manager. Wire (camelCase) conversion lives here so the rest of the
core only deals with Python names.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class OAuthRequestParams:
    """Parameters of one authorization attempt, as received from the client."""
    client_id: str = ""
    redirect_uri: str = ""
    scope: str = ""
    state: str = ""
    nonce: str = ""
    code_challenge: str = ""
    response_type: str = "code"


@dataclass(frozen=True)
class CustomScopeDefinition:
    scope: str
    display_name: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomScopeDefinition":
        return cls(
            scope=data.get("scope") or "",
            display_name=data.get("displayName") or "",
            description=data.get("description") or "",
        )


@dataclass(frozen=True)
class Application:
    """Application metadata as supplied by the application service."""
    owner: str
    name: str
    custom_scopes: tuple[CustomScopeDefinition, ...] = ()
    display_name: str = ""
    logo: str = ""
    homepage_url: str = ""

    @property
    def id(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Application":
        """Build an Application from the backend JSON representation.

        Null entries in ``customScopes`` are kept as empty definitions so
        catalog validation can still report them.
        """
        scopes = tuple(
            CustomScopeDefinition.from_dict(item or {})
            for item in (data.get("customScopes") or [])
        )
        return cls(
            owner=data.get("owner") or "",
            name=data.get("name") or "",
            custom_scopes=scopes,
            display_name=data.get("displayName") or "",
            logo=data.get("logo") or "",
            homepage_url=data.get("homepageUrl") or "",
        )

    def to_display_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "owner": self.owner,
            "name": self.name,
            "displayName": self.display_name or self.name,
            "logo": self.logo,
            "homepageUrl": self.homepage_url,
        }


@dataclass(frozen=True)
class ResolvedScopeEntry:
    scope: str
    display_name: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {
            "scope": self.scope,
            "displayName": self.display_name,
            "description": self.description,
        }


@dataclass(frozen=True)
class ConsentDecision:
    """The user's approval of a scope set, sent once to the grant service."""
    owner: str
    application: str
    granted_scopes: tuple[str, ...]

    def to_grant_payload(self, params: OAuthRequestParams) -> dict[str, Any]:
        """Merge the decision with the authorization parameters.

        ``provider``, ``signinMethod`` and ``resource`` are always sent empty.
        """
        return {
            "owner": self.owner,
            "application": self.application,
            "grantedScopes": list(self.granted_scopes),
            "clientId": params.client_id,
            "provider": "",
            "signinMethod": "",
            "responseType": params.response_type or "code",
            "redirectUri": params.redirect_uri,
            "scope": params.scope,
            "state": params.state,
            "nonce": params.nonce or "",
            "challenge": params.code_challenge or "",
            "resource": "",
        }


@dataclass
class ConsentRecord:
    """Persisted consent of one application (owned by the consent service)."""
    application: str
    granted_scopes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsentRecord":
        scopes = data.get("grantedScopes")
        return cls(
            application=data.get("application") or "",
            granted_scopes=list(scopes) if isinstance(scopes, list) else [],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "application": self.application,
            "grantedScopes": list(self.granted_scopes),
        }


@dataclass(frozen=True)
class RevokeOutcome:
    """Result of a revoke call; ``refresh`` tells the caller to reload the table."""
    success: bool
    message: str = ""
    refresh: bool = False
    revoked_scopes: tuple[str, ...] = ()
    application: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": "ok" if self.success else "error",
            "msg": self.message,
            "refresh": self.refresh,
        }
