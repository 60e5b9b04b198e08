"""Scope description resolution against an application's custom-scope catalog."""
from __future__ import annotations
from typing import Iterable, Optional, Sequence

from .models import Application, ConsentRecord, CustomScopeDefinition, ResolvedScopeEntry

UNDEFINED_SCOPE_DESCRIPTION = "This scope is not defined in the application"


def parse_scopes(requested_scope: Optional[str]) -> list[str]:
    """Split a scope string on whitespace, dropping empty tokens.

    Order and duplicates are preserved.
    """
    if not requested_scope:
        return []
    return [token.strip() for token in requested_scope.split() if token.strip()]


def _catalog_index(custom_scopes: Iterable[CustomScopeDefinition]) -> dict[str, CustomScopeDefinition]:
    # Catalog keys are matched exactly: no trimming, case-sensitive.
    index: dict[str, CustomScopeDefinition] = {}
    for definition in custom_scopes:
        if definition is not None and definition.scope:
            index[definition.scope] = definition
    return index


def resolve_scopes(requested_scope: Optional[str], application: Optional[Application]) -> list[ResolvedScopeEntry]:
    """Resolve requested scope tokens into the entries the user is asked to approve.

    Args:
        requested_scope: Raw space-delimited scope string from the request
        application: Application whose catalog describes the scopes

    Returns:
        One entry per non-empty token, in request order. Empty when there are
        no tokens or no application.
    """
    tokens = parse_scopes(requested_scope)
    if not tokens or application is None:
        return []

    catalog = _catalog_index(application.custom_scopes)
    resolved: list[ResolvedScopeEntry] = []
    for token in tokens:
        definition = catalog.get(token)
        if definition is not None:
            resolved.append(ResolvedScopeEntry(
                scope=definition.scope,
                display_name=definition.display_name or definition.scope,
                description=definition.description,
            ))
        else:
            resolved.append(ResolvedScopeEntry(
                scope=token,
                display_name=token,
                description=UNDEFINED_SCOPE_DESCRIPTION,
            ))
    return resolved


def check_consent_required(
    application: Application,
    requested_scope: Optional[str],
    records: Sequence[ConsentRecord] = (),
) -> bool:
    """Return True when the user still has to be asked for consent.

    Consent is skipped when the application declares no custom scopes, when
    none of the requested scopes are in the catalog, or when an existing
    record for the application already covers every requested catalog scope.
    """
    if not application.custom_scopes:
        return False

    catalog = _catalog_index(application.custom_scopes)
    catalog_requested = [scope for scope in parse_scopes(requested_scope) if scope in catalog]
    if not catalog_requested:
        return False

    for record in records:
        if record.application != application.id:
            continue
        granted = set(record.granted_scopes)
        if all(scope in granted for scope in catalog_requested):
            return False

    return True


def validate_custom_scopes(custom_scopes: Iterable[Optional[CustomScopeDefinition]]) -> None:
    """Validate an application's custom-scope catalog.

    Raises:
        ValueError: If an entry is missing or has a blank scope name
    """
    for definition in custom_scopes:
        if definition is None or not definition.scope.strip():
            raise ValueError("Missing parameter: custom scope name")
