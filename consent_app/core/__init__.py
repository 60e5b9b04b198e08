"""Core Consent Logic Module

This module provides the consent resolution and grant/revoke logic,
independent of the HTTP framework.

Architecture:
    - Pure Python (no Flask dependencies in core logic)
    - Testable with the consent service stubbed out
    - Reusable by the HTTP surface and by other front-ends

Module Structure:
    - backend/          : HTTP client for the consent service
    - models.py         : Consent data model (dataclasses)
    - oauth_params.py   : Authorization request parameter extraction
    - scope_resolver.py : Scope descriptions from the custom-scope catalog
    - consent_engine.py : Grant/deny state machine and redirects
    - consent_records.py: Revocation of granted consent
    - exceptions.py     : Consent interaction errors

Usage Pattern:
    Import explicitly when needed:
        from consent_app.core.oauth_params import extract_oauth_params
        from consent_app.core.scope_resolver import resolve_scopes
        from consent_app.core.consent_engine import ConsentDecisionEngine
        from consent_app.core.consent_records import ConsentRecordManager
"""
