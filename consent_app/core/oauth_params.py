"""Authorization request parameter extraction."""
from __future__ import annotations
from typing import Any, Mapping, Union
from urllib.parse import parse_qs

from .models import OAuthRequestParams

DEFAULT_RESPONSE_TYPE = "code"


def _query_to_mapping(query: str) -> dict[str, str]:
    parsed = parse_qs(query.lstrip("?"), keep_blank_values=True)
    return {key: values[0] for key, values in parsed.items() if values}


def extract_oauth_params(query: Union[str, Mapping[str, Any], None]) -> OAuthRequestParams:
    """Parse the authorization request query into OAuthRequestParams.

    Args:
        query: Raw query string or a mapping such as ``request.args``

    Returns:
        Extracted parameters; absent values are empty strings and
        ``response_type`` defaults to ``"code"``

    No validation is done here: client_id and redirect_uri are passed through
    as received.
    """
    if query is None:
        source: Mapping[str, Any] = {}
    elif isinstance(query, str):
        source = _query_to_mapping(query)
    else:
        source = query

    def _get(key: str) -> str:
        value = source.get(key)
        return value if isinstance(value, str) else ""

    return OAuthRequestParams(
        client_id=_get("client_id"),
        redirect_uri=_get("redirect_uri"),
        scope=_get("scope"),
        state=_get("state"),
        nonce=_get("nonce"),
        code_challenge=_get("code_challenge"),
        response_type=_get("response_type") or DEFAULT_RESPONSE_TYPE,
    )
