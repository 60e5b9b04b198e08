from werkzeug.datastructures import MultiDict

from consent_app.core.models import OAuthRequestParams
from consent_app.core.oauth_params import extract_oauth_params


def test_extract_from_query_string():
    params = extract_oauth_params(
        "?client_id=abc&redirect_uri=https%3A%2F%2Fa.com%2Fcb&scope=profile+email"
        "&state=xyz&nonce=n-1&code_challenge=ch&response_type=id_token"
    )
    assert params == OAuthRequestParams(
        client_id="abc",
        redirect_uri="https://a.com/cb",
        scope="profile email",
        state="xyz",
        nonce="n-1",
        code_challenge="ch",
        response_type="id_token",
    )


def test_missing_optional_values_become_empty_strings():
    params = extract_oauth_params("client_id=abc&redirect_uri=https://a.com/cb&scope=profile&state=s")
    assert params.nonce == ""
    assert params.code_challenge == ""
    assert params.response_type == "code"


def test_empty_response_type_defaults_to_code():
    params = extract_oauth_params({"client_id": "abc", "response_type": ""})
    assert params.response_type == "code"


def test_missing_state_is_empty_not_dropped():
    params = extract_oauth_params("client_id=abc")
    assert params.state == ""
    assert params.redirect_uri == ""


def test_extract_from_multidict_takes_first_value():
    args = MultiDict([("client_id", "first"), ("client_id", "second"), ("scope", "openid")])
    params = extract_oauth_params(args)
    assert params.client_id == "first"
    assert params.scope == "openid"


def test_malformed_values_pass_through():
    params = extract_oauth_params({"client_id": "  not a client ", "redirect_uri": "javascript:alert(1)"})
    assert params.client_id == "  not a client "
    assert params.redirect_uri == "javascript:alert(1)"


def test_none_query_yields_defaults():
    assert extract_oauth_params(None) == OAuthRequestParams()
