from consent_app.api.consent import InteractionRegistry
from consent_app.config import ConsentConfig


def test_create_app_registers_config_and_registry(flask_app):
    assert isinstance(flask_app.config["APP_CONFIG"], ConsentConfig)
    assert flask_app.config["SECRET_KEY"]
    assert isinstance(flask_app.extensions["consent_interactions"], InteractionRegistry)


def test_consent_routes_registered(flask_app):
    rules = {rule.rule for rule in flask_app.url_map.iter_rules()}
    assert "/consent/<application_name>" in rules
    assert "/consent/<application_name>/grant" in rules
    assert "/consent/<application_name>/deny" in rules
    assert "/consent/revoke" in rules
    assert "/health" in rules


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"ok"

