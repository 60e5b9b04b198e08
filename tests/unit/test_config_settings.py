import pytest

from consent_app.config import settings


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    for name in (
        "DEMO_MODE",
        "FLASK_SECRET_KEY",
        "CONSENT_BACKEND_URL",
        "CONSENT_REQUEST_TIMEOUT",
        "CONSENT_DEFAULT_OWNER",
        "AUDIT_LOG_SIGNING_KEY",
    ):
        monkeypatch.delenv(name, raising=False)

    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_demo_mode_generates_secret_and_uses_local_backend(monkeypatch, clean_env):
    monkeypatch.setenv("DEMO_MODE", "true")
    cfg = settings.load_settings()
    assert cfg.demo_mode is True
    assert cfg.secret_key
    assert cfg.consent_backend_url == settings.DEMO_BACKEND_URL
    assert cfg.request_timeout == settings.DEFAULT_REQUEST_TIMEOUT
    assert cfg.default_owner == "admin"


def test_production_requires_secret_key(clean_env):
    with pytest.raises(RuntimeError, match="FLASK_SECRET_KEY"):
        settings.load_settings()


def test_production_requires_backend_url(monkeypatch, clean_env):
    monkeypatch.setenv("FLASK_SECRET_KEY", "secret")
    with pytest.raises(RuntimeError, match="CONSENT_BACKEND_URL"):
        settings.load_settings()


def test_secret_key_read_from_run_secrets(monkeypatch, clean_env):
    (clean_env / "flask_secret_key").write_text("file-secret\n")
    monkeypatch.setenv("CONSENT_BACKEND_URL", "https://consent.internal/")
    cfg = settings.load_settings()
    assert cfg.secret_key == "file-secret"
    assert cfg.consent_backend_url == "https://consent.internal"


@pytest.mark.parametrize(
    "raw, expected",
    [("2.5", 2.5), ("10", 10.0), ("abc", 5.0), ("-1", 5.0), ("", 5.0), (None, 5.0)],
)
def test_parse_timeout(raw, expected):
    assert settings._parse_timeout(raw) == expected


def test_get_or_generate_optional_returns_empty(clean_env):
    assert settings._get_or_generate("CONSENT_UNSET_VALUE", required=False) == ""
