"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
import secrets
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 5.0
DEMO_BACKEND_URL = "http://127.0.0.1:8000"


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.info(f"Loaded {secret_name} from /run/secrets")
                return secret_value
        except OSError as e:
            logger.warning(f"Failed to read /run/secrets/{secret_name}: {e}")

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            return secret_value

    return None


@dataclass
class ConsentConfig:
    """Application configuration container."""
    # Mode
    demo_mode: bool

    # Flask
    secret_key: str

    # Consent service
    consent_backend_url: str = DEMO_BACKEND_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    default_owner: str = "admin"

    # Audit
    audit_log_signing_key: str = ""


def _parse_timeout(raw: str | None) -> float:
    """Parse CONSENT_REQUEST_TIMEOUT, falling back to the default on bad input."""
    if raw is None or not raw.strip():
        return DEFAULT_REQUEST_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"Invalid CONSENT_REQUEST_TIMEOUT={raw!r}; using {DEFAULT_REQUEST_TIMEOUT}")
        return DEFAULT_REQUEST_TIMEOUT
    if value <= 0:
        return DEFAULT_REQUEST_TIMEOUT
    return value


def _get_or_generate(var_name: str, demo_default: str | None = None, required: bool = True, demo_mode: bool = False) -> str:
    """Get environment variable or use demo default."""
    value = os.environ.get(var_name)
    if value:
        return value

    if demo_mode and demo_default is not None:
        logger.info(f"[demo-mode] Using default for {var_name}")
        os.environ[var_name] = demo_default
        return demo_default

    if not required:
        return ""

    raise RuntimeError(f"Environment variable {var_name} is required in production mode.")


def load_settings() -> ConsentConfig:
    """Load application settings from environment and /run/secrets."""
    demo_mode = os.environ.get("DEMO_MODE", "false").lower() == "true"

    # Flask secret key
    secret_key = _load_secret_from_file("flask_secret_key", "FLASK_SECRET_KEY")
    if not secret_key:
        if not demo_mode:
            raise RuntimeError("FLASK_SECRET_KEY not found in /run/secrets or environment")
        secret_key = secrets.token_urlsafe(48)
        os.environ["FLASK_SECRET_KEY"] = secret_key
        logger.info("[demo-mode] Generated temporary FLASK_SECRET_KEY")

    consent_backend_url = _get_or_generate(
        "CONSENT_BACKEND_URL",
        demo_default=DEMO_BACKEND_URL,
        demo_mode=demo_mode,
    ).rstrip("/")

    request_timeout = _parse_timeout(os.environ.get("CONSENT_REQUEST_TIMEOUT"))
    default_owner = os.environ.get("CONSENT_DEFAULT_OWNER", "admin").strip() or "admin"

    audit_log_signing_key = _load_secret_from_file("audit_log_signing_key", "AUDIT_LOG_SIGNING_KEY") or ""
    if audit_log_signing_key:
        os.environ["AUDIT_LOG_SIGNING_KEY"] = audit_log_signing_key

    mode_label = "DEMO" if demo_mode else "PRODUCTION"
    logger.info(f"Mode={mode_label}; backend={consent_backend_url}; timeout={request_timeout}s")

    return ConsentConfig(
        demo_mode=demo_mode,
        secret_key=secret_key,
        consent_backend_url=consent_backend_url,
        request_timeout=request_timeout,
        default_owner=default_owner,
        audit_log_signing_key=audit_log_signing_key,
    )
