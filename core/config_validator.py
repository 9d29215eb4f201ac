# core/config_validator.py

from typing import List
from core.config import settings
from core.errors import ConfigurationError
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that the Supabase credentials are set.
    Returns list of missing required variables.
    """
    missing = []

    if not settings.SUPABASE_URL:
        missing.append("SUPABASE_URL")
    if not settings.SUPABASE_ANON_KEY:
        missing.append("SUPABASE_ANON_KEY")
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        missing.append("SUPABASE_SERVICE_ROLE_KEY")

    return missing


def validate_optional_config() -> List[str]:
    """
    Optional but recommended configuration (warnings only).
    """
    warnings = []

    if not all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASS]):
        warnings.append("SMTP_* (bug reports will not be emailed)")
    if not settings.CONTACT_WEBHOOK_URL:
        warnings.append("CONTACT_WEBHOOK_URL (no contact request notifications)")

    return warnings


def require_config():
    """
    FastAPI dependency for admin endpoints.
    Missing credentials fail the request instead of the process.
    """
    missing = validate_required_config()
    if missing:
        logger.error(f"Missing required environment variables: {', '.join(missing)}")
        raise ConfigurationError()


def validate_config_on_startup():
    """
    Log configuration status on startup.
    Never raises: endpoints report ConfigurationError per request.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        logger.error(
            f"Missing required environment variables: {', '.join(missing_required)} "
            "(admin endpoints will return configuration errors)"
        )

    for warning in missing_optional:
        logger.warning(f"Optional configuration missing: {warning}")

    if not missing_required:
        logger.info("Configuration validation passed")
