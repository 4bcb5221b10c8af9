import logging
import os

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from ..config import _env_number
from ..exceptions import DomainException

logger = logging.getLogger(__name__)


def _sample_rate(env_var: str) -> float:
    value = _env_number(env_var, 0.0)
    if value < 0:
        logger.warning("%s cannot be negative; defaulting to 0.00", env_var)
        return 0.0
    return min(value, 1.0)


def _drop_domain_errors(event, hint):
    # Rejected registrations and reverts are client errors, not incidents.
    exc_info = hint.get("exc_info") if hint else None
    if exc_info and isinstance(exc_info[1], DomainException):
        return None
    return event


def init_sentry() -> bool:
    """Initialise Sentry from the environment; return whether it is enabled."""
    dsn = os.getenv("SENTRY_DSN")
    if not dsn:
        logger.info("SENTRY_DSN not provided; skipping Sentry initialization.")
        return False

    environment = (os.getenv("SENTRY_ENVIRONMENT") or "").strip() or None
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FastApiIntegration()],
        environment=environment,
        traces_sample_rate=_sample_rate("SENTRY_TRACES_SAMPLE_RATE"),
        profiles_sample_rate=_sample_rate("SENTRY_PROFILES_SAMPLE_RATE"),
        before_send=_drop_domain_errors,
    )
    logger.info(
        "Initialized Sentry%s",
        f" (environment={environment})" if environment else "",
    )
    return True
