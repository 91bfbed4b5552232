"""Optional Sentry error reporting, enabled by SENTRY_DSN."""

import logging

from aeo_grader import __version__
from aeo_grader.core.config import settings

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """Initialize Sentry for the FastAPI app. Returns True when enabled."""
    if not settings.sentry_dsn:
        logger.debug("SENTRY_DSN not set, error reporting disabled")
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        release=f"aeo-grader@{__version__}",
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        integrations=[FastApiIntegration(transaction_style="endpoint")],
    )
    sentry_sdk.set_tag("answer_engine_model", settings.perplexity_model)
    logger.info("Sentry enabled (env=%s, model=%s)", settings.app_env, settings.perplexity_model)
    return True
