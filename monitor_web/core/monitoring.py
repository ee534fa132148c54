"""Optional Sentry error reporting.

Disabled unless ``MONITOR_WEB_SENTRY_DSN`` is set. Unhandled request errors
reach Sentry through the FastAPI integration; handled alert errors do not.
"""
import logging
from importlib.metadata import PackageNotFoundError, version

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.utils import BadDsn

from monitor_web.core.config import BaseAppSettings, settings
from monitor_web.core.logger import COMPONENT, log_context

logger = logging.getLogger(__name__)

_initialized = False


def release_name(app_settings: BaseAppSettings = settings) -> str:
    """``SENTRY_RELEASE`` if configured, else ``monitor-web@<installed version>``."""
    if app_settings.SENTRY_RELEASE:
        return app_settings.SENTRY_RELEASE
    try:
        return f"{COMPONENT}@{version(COMPONENT)}"
    except PackageNotFoundError:
        # running from a source checkout
        return f"{COMPONENT}@dev"


def init_monitoring(app_settings: BaseAppSettings = settings) -> bool:
    """Initialise Sentry once per process. Returns True when reporting is on."""
    global _initialized
    if _initialized:
        return False
    _initialized = True
    if not app_settings.SENTRY_DSN:
        return False
    try:
        sentry_sdk.init(
            dsn=app_settings.SENTRY_DSN,
            integrations=[FastApiIntegration()],
            traces_sample_rate=app_settings.SENTRY_TRACES_SAMPLE_RATE,
            profiles_sample_rate=app_settings.SENTRY_PROFILES_SAMPLE_RATE,
            environment=app_settings.ENV,
            release=release_name(app_settings),
        )
    except BadDsn as exc:
        logger.warning("Sentry disabled, invalid DSN: %s", exc, extra=log_context())
        return False
    sentry_sdk.set_tag("component", COMPONENT)
    logger.info("Sentry initialized", extra=log_context(environment=app_settings.ENV))
    return True
