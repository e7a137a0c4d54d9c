from __future__ import annotations

import logging

import sentry_sdk

from domain.repositories import ErrorReporter

logger = logging.getLogger(__name__)


class LoggingErrorReporter(ErrorReporter):
    """Reports exceptions to the application log only."""

    def capture_exception(self, error: BaseException) -> None:
        logger.error("Unhandled background error: %s", error, exc_info=error)


class SentryErrorReporter(ErrorReporter):
    """
    Reports exceptions to Sentry.

    The SDK is initialised here so that callers only need a DSN.
    """

    def __init__(self, dsn: str, environment: str = "production") -> None:
        sentry_sdk.init(dsn=dsn, environment=environment)

    def capture_exception(self, error: BaseException) -> None:
        sentry_sdk.capture_exception(error)
