import logging
import sys

from application.translation import TranslationScheduler
from infrastructure.config import Settings, load_settings
from infrastructure.db.creator_repository_postgres import PostgresCreatorRepository
from infrastructure.db.creator_repository_sqlite import SqliteCreatorRepository
from infrastructure.minecraft.profile_client import MinecraftProfileClient
from infrastructure.reporting import LoggingErrorReporter, SentryErrorReporter
from infrastructure.translation.http_translator import HttpNameTranslator
from interfaces.cli.handlers import run_cli


def build_creator_repository(settings: Settings):
    if settings.database_url:
        return PostgresCreatorRepository({"dsn": settings.database_url})
    return SqliteCreatorRepository(settings.db_path)


def build_error_reporter(settings: Settings):
    if settings.sentry_dsn:
        return SentryErrorReporter(settings.sentry_dsn, settings.sentry_environment)
    return LoggingErrorReporter()


def main(argv=None) -> int:
    settings = load_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    creator_repo = build_creator_repository(settings)
    minecraft_auth = MinecraftProfileClient(
        settings.minecraft_profile_url, timeout=settings.minecraft_auth_timeout
    )

    translator = None
    scheduler = None
    if settings.translation_api_url:
        translator = HttpNameTranslator(
            settings.translation_api_url, api_key=settings.translation_api_key
        )
        scheduler = TranslationScheduler(
            creator_repo,
            translator,
            build_error_reporter(settings),
            max_workers=settings.translation_workers,
        )

    try:
        return run_cli(argv, creator_repo, minecraft_auth, translator, scheduler)
    finally:
        if scheduler is not None:
            scheduler.drain()
            scheduler.shutdown()


if __name__ == "__main__":
    sys.exit(main())
