from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional, Set

from domain.models import Creator
from domain.repositories import CreatorRepository, ErrorReporter, NameTranslator

logger = logging.getLogger(__name__)


@dataclass
class TranslationResult:
    """Outcome of a Creator Name translation refresh."""

    translated: bool
    creator: Optional[Creator] = None


def update_creator_name_translation(
    creator: Creator,
    creator_repo: CreatorRepository,
    translator: NameTranslator,
) -> TranslationResult:
    """
    Refresh the transliteration and translation of a Creator Name.

    `needs_translation` is ignored: the refresh always happens. Creators
    without a name, or with a name the translator deems not eligible, are
    marked as not needing translation and their derived fields are cleared.
    """

    name = creator.creator_name
    if not (name and translator.is_eligible(name)):
        creator_repo.update_creator(
            creator.id,
            {
                "needs_translation": False,
                "creator_name_locale": None,
                "creator_name_latinized": None,
                "creator_name_translated": None,
            },
        )
        return TranslationResult(translated=False)

    translation = translator.translate(creator.id, name)

    updated = creator_repo.update_creator(
        creator.id,
        {
            "needs_translation": False,
            "creator_name_locale": translation.locale,
            "creator_name_latinized": translation.latinized,
            "creator_name_translated": translation.translated,
        },
    )
    return TranslationResult(translated=True, creator=updated)


class TranslationScheduler:
    """
    Runs translation refreshes in the background.

    Each refresh is an independent future on `executor`; its failure is
    logged and handed to the error reporter, never raised to whoever
    scheduled it and never retried.
    """

    def __init__(
        self,
        creator_repo: CreatorRepository,
        translator: NameTranslator,
        error_reporter: ErrorReporter,
        executor: Optional[Executor] = None,
        max_workers: int = 2,
    ) -> None:
        self._creator_repo = creator_repo
        self._translator = translator
        self._error_reporter = error_reporter
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="creator-translation"
        )
        self._pending: Set[Future] = set()
        self._lock = threading.Lock()

    def schedule(self, creator: Creator) -> Optional[Future]:
        try:
            future = self._executor.submit(self._refresh, creator)
        except RuntimeError as error:
            # Executor already shut down.
            logger.error(
                'Could not schedule translation of creator name "%s" (#%s).',
                creator.creator_name,
                creator.id,
                exc_info=error,
            )
            self._report(error)
            return None

        with self._lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._lock:
            self._pending.discard(future)

    def _refresh(self, creator: Creator) -> Optional[TranslationResult]:
        try:
            return update_creator_name_translation(
                creator, self._creator_repo, self._translator
            )
        except Exception as error:
            logger.error(
                'Failed to translate creator name "%s" (#%s).',
                creator.creator_name,
                creator.id,
                exc_info=error,
            )
            self._report(error)
            return None

    def _report(self, error: Exception) -> None:
        try:
            self._error_reporter.capture_exception(error)
        except Exception:
            logger.exception("Error reporter failed while reporting a translation failure.")

    def drain(self, timeout: Optional[float] = None) -> None:
        """Block until every refresh scheduled so far has finished."""

        with self._lock:
            pending = set(self._pending)
        if pending:
            wait(pending, timeout=timeout)

    def shutdown(self, wait_for_pending: bool = True) -> None:
        self._executor.shutdown(wait=wait_for_pending)
