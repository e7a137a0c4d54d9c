from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol

from .models import Creator, CreatorFilter, MinecraftProfile, NameTranslation

# Columns that `CreatorRepository.update_creator` accepts in `changes`.
UPDATABLE_FIELDS = frozenset(
    {
        "creator_id",
        "creator_id_provider",
        "creator_name",
        "creator_name_slug",
        "minecraft_player_uuid",
        "allow_creator_id_reset",
        "hwids",
        "ips",
        "needs_translation",
        "creator_name_locale",
        "creator_name_latinized",
        "creator_name_translated",
    }
)


class CreatorRepository(Protocol):
    """
    Abstraction over creator persistence.

    Implementations are responsible for:
    - Mapping between database rows and the `Creator` domain model.
    - Enforcing uniqueness of `creator_id`, and signalling a violation of
      it with `DuplicateCreatorId` rather than a driver-specific error.
    """

    def get_by_creator_id(self, creator_id: str) -> Optional[Creator]:
        """Return the creator owning exactly this Creator ID, or None."""

        ...

    def find_any(self, filters: CreatorFilter) -> List[Creator]:
        """Return every creator matching at least one term of `filters`."""

        ...

    def create_creator(self, creator: Creator) -> Creator:
        """
        Persist a new creator and return the stored representation.

        Raises `DuplicateCreatorId` if the Creator ID is already taken.
        """

        ...

    def update_creator(self, creator_pk: str, changes: Dict[str, Any]) -> Creator:
        """
        Apply `changes` (field name to new value) to the creator with
        internal ID `creator_pk` and return the updated creator.
        """

        ...


class MinecraftAuthVerifier(Protocol):
    """Proves ownership of an official Minecraft account."""

    def verify_official_account(self, access_token: str) -> MinecraftProfile:
        """
        Return the profile behind `access_token`.

        Raises a `MinecraftAuthError` subclass if ownership can't be proven.
        """

        ...


class NameTranslator(Protocol):
    """
    Transliteration/translation of Creator Names, e.g. backed by an LLM.
    """

    def is_eligible(self, name: str) -> bool:
        """Whether `name` is written in a script that benefits from translation."""

        ...

    def translate(self, creator_pk: str, name: str) -> NameTranslation:
        ...


class ErrorReporter(Protocol):
    """Best-effort sink for exceptions that can't be raised to a caller."""

    def capture_exception(self, error: BaseException) -> None:
        ...
