from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Tuple


PROVIDER_PARADOX = "paradox"
PROVIDER_LOCAL = "local"
PROVIDER_MINECRAFT_OFFICIAL = "minecraft_official"
PROVIDER_MINECRAFT_OFFLINE = "minecraft_offline"

CREATOR_ID_PROVIDERS = (
    PROVIDER_PARADOX,
    PROVIDER_LOCAL,
    PROVIDER_MINECRAFT_OFFICIAL,
    PROVIDER_MINECRAFT_OFFLINE,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Creator:
    """
    Domain representation of a screenshot author ("Creator").

    `creator_id` is the client-held secret identifier used to authenticate,
    while `id` is the stable internal key that never changes, even when the
    creator ID is migrated to another provider.
    """

    id: str
    creator_id: str
    creator_id_provider: str
    creator_name: Optional[str] = None
    creator_name_slug: Optional[str] = None
    minecraft_player_uuid: Optional[str] = None
    allow_creator_id_reset: bool = False
    hwids: List[str] = field(default_factory=list)
    ips: List[str] = field(default_factory=list)
    needs_translation: bool = True
    creator_name_locale: Optional[str] = None
    creator_name_latinized: Optional[str] = None
    creator_name_translated: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class CreatorFilter:
    """
    Disjunctive lookup: a creator matches when any non-None field is equal.
    """

    creator_id: str
    creator_name: Optional[str] = None
    creator_name_slug: Optional[str] = None
    minecraft_player_uuid: Optional[str] = None

    def terms(self) -> List[Tuple[str, str]]:
        """Return the (column, value) pairs that take part in the lookup."""

        pairs = [
            ("creator_id", self.creator_id),
            ("creator_name", self.creator_name),
            ("creator_name_slug", self.creator_name_slug),
            ("minecraft_player_uuid", self.minecraft_player_uuid),
        ]
        return [(column, value) for column, value in pairs if value is not None]

    def matches(self, creator: Creator) -> bool:
        return any(getattr(creator, column) == value for column, value in self.terms())


@dataclass(frozen=True)
class MinecraftProfile:
    """Profile returned once ownership of a Minecraft account is proven."""

    uuid: str
    username: Optional[str] = None


@dataclass(frozen=True)
class NameTranslation:
    locale: Optional[str]
    latinized: Optional[str]
    translated: Optional[str]
