"""
Validation and canonicalization of the identity claims sent by clients.

Everything in this module is pure: no I/O, no clock, no randomness.
"""

from __future__ import annotations

import re
from typing import Callable, Optional

from .exceptions import CreatorNameTooLong, InvalidCreatorId, InvalidCreatorName, InvalidMinecraftUuid

CREATOR_NAME_MAX_LENGTH = 25

_UUID_V4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-8][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$"
)
_NIL_UUID = "00000000-0000-0000-0000-000000000000"
_MAX_UUID = "ffffffff-ffff-ffff-ffff-ffffffffffff"
_HEX32_RE = re.compile(r"^[0-9a-f]{32}$")

_WHITESPACE_RE = re.compile(r"\s+")
_SLUG_SEPARATOR_RE = re.compile(r"[\s-]+")
_APOSTROPHES = ("'", "’")


def validate_creator_id(raw: str) -> str:
    """Return `raw` if it is a hyphenated random (version 4) UUID."""

    if not isinstance(raw, str) or not _UUID_V4_RE.fullmatch(raw):
        raise InvalidCreatorId(raw)
    return raw


def normalize_minecraft_uuid(raw: str) -> str:
    """
    Canonicalize a Minecraft player UUID.

    Both the bare 32-hex form returned by Mojang services and the usual
    hyphenated form are accepted, in any case. The result is lower-case
    and hyphenated (8-4-4-4-12).
    """

    compact = raw.replace("-", "").lower()
    if not _HEX32_RE.fullmatch(compact):
        raise InvalidMinecraftUuid(raw)

    hyphenated = "-".join(
        (compact[:8], compact[8:12], compact[12:16], compact[16:20], compact[20:])
    )
    if not (_UUID_RE.fullmatch(hyphenated) or hyphenated in (_NIL_UUID, _MAX_UUID)):
        raise InvalidMinecraftUuid(raw)

    return hyphenated


def normalize_creator_name(
    raw: Optional[str],
    is_acceptable: Optional[Callable[[str], bool]] = None,
) -> Optional[str]:
    """
    Collapse whitespace runs, trim, and check the length of a Creator Name.

    Blank names mean "no name" and yield None. `is_acceptable` lets callers
    plug a stricter character-set rule on top of the length check.
    """

    if raw is None:
        return None

    name = _WHITESPACE_RE.sub(" ", raw).strip()
    if not name:
        return None

    if len(name) > CREATOR_NAME_MAX_LENGTH:
        raise CreatorNameTooLong(name, CREATOR_NAME_MAX_LENGTH)

    if is_acceptable is not None and not is_acceptable(name):
        raise InvalidCreatorName(name)

    return name


def slugify(name: Optional[str]) -> Optional[str]:
    """
    Slug used to detect Creator Name collisions, e.g. "O'Brien  Town" gives
    "obrien-town".
    """

    if name is None or not name.strip():
        return None

    for apostrophe in _APOSTROPHES:
        name = name.replace(apostrophe, "")

    slug = _SLUG_SEPARATOR_RE.sub("-", name).strip("-").lower()
    return slug or None
