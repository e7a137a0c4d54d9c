from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from domain.exceptions import (
    AuthenticationFailed,
    CreatorError,
    CreatorIdMismatch,
    CreatorIntegrityError,
    CreatorNameAlreadyClaimed,
    CreatorNotFound,
    DuplicateCreatorId,
    InvalidLinkedMinecraftUuid,
    InvalidMinecraftUuid,
    MinecraftAuthError,
    MissingCredential,
    UnsupportedProvider,
)
from domain.history import merge_mru3
from domain.identity import (
    normalize_creator_name,
    normalize_minecraft_uuid,
    slugify,
    validate_creator_id,
)
from domain.models import (
    PROVIDER_LOCAL,
    PROVIDER_MINECRAFT_OFFICIAL,
    PROVIDER_MINECRAFT_OFFLINE,
    PROVIDER_PARADOX,
    Creator,
    CreatorFilter,
)
from domain.repositories import CreatorRepository, MinecraftAuthVerifier

from application.translation import TranslationScheduler

logger = logging.getLogger(__name__)

NamePredicate = Callable[[str], bool]


@dataclass(frozen=True)
class SimpleCreatorAuthorization:
    """
    The simpler authorization scheme: a Creator ID used much like an API key.
    """

    creator_id: str
    ip: str


@dataclass(frozen=True)
class ModCreatorAuthorization:
    """
    Authorization scheme used by the mod.

    Besides authenticating, it creates the account on first use and keeps
    the Creator Name, linked Minecraft player and device/IP history up to
    date.
    """

    creator_id: str
    creator_id_provider: str
    creator_name: Optional[str]
    hwid: str
    ip: str
    minecraft_access_token: Optional[str] = None
    minecraft_player_uuid: Optional[str] = None


CreatorAuthorization = Union[SimpleCreatorAuthorization, ModCreatorAuthorization]


class ResolutionOutcome(Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ResolutionContext:
    """Effective claim once provider credentials have been resolved."""

    creator_id: str
    creator_id_provider: str
    creator_name: Optional[str]
    creator_name_slug: Optional[str]
    minecraft_player_uuid: Optional[str]
    hwid: str
    ip: str

    def to_filter(self) -> CreatorFilter:
        has_name = bool(self.creator_name)
        return CreatorFilter(
            creator_id=self.creator_id,
            creator_name=self.creator_name if has_name else None,
            creator_name_slug=self.creator_name_slug if has_name else None,
            minecraft_player_uuid=self.minecraft_player_uuid,
        )


@dataclass
class ResolutionPlan:
    """
    What to do with a claim, decided before anything is written.

    - CREATED: insert a creator built from `fields`.
    - UPDATED: apply `fields` to `creator`.
    - UNCHANGED: `creator` is returned as is.
    - REJECTED: `error` is the reason.
    """

    outcome: ResolutionOutcome
    creator: Optional[Creator] = None
    fields: Dict[str, Any] = field(default_factory=dict)
    name_changed: bool = False
    error: Optional[CreatorError] = None


@dataclass
class ModAuthenticationResult:
    outcome: ResolutionOutcome
    creator: Optional[Creator] = None
    error: Optional[CreatorError] = None


def authenticate_creator(
    authorization: CreatorAuthorization,
    creator_repo: CreatorRepository,
    minecraft_auth: Optional[MinecraftAuthVerifier] = None,
    translation_scheduler: Optional[TranslationScheduler] = None,
    is_name_acceptable: Optional[NamePredicate] = None,
) -> Creator:
    """
    Authenticate a creator with whichever scheme `authorization` uses.
    """

    if isinstance(authorization, SimpleCreatorAuthorization):
        validate_creator_id(authorization.creator_id)
        return authenticate_creator_simple(
            authorization.creator_id, authorization.ip, creator_repo
        )

    if isinstance(authorization, ModCreatorAuthorization):
        return authenticate_creator_for_mod(
            authorization,
            creator_repo,
            minecraft_auth,
            translation_scheduler,
            is_name_acceptable,
        )

    raise TypeError(f"Unknown authorization type: {type(authorization).__name__}")


def authenticate_creator_simple(
    creator_id: str,
    ip: str,
    creator_repo: CreatorRepository,
) -> Creator:
    """
    Check that `creator_id` belongs to a creator, much like an API key check.

    Never creates an account. The IP history is only written when `ip` is
    not already the most recent entry.
    """

    creator = creator_repo.get_by_creator_id(creator_id)
    if creator is None:
        raise CreatorNotFound()

    if not creator.ips or creator.ips[0] != ip:
        creator = creator_repo.update_creator(
            creator.id, {"ips": merge_mru3(creator.ips, ip)}
        )

    return creator


def authenticate_creator_for_mod(
    authorization: ModCreatorAuthorization,
    creator_repo: CreatorRepository,
    minecraft_auth: Optional[MinecraftAuthVerifier] = None,
    translation_scheduler: Optional[TranslationScheduler] = None,
    is_name_acceptable: Optional[NamePredicate] = None,
) -> Creator:
    """
    Authenticate, create or update a creator from a mod authorization.

    Two requests for a creator that does not exist yet can race to create
    it (the mod fires several authenticated requests at launch). The loser
    gets `DuplicateCreatorId` from the store, so the whole resolution is
    run once more, which then finds the winner's account. A second
    conflict propagates.
    """

    def resolve() -> ModAuthenticationResult:
        return resolve_creator_for_mod(
            authorization,
            creator_repo,
            minecraft_auth,
            translation_scheduler,
            is_name_acceptable,
        )

    try:
        result = resolve()
    except DuplicateCreatorId as error:
        logger.warning(
            "Concurrent creation of creator %s, retrying authentication.",
            error.creator_id,
        )
        result = resolve()

    if result.error is not None:
        raise result.error
    if result.creator is None:
        raise RuntimeError(f"Resolution ended as {result.outcome.value} without a creator.")
    return result.creator


def resolve_creator_for_mod(
    authorization: ModCreatorAuthorization,
    creator_repo: CreatorRepository,
    minecraft_auth: Optional[MinecraftAuthVerifier] = None,
    translation_scheduler: Optional[TranslationScheduler] = None,
    is_name_acceptable: Optional[NamePredicate] = None,
) -> ModAuthenticationResult:
    """
    Run a single resolution of a mod authorization and commit its outcome.

    Rejections caused by the claim are returned as a REJECTED result.
    Store errors, including `DuplicateCreatorId`, and `CreatorIntegrityError`
    are raised.
    """

    try:
        context = resolve_claim(authorization, minecraft_auth)
    except CreatorError as error:
        return ModAuthenticationResult(outcome=ResolutionOutcome.REJECTED, error=error)

    try:
        matches = creator_repo.find_any(context.to_filter())
        plan = plan_resolution(context, matches, is_name_acceptable)
    except CreatorError as error:
        return ModAuthenticationResult(outcome=ResolutionOutcome.REJECTED, error=error)
    except CreatorIntegrityError:
        logger.error(
            "Inconsistent creators found for Creator ID %s.",
            context.creator_id,
            exc_info=True,
        )
        raise

    if plan.outcome is ResolutionOutcome.REJECTED:
        return ModAuthenticationResult(outcome=plan.outcome, error=plan.error)

    if plan.outcome is ResolutionOutcome.UNCHANGED:
        return ModAuthenticationResult(outcome=plan.outcome, creator=plan.creator)

    if plan.outcome is ResolutionOutcome.CREATED:
        creator = creator_repo.create_creator(Creator(id=str(uuid.uuid4()), **plan.fields))
        logger.info('Created creator "%s".', creator.creator_name)
        if translation_scheduler is not None:
            translation_scheduler.schedule(creator)
        return ModAuthenticationResult(outcome=plan.outcome, creator=creator)

    if plan.creator is None:
        raise RuntimeError("An update was planned without a stored creator.")
    creator = creator_repo.update_creator(plan.creator.id, plan.fields)
    logger.debug('Updated creator "%s".', plan.creator.creator_name)
    if plan.name_changed and translation_scheduler is not None:
        translation_scheduler.schedule(creator)
    return ModAuthenticationResult(outcome=plan.outcome, creator=creator)


def resolve_claim(
    authorization: ModCreatorAuthorization,
    minecraft_auth: Optional[MinecraftAuthVerifier],
) -> ResolutionContext:
    """
    Turn the raw claim into the effective identity to look up.

    The Creator Name is deliberately not validated here: legacy names that
    predate the current rules must still authenticate.
    """

    provider = authorization.creator_id_provider
    creator_id = authorization.creator_id
    creator_name = authorization.creator_name
    minecraft_player_uuid: Optional[str] = None

    if provider == PROVIDER_MINECRAFT_OFFICIAL:
        access_token = authorization.minecraft_access_token
        if not (access_token and access_token.strip()):
            raise MissingCredential(provider, "Minecraft access token")
        if minecraft_auth is None:
            raise RuntimeError("No Minecraft verifier configured for official accounts.")

        try:
            profile = minecraft_auth.verify_official_account(access_token)
        except MinecraftAuthError as error:
            raise AuthenticationFailed(error) from error

        creator_id = profile.uuid
        minecraft_player_uuid = profile.uuid
        if not (creator_name and creator_name.strip()) and profile.username:
            creator_name = profile.username

    elif provider == PROVIDER_MINECRAFT_OFFLINE:
        raw_uuid = authorization.minecraft_player_uuid
        if not (raw_uuid and raw_uuid.strip()):
            raise MissingCredential(provider, "Minecraft player UUID")

        try:
            minecraft_player_uuid = normalize_minecraft_uuid(raw_uuid)
        except InvalidMinecraftUuid as error:
            raise InvalidLinkedMinecraftUuid(raw_uuid) from error

    elif provider not in (PROVIDER_PARADOX, PROVIDER_LOCAL):
        raise UnsupportedProvider(provider)

    validate_creator_id(creator_id)

    if creator_name is not None and not creator_name.strip():
        creator_name = None

    return ResolutionContext(
        creator_id=creator_id,
        creator_id_provider=provider,
        creator_name=creator_name,
        creator_name_slug=slugify(creator_name),
        minecraft_player_uuid=minecraft_player_uuid,
        hwid=authorization.hwid,
        ip=authorization.ip,
    )


def plan_resolution(
    context: ResolutionContext,
    matches: List[Creator],
    is_name_acceptable: Optional[NamePredicate] = None,
) -> ResolutionPlan:
    """
    Decide between creating, updating or rejecting, given every creator
    matching the claim's Creator ID, name, slug or Minecraft UUID.
    """

    if len(matches) > 1:
        return _plan_conflict(context, matches)

    if not matches:
        return _plan_create(context, is_name_acceptable)

    return _plan_update(context, matches[0], is_name_acceptable)


def _plan_conflict(context: ResolutionContext, matches: List[Creator]) -> ResolutionPlan:
    # Two creators come back when the claimant's own account is matched by
    # its Creator ID (or, failing that, its Minecraft player) and another
    # creator by the name the claimant asks for. Any other shape means
    # stored identities aren't unique.
    if len(matches) != 2 or not context.creator_name:
        raise CreatorIntegrityError(
            f"{len(matches)} creators match Creator ID {context.creator_id} "
            f"and Creator Name {context.creator_name!r}."
        )

    def owns_name(creator: Creator) -> bool:
        return creator.creator_name == context.creator_name or (
            context.creator_name_slug is not None
            and creator.creator_name_slug == context.creator_name_slug
        )

    claimants = [c for c in matches if c.creator_id == context.creator_id]
    if not claimants and context.minecraft_player_uuid is not None:
        claimants = [
            c for c in matches if c.minecraft_player_uuid == context.minecraft_player_uuid
        ]

    if len(claimants) == 1:
        claimant = claimants[0]
        other = matches[1] if claimant is matches[0] else matches[0]
        if owns_name(other) and not owns_name(claimant):
            return ResolutionPlan(
                outcome=ResolutionOutcome.REJECTED,
                error=CreatorNameAlreadyClaimed(context.creator_name),
            )

    first, second = matches
    raise CreatorIntegrityError(
        f"Creators {first.id} and {second.id} both match Creator ID "
        f"{context.creator_id} and Creator Name {context.creator_name!r}."
    )


def _plan_create(
    context: ResolutionContext,
    is_name_acceptable: Optional[NamePredicate],
) -> ResolutionPlan:
    try:
        creator_name = normalize_creator_name(context.creator_name, is_acceptable=is_name_acceptable)
    except CreatorError as error:
        return ResolutionPlan(outcome=ResolutionOutcome.REJECTED, error=error)

    return ResolutionPlan(
        outcome=ResolutionOutcome.CREATED,
        fields={
            "creator_id": context.creator_id,
            "creator_id_provider": context.creator_id_provider,
            "creator_name": creator_name,
            "creator_name_slug": slugify(creator_name),
            "minecraft_player_uuid": context.minecraft_player_uuid,
            "hwids": [context.hwid],
            "ips": [context.ip],
        },
    )


def _plan_update(
    context: ResolutionContext,
    creator: Creator,
    is_name_acceptable: Optional[NamePredicate],
) -> ResolutionPlan:
    is_same_minecraft_player = (
        context.minecraft_player_uuid is not None
        and creator.minecraft_player_uuid == context.minecraft_player_uuid
    )

    if (
        creator.creator_id != context.creator_id
        and not creator.allow_creator_id_reset
        and not is_same_minecraft_player
    ):
        # Only a name or slug match gets here.
        return ResolutionPlan(
            outcome=ResolutionOutcome.REJECTED,
            error=CreatorIdMismatch(creator.creator_name or context.creator_name or ""),
        )

    # A stable name is kept verbatim, even if it would not pass today's rules.
    if context.creator_name == creator.creator_name:
        creator_name = creator.creator_name
    else:
        try:
            creator_name = normalize_creator_name(
                context.creator_name, is_acceptable=is_name_acceptable
            )
        except CreatorError as error:
            return ResolutionPlan(outcome=ResolutionOutcome.REJECTED, error=error)

    creator_name_slug = (
        context.creator_name_slug
        if creator_name == context.creator_name
        else slugify(creator_name)
    )

    modified = (
        creator.creator_name != creator_name
        or creator.creator_name_slug != creator_name_slug
        or _head(creator.hwids) != context.hwid
        or _head(creator.ips) != context.ip
        or creator.creator_id != context.creator_id
        or creator.minecraft_player_uuid != context.minecraft_player_uuid
        or creator.creator_id_provider != context.creator_id_provider
    )

    if not modified:
        return ResolutionPlan(outcome=ResolutionOutcome.UNCHANGED, creator=creator)

    return ResolutionPlan(
        outcome=ResolutionOutcome.UPDATED,
        creator=creator,
        fields={
            "creator_name": creator_name,
            "creator_name_slug": creator_name_slug,
            "allow_creator_id_reset": False,
            "creator_id": context.creator_id,
            "creator_id_provider": context.creator_id_provider,
            "minecraft_player_uuid": context.minecraft_player_uuid,
            "hwids": merge_mru3(creator.hwids, context.hwid),
            "ips": merge_mru3(creator.ips, context.ip),
        },
        name_changed=creator_name != creator.creator_name,
    )


def _head(history: List[str]) -> Optional[str]:
    return history[0] if history else None


def serialize_creator(creator: Creator) -> Dict[str, Any]:
    """
    Public JSON representation of a creator.

    Secrets and tracking data (Creator ID, hardware IDs, IPs) are left out.
    """

    return {
        "id": creator.id,
        "creatorName": creator.creator_name,
        "creatorNameSlug": creator.creator_name_slug,
        "creatorNameLocale": creator.creator_name_locale,
        "creatorNameLatinized": creator.creator_name_latinized,
        "creatorNameTranslated": creator.creator_name_translated,
        "createdAt": creator.created_at.isoformat(),
    }
