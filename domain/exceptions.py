"""Exceptions raised while authenticating creators."""

from __future__ import annotations

from typing import Optional


class CreatorError(RuntimeError):
    """A request was rejected because of the claim it carried."""


class InvalidCreatorId(CreatorError):
    def __init__(self, creator_id: str) -> None:
        super().__init__(
            f'Invalid Creator ID "{creator_id}", an UUID v4 sequence was expected.'
        )
        self.creator_id = creator_id


class InvalidMinecraftUuid(CreatorError):
    """A string could not be read as a Minecraft player UUID."""

    def __init__(self, value: str) -> None:
        super().__init__(f'Invalid Minecraft UUID "{value}".')
        self.value = value


class InvalidLinkedMinecraftUuid(CreatorError):
    """The offline player UUID sent by the mod is not a valid UUID."""

    def __init__(self, value: str) -> None:
        super().__init__(f'Invalid Minecraft player UUID "{value}".')
        self.value = value


class InvalidCreatorName(CreatorError):
    def __init__(self, name: str, reason: Optional[str] = None) -> None:
        super().__init__(
            reason
            or f'Creator Name "{name}" is invalid, it must be between 1 and 25 characters long.'
        )
        self.incorrect_name = name


class CreatorNameTooLong(InvalidCreatorName):
    def __init__(self, name: str, max_length: int) -> None:
        super().__init__(
            name,
            f'Creator Name "{name}" is too long, it must be at most {max_length} characters long.',
        )
        self.max_length = max_length


class MissingCredential(CreatorError):
    """A provider-specific credential was absent from the authorization."""

    def __init__(self, provider: str, credential: str) -> None:
        super().__init__(
            f"Missing {credential} in authorization payload for provider \"{provider}\"."
        )
        self.provider = provider
        self.credential = credential


class UnsupportedProvider(CreatorError):
    def __init__(self, provider: str) -> None:
        super().__init__(f'Unsupported creator ID provider "{provider}".')
        self.provider = provider


class AuthenticationFailed(CreatorError):
    """Ownership of the Minecraft account could not be proven."""

    def __init__(self, cause: "MinecraftAuthError") -> None:
        super().__init__(str(cause))
        self.cause = cause


class CreatorNotFound(CreatorError):
    def __init__(self) -> None:
        super().__init__("No Creator with this Creator ID was found.")


class CreatorNameAlreadyClaimed(CreatorError):
    """Another creator already owns the requested Creator Name."""

    def __init__(self, creator_name: str) -> None:
        super().__init__(
            f'Creator Name "{creator_name}" is already claimed by another creator, '
            "choose another!"
        )
        self.creator_name = creator_name


class CreatorIdMismatch(CreatorError):
    """
    The claim matched a creator by name, but not by its Creator ID.

    Raised when no identity reset was authorized for that creator and the
    claim does not come from the same linked Minecraft player.
    """

    def __init__(self, creator_name: str) -> None:
        super().__init__(
            f'Incorrect Creator ID for user "{creator_name}". '
            "If you've never used HallOfFame before or just changed your Creator "
            "Name, this means this username is already claimed, choose another! "
            "Otherwise, check that you are logged in with the correct account."
        )
        self.creator_name = creator_name


class CreatorIntegrityError(RuntimeError):
    """Stored creators are in a state that should be impossible."""


class DuplicateCreatorId(RuntimeError):
    """The store refused an insert because the Creator ID already exists."""

    def __init__(self, creator_id: str) -> None:
        super().__init__(f'A creator with Creator ID "{creator_id}" already exists.')
        self.creator_id = creator_id


class MinecraftAuthError(RuntimeError):
    """Base class for failures of the Minecraft profile verification."""


class MinecraftAuthRequestFailed(MinecraftAuthError):
    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class MinecraftAuthInvalidToken(MinecraftAuthError):
    def __init__(self) -> None:
        super().__init__("Invalid or expired Minecraft access token.")


class MinecraftAuthMalformedResponse(MinecraftAuthError):
    def __init__(self) -> None:
        super().__init__(
            "Received an unexpected response from the Minecraft profile service."
        )
