from __future__ import annotations

import logging
from typing import Optional

import requests

from domain.exceptions import (
    InvalidMinecraftUuid,
    MinecraftAuthInvalidToken,
    MinecraftAuthMalformedResponse,
    MinecraftAuthRequestFailed,
)
from domain.identity import normalize_minecraft_uuid
from domain.models import MinecraftProfile
from domain.repositories import MinecraftAuthVerifier

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_URL = "https://api.minecraftservices.com/minecraft/profile"


class MinecraftProfileClient(MinecraftAuthVerifier):
    """
    Verifies official Minecraft accounts against the Minecraft services
    profile endpoint, using the player's bearer access token.
    """

    def __init__(
        self,
        profile_url: str = DEFAULT_PROFILE_URL,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._profile_url = profile_url
        self._timeout = timeout
        self._session = session or requests.Session()

    def verify_official_account(self, access_token: str) -> MinecraftProfile:
        try:
            response = self._session.get(
                self._profile_url,
                headers={
                    "Authorization": f"Bearer {access_token}",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.RequestException as error:
            logger.error("Failed to call Minecraft profile service: %s", error)
            raise MinecraftAuthRequestFailed(
                "Unable to contact the Minecraft profile service, please try again later."
            ) from error

        if response.status_code in (401, 403):
            raise MinecraftAuthInvalidToken()

        if not response.ok:
            raise MinecraftAuthRequestFailed(
                "Unexpected response from the Minecraft profile service "
                f"(status {response.status_code}).",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as error:
            logger.error("Failed to parse Minecraft profile response: %s", error)
            raise MinecraftAuthMalformedResponse() from error

        if not isinstance(payload, dict):
            raise MinecraftAuthMalformedResponse()

        profile_id = payload.get("id")
        if not isinstance(profile_id, str) or not profile_id:
            raise MinecraftAuthMalformedResponse()

        try:
            uuid = normalize_minecraft_uuid(profile_id)
        except InvalidMinecraftUuid as error:
            raise MinecraftAuthMalformedResponse() from error

        name = payload.get("name")
        username = name.strip() if isinstance(name, str) and name.strip() else None

        return MinecraftProfile(uuid=uuid, username=username)
