from __future__ import annotations

import unicodedata
from typing import Optional

import requests

from domain.models import NameTranslation
from domain.repositories import NameTranslator


def is_latin_script(name: str) -> bool:
    """True when every letter of `name` belongs to the Latin script."""

    for char in name:
        if not char.isalpha():
            continue
        if not unicodedata.name(char, "").startswith("LATIN"):
            return False
    return True


class HttpNameTranslator(NameTranslator):
    """
    Client for a translation service exposing a single JSON endpoint.

    Request:  {"creatorId": ..., "input": ...}
    Response: {"locale": ..., "transliteration": ..., "translation": ...}

    Only names containing non-Latin letters are eligible.
    """

    def __init__(
        self,
        api_url: str,
        api_key: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    def is_eligible(self, name: str) -> bool:
        return not is_latin_script(name)

    def translate(self, creator_pk: str, name: str) -> NameTranslation:
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        response = self._session.post(
            self._api_url,
            json={"creatorId": creator_pk, "input": name},
            headers=headers,
            timeout=self._timeout,
        )
        response.raise_for_status()
        payload = response.json()

        return NameTranslation(
            locale=payload.get("locale"),
            latinized=payload.get("transliteration"),
            translated=payload.get("translation"),
        )
