"""Client and payload models for the Encora recording API."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import Settings

logger = logging.getLogger(__name__)


class EncoraModel(BaseModel):
    """Base for Encora payloads; unknown fields are dropped."""

    model_config = ConfigDict(extra="ignore")


class EncoraDate(EncoraModel):
    """Recording date; a month or day not flagged as known is masked in titles."""

    full_date: str | None = None
    month_known: bool = False
    day_known: bool = False
    date_variant: str | None = None
    time: str | None = None

    @field_validator("month_known", "day_known", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        return False if value is None else value


class EncoraNFT(EncoraModel):
    nft_date: str | None = None
    nft_forever: bool = False

    @field_validator("nft_forever", mode="before")
    @classmethod
    def _coerce_forever(cls, value: object) -> object:
        return False if value is None else value


class EncoraPerformer(EncoraModel):
    id: int
    name: str = ""
    slug: str | None = None
    url: str | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> object:
        return "" if value is None else value


class EncoraCharacter(EncoraModel):
    id: int | None = None
    name: str = ""
    slug: str | None = None
    url: str | None = None
    order: int | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _coerce_name(cls, value: object) -> object:
        return "" if value is None else value


class EncoraCastMember(EncoraModel):
    performer: EncoraPerformer
    character: EncoraCharacter | None = None
    status: str | None = None


class EncoraMetadata(EncoraModel):
    show_id: int | None = None
    venue: str | None = None
    city: str | None = None
    media_type: str | None = None
    recording_type: str | None = None
    show_description: str | None = None
    has_subtitles: bool | None = None
    last_updated: str | None = None


class EncoraRecording(EncoraModel):
    """A single recording as returned by ``GET /recording/{id}``."""

    id: int
    show: str = ""
    tour: str | None = None
    date: EncoraDate = Field(default_factory=EncoraDate)
    master: str | None = None
    nft: EncoraNFT | None = None
    cast: list[EncoraCastMember] = Field(default_factory=list)
    notes: str | None = None
    master_notes: str | None = None
    release_format: str | None = None
    metadata: EncoraMetadata = Field(default_factory=EncoraMetadata)

    @field_validator("show", mode="before")
    @classmethod
    def _coerce_show(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("date", "metadata", mode="before")
    @classmethod
    def _coerce_missing_block(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("cast", mode="before")
    @classmethod
    def _coerce_cast(cls, value: object) -> object:
        return [] if value is None else value

    def performer_ids(self) -> list[int]:
        """Return cast performer ids, de-duplicated in cast order."""

        return list(dict.fromkeys(member.performer.id for member in self.cast))


class EncoraSubtitle(EncoraModel):
    recording_id: int | None = None
    language: str = ""
    author: str | None = None
    file_type: str = ""
    url: str

    @field_validator("language", "file_type", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        return "" if value is None else value


class EncoraClient:
    """Thin wrapper around the Encora HTTP API.

    Failures are raised to the caller; deciding which of them are fatal is
    the pipeline's job.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient):
        self._settings = settings
        self._client = http_client

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": "PlexAgent/1.0",
        }
        if self._settings.encora_api_key:
            headers["Authorization"] = f"Bearer {self._settings.encora_api_key}"
        return headers

    async def _get_json(self, path: str) -> Any:
        logger.info("Encora API request: GET %s", path)
        response = await self._client.get(path, headers=self._headers())
        if response.status_code >= 400:
            logger.warning(
                "Encora API error: %s GET %s: %s",
                response.status_code,
                path,
                response.text,
            )
        response.raise_for_status()
        logger.info("Encora API response: %s GET %s", response.status_code, path)
        return response.json()

    async def get_recording(self, recording_id: int) -> EncoraRecording:
        """Fetch a recording by its numeric id."""

        data = await self._get_json(f"/recording/{recording_id}")
        return EncoraRecording.model_validate(data)

    async def get_subtitles(self, recording_id: int) -> list[EncoraSubtitle]:
        """Fetch the subtitle files attached to a recording."""

        data = await self._get_json(f"/recording/{recording_id}/subtitles")
        if not isinstance(data, list):
            raise ValueError(
                f"Unexpected subtitles payload for recording {recording_id}"
            )
        return [EncoraSubtitle.model_validate(entry) for entry in data]
