"""Encora recording pipeline: fetch, enrich and map a single recording."""

from __future__ import annotations

import logging
import re

import httpx

from ..models import MediaContainer
from ..provider import MOVIE_PROVIDER_IDENTIFIER
from ..utils import parse_int
from .encora import EncoraClient, EncoraRecording, EncoraSubtitle
from .mapper import RecordingMapper
from .stagemedia import ImageBundle, StageMediaClient

logger = logging.getLogger(__name__)

NUMERIC_QUERY_RE = re.compile(r"^(\d+)$")


class RecordingService:
    """Resolve Encora recording ids into Plex metadata containers.

    Neither operation raises: a failed recording fetch collapses into an
    empty container, and image or subtitle failures only drop that data.
    """

    def __init__(
        self,
        encora: EncoraClient,
        stagemedia: StageMediaClient,
        mapper: RecordingMapper,
        *,
        identifier: str = MOVIE_PROVIDER_IDENTIFIER,
    ) -> None:
        self._encora = encora
        self._stagemedia = stagemedia
        self._mapper = mapper
        self._identifier = identifier

    @property
    def identifier(self) -> str:
        return self._identifier

    def empty(self) -> MediaContainer:
        return MediaContainer.empty(self._identifier)

    async def match_recording(self, recording_id: int) -> MediaContainer:
        try:
            recording = await self._encora.get_recording(recording_id)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Error fetching Encora recording %s: %s", recording_id, exc)
            return self.empty()

        images = await self._fetch_images(recording)
        subtitles = await self._fetch_subtitles(recording_id)
        metadata = self._mapper.map_recording(recording, images, subtitles)
        return MediaContainer.of(self._identifier, [metadata])

    async def search(self, query: str) -> MediaContainer:
        """Look up a recording by a purely numeric query.

        Free-text search is not offered by Encora's API; anything else returns
        an empty container without an upstream call.
        """

        match = NUMERIC_QUERY_RE.match(query)
        recording_id = parse_int(match.group(1)) if match else None
        if recording_id is not None:
            return await self.match_recording(recording_id)
        logger.info(
            'Search query "%s" is not an id; searching by name is not supported', query
        )
        return self.empty()

    async def _fetch_images(self, recording: EncoraRecording) -> ImageBundle | None:
        show_id = recording.metadata.show_id
        if not show_id:
            return None
        try:
            return await self._stagemedia.get_images(show_id, recording.performer_ids())
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Failed to fetch StageMedia images for recording %s: %s",
                recording.id,
                exc,
            )
            return None

    async def _fetch_subtitles(self, recording_id: int) -> list[EncoraSubtitle]:
        try:
            subtitles = await self._encora.get_subtitles(recording_id)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Failed to fetch subtitles for recording %s: %s", recording_id, exc
            )
            return []
        logger.info(
            "Fetched %s subtitles for recording %s", len(subtitles), recording_id
        )
        return subtitles
