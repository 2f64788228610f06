"""Serve metadata and images for previously issued ratingKeys."""

from __future__ import annotations

import asyncio
import logging
import re

from ..guid import decode_opaque_path
from ..models import ImageContainer, MediaContainer, MovieMetadata
from ..utils import parse_int
from .nfo import NfoParser
from .recordings import RecordingService

logger = logging.getLogger(__name__)

ENCORA_RATING_KEY_RE = re.compile(r"^encora-recording-(\d+)$")
NFO_FILE_RATING_KEY_RE = re.compile(r"^nfo-file-([0-9a-f]+)$")


class UnsupportedRatingKeyError(ValueError):
    """Raised when a ratingKey matches none of the known schemes."""


class MetadataService:
    """Dispatch ratingKeys to the Encora pipeline or the NFO fallback."""

    def __init__(self, recordings: RecordingService, nfo_parser: NfoParser) -> None:
        self._recordings = recordings
        self._nfo_parser = nfo_parser

    async def get_metadata(
        self,
        rating_key: str,
        *,
        language: str | None = None,
        country: str | None = None,
    ) -> MediaContainer:
        logger.info(
            "Metadata request for ratingKey %s (%s/%s)", rating_key, language, country
        )

        match = ENCORA_RATING_KEY_RE.match(rating_key)
        recording_id = parse_int(match.group(1)) if match else None
        if recording_id is not None:
            return await self._recordings.match_recording(recording_id)

        match = NFO_FILE_RATING_KEY_RE.match(rating_key)
        if match:
            metadata = await asyncio.to_thread(self._resolve_nfo, match.group(1))
            if metadata is not None:
                return MediaContainer.of(self._recordings.identifier, [metadata])

        raise UnsupportedRatingKeyError(
            f"Invalid or unsupported ratingKey format: {rating_key}"
        )

    def _resolve_nfo(self, token: str) -> MovieMetadata | None:
        try:
            filename = decode_opaque_path(token)
            return self._nfo_parser.parse_for_file(filename)
        except (OSError, ValueError) as exc:
            logger.warning("Could not resolve NFO ratingKey token %s: %s", token, exc)
            return None

    async def get_images(
        self,
        rating_key: str,
        *,
        language: str | None = None,
    ) -> ImageContainer:
        """Return only the artwork of the item behind ``rating_key``."""

        container = await self.get_metadata(rating_key, language=language)
        item = container.first
        images = list(item.images or []) if item is not None else []
        return ImageContainer.of(self._recordings.identifier, images)
