"""Resolve Plex match requests to Encora recordings."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import NamedTuple

from ..models import MatchRequest, MediaContainer
from ..utils import parse_int
from .nfo import NfoParser
from .recordings import RecordingService

logger = logging.getLogger(__name__)

ENCORA_GUID_RE = re.compile(r"encora://(\d+)")
DIGITS_RE = re.compile(r"(\d+)")
# Encora ids embedded in titles or filenames, e.g. "Wicked {e-12345}".
EMBEDDED_ID_RE = re.compile(r"\{[Ee][\s-]?(\d+)\}")
NUMERIC_TITLE_RE = re.compile(r"\d+")


class RecordingCandidate(NamedTuple):
    recording_id: int
    source: str


def extract_recording_id(request: MatchRequest) -> RecordingCandidate | None:
    """Pull a candidate Encora id out of the match hints.

    Rules are tried in order and the first hit wins: the ``guid``, an
    ``{e-<id>}`` marker in the title, the same marker in the filename, and
    finally a title made only of digits. A hit whose digits do not convert
    to an integer is skipped.
    """

    hits: list[tuple[str | None, str]] = []
    if request.guid:
        match = ENCORA_GUID_RE.search(request.guid) or DIGITS_RE.search(request.guid)
        hits.append((match.group(1) if match else None, "guid"))
    if request.title:
        match = EMBEDDED_ID_RE.search(request.title)
        hits.append((match.group(1) if match else None, "title-marker"))
    if request.filename:
        match = EMBEDDED_ID_RE.search(request.filename)
        hits.append((match.group(1) if match else None, "filename-marker"))
    if request.title and NUMERIC_TITLE_RE.fullmatch(request.title):
        hits.append((request.title, "numeric-title"))

    for digits, source in hits:
        if digits is None:
            continue
        recording_id = parse_int(digits)
        if recording_id is None:
            logger.info("Ignoring unusable id from %s (%s digits)", source, len(digits))
            continue
        logger.info("Found id %s from %s", recording_id, source)
        return RecordingCandidate(recording_id, source)

    return None


class MatchService:
    """Match engine behind ``POST /library/metadata/matches``."""

    def __init__(
        self,
        recordings: RecordingService,
        nfo_parser: NfoParser | None = None,
        *,
        nfo_fallback: bool = False,
    ) -> None:
        self._recordings = recordings
        self._nfo_parser = nfo_parser
        self._nfo_fallback = nfo_fallback

    async def match(
        self,
        request: MatchRequest,
        *,
        language: str | None = None,
        country: str | None = None,
    ) -> MediaContainer:
        logger.debug(
            "Match request received (%s/%s): %s",
            language,
            country,
            request.model_dump(exclude_none=True),
        )

        candidate = extract_recording_id(request)
        if candidate is not None:
            result = await self._recordings.match_recording(candidate.recording_id)
            if result.size > 0:
                return result
            logger.info(
                "No Encora results for id %s (from %s)",
                candidate.recording_id,
                candidate.source,
            )

        if request.title:
            result = await self._recordings.search(request.title)
            if result.size > 0:
                return result
            logger.info("No Encora search results for %r", request.title)

        if self._nfo_fallback and self._nfo_parser is not None and request.filename:
            try:
                metadata = await asyncio.to_thread(
                    self._nfo_parser.parse_for_file, request.filename
                )
            except (OSError, ValueError) as exc:
                logger.warning("NFO fallback failed for %r: %s", request.filename, exc)
                metadata = None
            if metadata is not None:
                return MediaContainer.of(self._recordings.identifier, [metadata])

        logger.info("No matches found; returning empty results")
        return self._recordings.empty()
