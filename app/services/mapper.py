"""Map Encora recordings onto Plex movie metadata."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone

from ..formatting import TitleFormatter
from ..guid import build_external_ref, build_guid, build_resource_path
from ..models import GuidRef, Image, MovieMetadata, Person, Subtitle, Tag
from ..provider import MOVIE_PROVIDER_IDENTIFIER
from ..utils import first_non_empty, map_language, strip_html
from .encora import EncoraNFT, EncoraRecording, EncoraSubtitle
from .stagemedia import ImageBundle

logger = logging.getLogger(__name__)

PLACEHOLDER_THUMB_URL = "https://i.ibb.co/xSHDBZDp/c-Xq-YZEu.png"
NFT_CONTENT_RATING = "NFT"


def encora_rating_key(recording_id: int) -> str:
    return f"encora-recording-{recording_id}"


def parse_instant(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp or date; naive values are taken as UTC."""

    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text[:10]), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_year(full_date: str | None) -> int | None:
    if not full_date:
        return None
    head = full_date[:4]
    if len(head) == 4 and head.isdigit():
        return int(head)
    return None


class RecordingMapper:
    """Build :class:`MovieMetadata` from an Encora recording.

    Mapping is pure apart from the clock used for the NFT rule, which can be
    pinned with ``now``.
    """

    def __init__(self, formatter: TitleFormatter | None = None) -> None:
        self._formatter = formatter or TitleFormatter()

    def map_recording(
        self,
        recording: EncoraRecording,
        images: ImageBundle | None = None,
        subtitles: list[EncoraSubtitle] | None = None,
        *,
        now: datetime | None = None,
    ) -> MovieMetadata:
        rating_key = encora_rating_key(recording.id)
        details = recording.metadata

        poster_images = [
            Image(type="coverPoster", url=poster, alt=recording.show)
            for poster in ((images.posters or []) if images else [])
        ]

        formatted = self._formatter.format(recording)
        if formatted.degraded:
            logger.warning(
                "Using bare show name as title for recording %s", recording.id
            )

        master = recording.master or None
        full_date = recording.date.full_date or ""

        return MovieMetadata(
            rating_key=rating_key,
            key=build_resource_path(rating_key),
            guid=build_guid(MOVIE_PROVIDER_IDENTIFIER, "movie", rating_key),
            title=formatted.title,
            content_rating=self._content_rating(recording.nft, now),
            original_title=(
                f"{recording.show} - {recording.tour}" if recording.tour else None
            ),
            originally_available_at=full_date,
            year=parse_year(full_date),
            summary=first_non_empty(
                strip_html(details.show_description),
                strip_html(recording.master_notes),
                strip_html(recording.notes),
            ),
            studio=recording.tour,
            thumb=poster_images[0].url if poster_images else None,
            images=poster_images,
            genres=[
                Tag(tag=value)
                for value in (details.recording_type, details.media_type)
                if value
            ],
            subtitles=self._map_subtitles(subtitles or []),
            roles=self._map_cast(recording, images),
            directors=[Person(tag=master)] if master else None,
            edition_title=master,
            guids=[GuidRef(id=build_external_ref("encora", recording.id))],
            studios=[Tag(tag=details.venue)] if details.venue else None,
            countries=[Tag(tag=details.city)] if details.city else None,
        )

    @staticmethod
    def _map_cast(
        recording: EncoraRecording, images: ImageBundle | None
    ) -> list[Person]:
        performer_urls = images.performer_urls() if images else {}
        roles: list[Person] = []
        for member in recording.cast:
            url = performer_urls.get(member.performer.id) or member.performer.url
            roles.append(
                Person(
                    tag=member.performer.name,
                    role=(member.character.name or None) if member.character else None,
                    thumb=url or PLACEHOLDER_THUMB_URL,
                )
            )
        return roles

    @staticmethod
    def _map_subtitles(subtitles: list[EncoraSubtitle]) -> list[Subtitle]:
        return [
            Subtitle(
                id=subtitle.url,
                language=map_language(subtitle.language),
                format=subtitle.file_type.lower(),
            )
            for subtitle in subtitles
        ]

    @staticmethod
    def _content_rating(nft: EncoraNFT | None, now: datetime | None) -> str | None:
        """Return ``"NFT"`` while a recording is marked not-for-trade."""

        if nft is None:
            return None
        if nft.nft_forever:
            return NFT_CONTENT_RATING
        if not nft.nft_date:
            return None
        expires = parse_instant(nft.nft_date)
        if expires is None:
            logger.warning("Ignoring unparseable NFT date %r", nft.nft_date)
            return None
        reference = now or datetime.now(timezone.utc)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=timezone.utc)
        if expires > reference:
            return NFT_CONTENT_RATING
        return None
