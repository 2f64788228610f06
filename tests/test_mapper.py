"""Mapping Encora recordings to Plex movie metadata."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.formatting import TitleFormatter
from app.services.encora import EncoraRecording, EncoraSubtitle
from app.services.mapper import (
    PLACEHOLDER_THUMB_URL,
    RecordingMapper,
    parse_instant,
    parse_year,
)
from app.services.stagemedia import ImageBundle, PerformerImage

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def _map(payload: dict, images: ImageBundle | None = None, subtitles=None):
    recording = EncoraRecording.model_validate(payload)
    return RecordingMapper().map_recording(recording, images, subtitles, now=NOW)


def test_maps_core_fields(recording_payload: dict) -> None:
    metadata = _map(recording_payload)

    assert metadata.rating_key == "encora-recording-12345"
    assert metadata.key == "/library/metadata/encora-recording-12345"
    assert metadata.guid == "tv.plex.agents.custom.encora://movie/encora-recording-12345"
    assert metadata.type == "movie"
    assert metadata.title == "Mock Show Mock Tour | (January 01, 2025) MockMaster"
    assert metadata.original_title == "Mock Show - Mock Tour"
    assert metadata.originally_available_at == "2025-01-01"
    assert metadata.year == 2025
    assert metadata.studio == "Mock Tour"
    assert metadata.edition_title == "MockMaster"
    assert [person.tag for person in metadata.directors] == ["MockMaster"]
    assert [tag.tag for tag in metadata.genres] == ["Pro-Shot", "Video"]
    assert [tag.tag for tag in metadata.studios] == ["Mock Venue"]
    assert [tag.tag for tag in metadata.countries] == ["Mock City"]
    assert [ref.id for ref in metadata.guids] == ["encora://12345"]


def test_summary_prefers_show_description(recording_payload: dict) -> None:
    assert _map(recording_payload).summary == "Description HTML"

    payload = {
        **recording_payload,
        "metadata": {**recording_payload["metadata"], "show_description": None},
    }
    assert _map(payload).summary == "Some notes HTML"

    payload["master_notes"] = "<i>Master</i> notes"
    assert _map(payload).summary == "Master notes"


def test_cast_uses_stagemedia_photo_then_encora_url(recording_payload: dict) -> None:
    payload = {
        **recording_payload,
        "cast": [
            *recording_payload["cast"],
            {"performer": {"id": 2, "name": "Actor Two"}, "character": None},
        ],
    }

    without_images = _map(payload)
    assert [role.thumb for role in without_images.roles] == [
        "http://encora.it/actor/1",
        PLACEHOLDER_THUMB_URL,
    ]
    assert without_images.roles[0].role == "Character One"
    assert without_images.roles[1].role is None

    images = ImageBundle(performers=[PerformerImage(id=1, url="https://img/1.jpg")])
    with_images = _map(payload, images)
    assert with_images.roles[0].thumb == "https://img/1.jpg"


def test_posters_become_cover_images(recording_payload: dict) -> None:
    images = ImageBundle(posters=["https://img/p1.jpg", "https://img/p2.jpg"])

    metadata = _map(recording_payload, images)

    assert metadata.thumb == "https://img/p1.jpg"
    assert [(image.type, image.url, image.alt) for image in metadata.images] == [
        ("coverPoster", "https://img/p1.jpg", "Mock Show"),
        ("coverPoster", "https://img/p2.jpg", "Mock Show"),
    ]


def test_subtitles_map_language_codes(recording_payload: dict) -> None:
    subtitles = [
        EncoraSubtitle(url="https://subs/1", language="French", file_type="SRT"),
        EncoraSubtitle(url="https://subs/2", language="Portuguese (BR)", file_type="VTT"),
        EncoraSubtitle(url="https://subs/3", language="Norwegian", file_type="srt"),
        EncoraSubtitle(url="https://subs/4", language="Klingon", file_type="ASS"),
    ]

    metadata = _map(recording_payload, subtitles=subtitles)

    assert [(s.id, s.language, s.format) for s in metadata.subtitles] == [
        ("https://subs/1", "fre", "srt"),
        ("https://subs/2", "por", "vtt"),
        ("https://subs/3", "nor", "srt"),
        ("https://subs/4", "Klingon", "ass"),
    ]


@pytest.mark.parametrize(
    ("nft", "expected"),
    [
        ({"nft_date": None, "nft_forever": True}, "NFT"),
        ({"nft_date": "2099-01-01T00:00:00Z", "nft_forever": False}, "NFT"),
        ({"nft_date": "2020-01-01T00:00:00Z", "nft_forever": False}, None),
        ({"nft_date": None, "nft_forever": False}, None),
        ({"nft_date": "not a date", "nft_forever": False}, None),
        (None, None),
    ],
)
def test_nft_content_rating(recording_payload: dict, nft, expected) -> None:
    metadata = _map({**recording_payload, "nft": nft})

    assert metadata.content_rating == expected


def test_empty_collections_are_absent_from_payload(recording_payload: dict) -> None:
    payload = {
        **recording_payload,
        "tour": None,
        "master": None,
        "cast": [],
        "metadata": {"show_id": None},
    }

    body = _map(payload).to_payload()

    for name in ("Image", "Genre", "Role", "Director", "Studio", "Country", "Subtitle"):
        assert name not in body
    assert "originalTitle" not in body
    assert "editionTitle" not in body
    assert body["Guid"] == [{"id": "encora://12345"}]


def test_degraded_title_falls_back_to_show(recording_payload: dict) -> None:
    class BrokenFormatter(TitleFormatter):
        def _render(self, recording: EncoraRecording) -> str:
            raise KeyError("date")

    recording = EncoraRecording.model_validate(recording_payload)
    metadata = RecordingMapper(BrokenFormatter()).map_recording(recording, now=NOW)

    assert metadata.title == "Mock Show"


def test_parse_helpers() -> None:
    assert parse_instant("2024-05-01") == datetime(2024, 5, 1, tzinfo=timezone.utc)
    assert parse_instant("2024-05-01T10:00:00Z") == datetime(
        2024, 5, 1, 10, tzinfo=timezone.utc
    )
    assert parse_instant("garbage") is None
    assert parse_year("1999-12-31") == 1999
    assert parse_year("19") is None
    assert parse_year(None) is None


def test_explicit_nulls_in_nested_blocks_are_tolerated(recording_payload: dict) -> None:
    payload = {
        **recording_payload,
        "date": {"full_date": "2025-01-01", "month_known": None, "day_known": None},
        "nft": {"nft_date": None, "nft_forever": None},
        "cast": [
            {
                "performer": {"id": 1, "name": None, "url": None},
                "character": {"id": None, "name": None},
            }
        ],
    }
    subtitles = [
        EncoraSubtitle.model_validate(
            {"url": "https://subs/1", "language": None, "file_type": None}
        )
    ]

    metadata = _map(payload, subtitles=subtitles)

    assert metadata.title == "Mock Show Mock Tour | (xxx xx, 2025) MockMaster"
    assert metadata.content_rating is None
    assert [(role.tag, role.role, role.thumb) for role in metadata.roles] == [
        ("", None, PLACEHOLDER_THUMB_URL)
    ]
    assert [(s.language, s.format) for s in metadata.subtitles] == [("", "")]
