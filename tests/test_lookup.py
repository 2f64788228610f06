"""RatingKey dispatch for metadata and image requests."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.guid import encode_opaque_path
from app.models import MediaContainer
from app.services.encora import EncoraRecording
from app.services.lookup import MetadataService, UnsupportedRatingKeyError
from app.services.mapper import RecordingMapper
from app.services.nfo import NfoParser


class DummyRecordings:
    identifier = "tv.plex.agents.custom.encora"

    def __init__(self, payload: dict) -> None:
        self._payload = payload
        self.fetched: list[int] = []

    async def match_recording(self, recording_id: int) -> MediaContainer:
        self.fetched.append(recording_id)
        recording = EncoraRecording.model_validate({**self._payload, "id": recording_id})
        return MediaContainer.of(
            self.identifier, [RecordingMapper().map_recording(recording)]
        )


@pytest.fixture
def nfo_library(tmp_path: Path) -> Path:
    folder = tmp_path / "Cats (1998)"
    folder.mkdir()
    (folder / "movie.nfo").write_text(
        "<movie><title>Cats</title><thumb>https://img/cats.jpg</thumb></movie>"
    )
    return tmp_path


@pytest.mark.anyio("asyncio")
async def test_encora_key_delegates_to_pipeline(recording_payload: dict, tmp_path: Path) -> None:
    recordings = DummyRecordings(recording_payload)
    service = MetadataService(recordings, NfoParser(tmp_path))  # type: ignore[arg-type]

    container = await service.get_metadata("encora-recording-42", language="en-US")

    assert recordings.fetched == [42]
    assert container.first.rating_key == "encora-recording-42"


@pytest.mark.anyio("asyncio")
async def test_nfo_key_reads_sidecar(recording_payload: dict, nfo_library: Path) -> None:
    recordings = DummyRecordings(recording_payload)
    service = MetadataService(recordings, NfoParser(nfo_library))  # type: ignore[arg-type]
    rating_key = f"nfo-file-{encode_opaque_path('Cats (1998)/Cats.mkv')}"

    container = await service.get_metadata(rating_key)

    assert container.size == 1
    assert container.first.title == "Cats"
    assert container.first.rating_key == rating_key
    assert recordings.fetched == []

    images = await service.get_images(rating_key)
    assert [image.url for image in images.images] == ["https://img/cats.jpg"]


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "rating_key",
    [
        "encora-recording-",
        "encora-recording-12a",
        "plex-movie-1",
        "nfo-file-ZZ",
        "nfo-file-ff",
        f"nfo-file-{encode_opaque_path('Nowhere/Nothing.mkv')}",
    ],
)
async def test_unsupported_keys_raise(
    recording_payload: dict, tmp_path: Path, rating_key: str
) -> None:
    service = MetadataService(
        DummyRecordings(recording_payload), NfoParser(tmp_path)  # type: ignore[arg-type]
    )

    with pytest.raises(UnsupportedRatingKeyError):
        await service.get_metadata(rating_key)
