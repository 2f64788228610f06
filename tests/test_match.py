"""Match request handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from app.models import MatchRequest, MediaContainer
from app.services.encora import EncoraRecording
from app.services.mapper import RecordingMapper
from app.services.match import MatchService, extract_recording_id
from app.services.nfo import NfoParser


class DummyRecordings:
    """Stand-in for the recording pipeline that records the ids it is asked for."""

    identifier = "tv.plex.agents.custom.encora"

    def __init__(self, payload: dict, known_ids: set[int]) -> None:
        self._payload = payload
        self._known_ids = known_ids
        self.fetched: list[int] = []
        self.searched: list[str] = []

    def empty(self) -> MediaContainer:
        return MediaContainer.empty(self.identifier)

    async def match_recording(self, recording_id: int) -> MediaContainer:
        self.fetched.append(recording_id)
        if recording_id not in self._known_ids:
            return self.empty()
        recording = EncoraRecording.model_validate({**self._payload, "id": recording_id})
        return MediaContainer.of(
            self.identifier, [RecordingMapper().map_recording(recording)]
        )

    async def search(self, query: str) -> MediaContainer:
        self.searched.append(query)
        if query.isdigit():
            return await self.match_recording(int(query))
        return self.empty()


@pytest.mark.parametrize(
    ("hints", "expected"),
    [
        ({"guid": "encora://15004"}, (15004, "guid")),
        ({"guid": "com.plexapp.agents.none://987?lang=en"}, (987, "guid")),
        ({"title": "Wicked {e-12345}"}, (12345, "title-marker")),
        ({"title": "Wicked {E 12345}"}, (12345, "title-marker")),
        ({"title": "Wicked {e12345}"}, (12345, "title-marker")),
        ({"filename": "/media/Wicked {e-777}.mkv"}, (777, "filename-marker")),
        ({"title": "15004", "manual": 1}, (15004, "numeric-title")),
        (
            {"guid": "encora://1", "title": "Wicked {e-2}", "filename": "{e-3}.mkv"},
            (1, "guid"),
        ),
        ({"title": "Wicked {e-2}", "filename": "{e-3}.mkv"}, (2, "title-marker")),
        ({"guid": "9" * 5000, "title": "Wicked {e-7}"}, (7, "title-marker")),
    ],
)
def test_extract_recording_id(hints: dict, expected: tuple[int, str]) -> None:
    assert tuple(extract_recording_id(MatchRequest.model_validate(hints))) == expected


@pytest.mark.parametrize(
    "hints",
    [
        {},
        {"title": "Wicked"},
        {"title": "Wicked 2003"},
        {"title": "Wicked {x-12}"},
        {"guid": "no-digits-here"},
        {"title": "9" * 5000},
        {"guid": "encora://" + "1" * 5000},
        {"title": "Wicked {e-" + "2" * 5000 + "}"},
    ],
)
def test_extract_recording_id_without_candidate(hints: dict) -> None:
    assert extract_recording_id(MatchRequest.model_validate(hints)) is None


@pytest.mark.anyio("asyncio")
async def test_match_by_embedded_marker(recording_payload: dict) -> None:
    recordings = DummyRecordings(recording_payload, {12345})
    service = MatchService(recordings)  # type: ignore[arg-type]

    container = await service.match(MatchRequest(title="Wicked {e-12345}"))

    assert container.size == 1
    assert container.first.rating_key == "encora-recording-12345"
    assert recordings.fetched == [12345]


@pytest.mark.anyio("asyncio")
async def test_title_without_marker_makes_no_id_fetch(recording_payload: dict) -> None:
    recordings = DummyRecordings(recording_payload, {12345})
    service = MatchService(recordings)  # type: ignore[arg-type]

    container = await service.match(MatchRequest(title="Wicked", year=2003))

    assert container.size == 0
    assert recordings.fetched == []
    assert recordings.searched == ["Wicked"]


@pytest.mark.anyio("asyncio")
async def test_unknown_candidate_falls_through_to_search(recording_payload: dict) -> None:
    recordings = DummyRecordings(recording_payload, set())
    service = MatchService(recordings)  # type: ignore[arg-type]

    container = await service.match(MatchRequest(title="Wicked {e-5}"))

    assert container.size == 0
    assert recordings.fetched == [5]
    assert recordings.searched == ["Wicked {e-5}"]


@pytest.mark.anyio("asyncio")
async def test_nfo_fallback_only_when_enabled(
    recording_payload: dict, tmp_path: Path
) -> None:
    (tmp_path / "Cats.nfo").write_text("<movie><title>Cats</title></movie>")
    request = MatchRequest(title="Cats", filename="Cats.mkv")

    disabled = MatchService(
        DummyRecordings(recording_payload, set()), NfoParser(tmp_path)  # type: ignore[arg-type]
    )
    assert (await disabled.match(request)).size == 0

    enabled = MatchService(
        DummyRecordings(recording_payload, set()),  # type: ignore[arg-type]
        NfoParser(tmp_path),
        nfo_fallback=True,
    )
    container = await enabled.match(request)
    assert container.size == 1
    assert container.first.title == "Cats"
    assert container.first.rating_key.startswith("nfo-file-")
