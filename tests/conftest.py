"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


# Ensure the application package is importable when running tests without an
# editable install. This mirrors the expected runtime layout where ``app`` sits
# at the project root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO tests to run on asyncio without requiring trio."""

    return "asyncio"


@pytest.fixture
def recording_payload() -> dict:
    """Return an Encora ``/recording/{id}`` payload with every block populated."""

    return {
        "id": 12345,
        "show": "Mock Show",
        "tour": "Mock Tour",
        "date": {
            "full_date": "2025-01-01",
            "month_known": True,
            "day_known": True,
            "date_variant": None,
            "time": "20:00",
        },
        "master": "MockMaster",
        "nft": {"nft_date": None, "nft_forever": False},
        "cast": [
            {
                "performer": {
                    "id": 1,
                    "name": "Actor One",
                    "slug": "actor-one",
                    "url": "http://encora.it/actor/1",
                },
                "character": {
                    "id": 10,
                    "name": "Character One",
                    "slug": "char-one",
                    "url": "",
                    "order": 1,
                },
                "status": "Lead",
            }
        ],
        "notes": "Some notes <p>HTML</p>",
        "master_notes": None,
        "release_format": "VOB",
        "metadata": {
            "show_id": 100,
            "is_opening": False,
            "venue": "Mock Venue",
            "city": "Mock City",
            "media_type": "Video",
            "recording_type": "Pro-Shot",
            "show_description": "Description <b>HTML</b>",
            "last_updated": "2025-01-01",
        },
    }
