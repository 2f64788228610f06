"""Client for the StageMedia image lookup API."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable

import httpx

from ..config import Settings

logger = logging.getLogger(__name__)

IMAGE_BATCH_SIZE = 50


@dataclass(slots=True)
class PerformerImage:
    id: int
    url: str


@dataclass(slots=True)
class ImageBundle:
    """Performer photos and posters gathered across lookup batches."""

    performers: list[PerformerImage] = field(default_factory=list)
    posters: list[str] | None = None

    def performer_urls(self) -> dict[int, str]:
        """Map performer id to photo URL; later entries win."""

        return {performer.id: performer.url for performer in self.performers}

    def add_posters(self, posters: Iterable[str]) -> None:
        """Append posters not seen before, keeping first-appearance order."""

        if self.posters is None:
            self.posters = []
        for poster in posters:
            if poster not in self.posters:
                self.posters.append(poster)


class StageMediaClient:
    """Wrapper around ``GET /images`` with batched performer lookups."""

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient,
        *,
        batch_size: int = IMAGE_BATCH_SIZE,
    ) -> None:
        self._settings = settings
        self._client = http_client
        self._batch_size = batch_size

    def _headers(self) -> dict[str, str]:
        headers = {"User-Agent": "PlexAgent/1.0"}
        if self._settings.stagemedia_api_key:
            headers["Authorization"] = f"Bearer {self._settings.stagemedia_api_key}"
        return headers

    async def get_images(self, show_id: int, performer_ids: Iterable[int]) -> ImageBundle:
        """Return posters for ``show_id`` and photos for the given performers.

        Ids are de-duplicated and requested in batches, one request at a time.
        A failed batch is logged and skipped; the others still contribute.
        """

        unique_ids = list(dict.fromkeys(performer_ids))
        batches = [
            unique_ids[start : start + self._batch_size]
            for start in range(0, len(unique_ids), self._batch_size)
        ]
        bundle = ImageBundle()
        for batch in batches:
            try:
                payload = await self._fetch_batch(show_id, batch)
            except (httpx.HTTPError, ValueError) as exc:
                logger.warning(
                    "StageMedia lookup failed for show %s (%s actors): %s",
                    show_id,
                    len(batch),
                    exc,
                )
                continue
            self._merge(bundle, payload)
        return bundle

    async def _fetch_batch(self, show_id: int, batch: list[int]) -> dict[str, Any]:
        logger.info(
            "Fetching StageMedia images for show %s and %s actors", show_id, len(batch)
        )
        response = await self._client.get(
            "/images",
            headers=self._headers(),
            params={
                "show_id": show_id,
                "actor_ids": ",".join(str(performer_id) for performer_id in batch),
            },
        )
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError("Unexpected StageMedia response structure")
        return data

    @staticmethod
    def _merge(bundle: ImageBundle, payload: dict[str, Any]) -> None:
        for entry in payload.get("performers") or []:
            if not isinstance(entry, dict):
                continue
            try:
                performer_id = int(entry["id"])
            except (KeyError, TypeError, ValueError):
                continue
            url = entry.get("url")
            if isinstance(url, str) and url:
                bundle.performers.append(PerformerImage(id=performer_id, url=url))

        posters = payload.get("posters")
        if isinstance(posters, list):
            bundle.add_posters(poster for poster in posters if isinstance(poster, str))
