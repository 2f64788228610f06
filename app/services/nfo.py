"""Fallback metadata from local ``.nfo`` sidecar files.

NFO files in the wild are frequently malformed, so they are read with a
tolerant tag scanner rather than an XML parser. The grammar is fixed:

* singleton tags (first occurrence wins) are read from the document with
  every ``<actor>`` block removed, so an actor's ``<thumb>`` can never be
  mistaken for the movie's;
* repeatable tags are collected in document order, duplicates kept;
* each ``<actor>`` block is scanned on its own for ``name``/``role``/``thumb``.

Opening tags may carry attributes and tag names are matched
case-insensitively. A tag whose content is blank counts as missing.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from ..guid import (
    build_external_ref,
    build_guid,
    build_resource_path,
    encode_opaque_path,
)
from ..models import GuidRef, Image, MovieMetadata, Person, Tag
from ..provider import MOVIE_PROVIDER_IDENTIFIER
from ..utils import parse_int, slugify

logger = logging.getLogger(__name__)

NFO_EXTENSION = ".nfo"
MOVIE_NFO_FILENAME = f"movie{NFO_EXTENSION}"

SINGLETON_TAGS = (
    "title",
    "originaltitle",
    "sorttitle",
    "premiered",
    "releasedate",
    "director",
    "year",
    "studio",
    "plot",
    "thumb",
)
REPEATABLE_TAGS = ("genre", "certification")
ACTOR_TAG = "actor"
ACTOR_TAGS = ("name", "role", "thumb")

LEADING_DIGITS_RE = re.compile(r"\s*(\d+)")


@lru_cache(maxsize=None)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(
        rf"<{tag}(?:\s[^>]*?)?(?<!/)>(.*?)</{tag}\s*>",
        re.IGNORECASE | re.DOTALL,
    )


def _first(tag: str, content: str) -> str | None:
    match = _tag_pattern(tag).search(content)
    if match is None:
        return None
    return match.group(1).strip() or None


def _all(tag: str, content: str) -> list[str]:
    values = (match.group(1).strip() for match in _tag_pattern(tag).finditer(content))
    return [value for value in values if value]


def _parse_year(value: str | None) -> int | None:
    if not value:
        return None
    match = LEADING_DIGITS_RE.match(value)
    return parse_int(match.group(1)) if match else None


@dataclass(slots=True)
class NfoActor:
    name: str
    role: str = ""
    thumb: str | None = None


@dataclass(slots=True)
class NfoDocument:
    """Fields read from a movie NFO file."""

    title: str | None = None
    original_title: str | None = None
    sort_title: str | None = None
    premiered: str | None = None
    release_date: str | None = None
    director: str | None = None
    genres: list[str] = field(default_factory=list)
    year: int | None = None
    studio: str | None = None
    plot: str | None = None
    certifications: list[str] = field(default_factory=list)
    actors: list[NfoActor] = field(default_factory=list)
    thumb: str | None = None


@dataclass(slots=True)
class NfoReadResult:
    """Outcome of reading an NFO file: a document or the reason there is none."""

    path: Path
    document: NfoDocument | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.document is not None


class NfoParser:
    """Locate, read and map NFO files below a library directory."""

    def __init__(self, library_path: str | Path = ".") -> None:
        self._library_path = Path(library_path)

    @property
    def library_path(self) -> Path:
        return self._library_path

    def locate(self, video_file_path: str) -> Path | None:
        """Find the NFO describing ``video_file_path``.

        Tries ``<video name>.nfo``, then ``movie.nfo``, then the first ``.nfo``
        the directory listing yields.
        """

        video_path = Path(video_file_path)
        if not video_path.is_absolute():
            video_path = self._library_path / video_path

        if video_path.name:
            sidecar = video_path.with_suffix(NFO_EXTENSION)
            if sidecar.is_file():
                logger.debug("Found matching NFO: %s", sidecar)
                return sidecar

        directory = video_path.parent
        movie_nfo = directory / MOVIE_NFO_FILENAME
        if movie_nfo.is_file():
            logger.debug("Found movie.nfo: %s", movie_nfo)
            return movie_nfo

        try:
            for entry in directory.iterdir():
                if entry.name.lower().endswith(NFO_EXTENSION) and entry.is_file():
                    logger.debug("Found NFO file: %s", entry)
                    return entry
        except OSError as exc:
            logger.warning("Error reading directory %s: %s", directory, exc)
        return None

    def parse(self, nfo_path: str | Path) -> NfoReadResult:
        """Read ``nfo_path`` as UTF-8 and parse it."""

        path = Path(nfo_path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Error reading NFO file %s: %s", path, exc)
            return NfoReadResult(path=path, error=str(exc))
        return NfoReadResult(path=path, document=self.parse_content(content))

    @staticmethod
    def parse_content(content: str) -> NfoDocument:
        outer = _tag_pattern(ACTOR_TAG).sub("", content)
        singles = {tag: _first(tag, outer) for tag in SINGLETON_TAGS}

        actors: list[NfoActor] = []
        for match in _tag_pattern(ACTOR_TAG).finditer(content):
            block = match.group(1)
            name, role, thumb = (_first(tag, block) for tag in ACTOR_TAGS)
            if name:
                actors.append(NfoActor(name=name, role=role or "", thumb=thumb))

        return NfoDocument(
            title=singles["title"],
            original_title=singles["originaltitle"],
            sort_title=singles["sorttitle"],
            premiered=singles["premiered"],
            release_date=singles["releasedate"],
            director=singles["director"],
            genres=_all("genre", outer),
            year=_parse_year(singles["year"]),
            studio=singles["studio"],
            plot=singles["plot"],
            certifications=_all("certification", outer),
            actors=actors,
            thumb=singles["thumb"],
        )

    @staticmethod
    def to_metadata(document: NfoDocument, source_file: str | None = None) -> MovieMetadata:
        """Map an NFO document to Plex metadata.

        With ``source_file`` the ratingKey embeds the hex-encoded path so the
        item can be looked up again later; otherwise it is derived from the
        title and year.
        """

        title_slug = slugify(document.title or "unknown")
        if source_file:
            rating_key = f"nfo-file-{encode_opaque_path(source_file)}"
        else:
            rating_key = f"nfo-{title_slug}-{document.year or 'unknown'}"

        images = (
            [Image(type="coverPoster", url=document.thumb, alt=document.title)]
            if document.thumb
            else None
        )

        return MovieMetadata(
            rating_key=rating_key,
            key=build_resource_path(rating_key),
            guid=build_guid(MOVIE_PROVIDER_IDENTIFIER, "movie", rating_key),
            title=document.title or "Unknown",
            original_title=document.original_title,
            title_sort=document.sort_title,
            content_rating=document.certifications[0] if document.certifications else None,
            originally_available_at=document.premiered or document.release_date or "",
            year=document.year,
            summary=document.plot,
            studio=document.studio,
            thumb=document.thumb,
            images=images,
            genres=[Tag(tag=genre) for genre in document.genres],
            roles=[
                Person(tag=actor.name, role=actor.role, thumb=actor.thumb, order=index)
                for index, actor in enumerate(document.actors)
            ],
            directors=[Person(tag=document.director)] if document.director else None,
            studios=[Tag(tag=document.studio)] if document.studio else None,
            guids=[GuidRef(id=build_external_ref("nfo", title_slug))],
        )

    def parse_for_file(self, filename: str) -> MovieMetadata | None:
        """Locate and map the NFO for a video file, or ``None`` if unavailable."""

        nfo_path = self.locate(filename)
        if nfo_path is None:
            logger.info("No NFO file found for %s", filename)
            return None
        document = self.parse(nfo_path).document
        if document is None:
            return None
        logger.info("Using NFO metadata from %s", nfo_path)
        return self.to_metadata(document, filename)
