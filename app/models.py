"""Pydantic models describing Plex metadata provider payloads."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ImageType = Literal[
    "background", "backgroundSquare", "clearLogo", "coverPoster", "snapshot"
]


class Image(BaseModel):
    """Artwork asset attached to an item."""

    model_config = ConfigDict(frozen=True)

    type: ImageType
    url: str
    alt: str | None = None


class Tag(BaseModel):
    """Single-value tag used for genres, studios and countries."""

    model_config = ConfigDict(frozen=True)

    tag: str


class Person(BaseModel):
    """Cast or crew entry (``Role`` / ``Director``)."""

    model_config = ConfigDict(frozen=True)

    tag: str
    role: str | None = None
    thumb: str | None = None
    order: int | None = None


class Subtitle(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    language: str
    format: str
    forced: bool | None = None


class GuidRef(BaseModel):
    """External identifier such as ``encora://15004``."""

    model_config = ConfigDict(frozen=True)

    id: str


class MovieMetadata(BaseModel):
    """A movie item in the shape Plex expects.

    Optional lists are either absent or non-empty; assigning an empty list
    stores ``None`` so both serialise the same way.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    rating_key: str = Field(alias="ratingKey")
    key: str
    guid: str
    type: Literal["movie"] = "movie"
    title: str
    originally_available_at: str = Field(default="", alias="originallyAvailableAt")
    thumb: str | None = None
    art: str | None = None
    content_rating: str | None = Field(default=None, alias="contentRating")
    original_title: str | None = Field(default=None, alias="originalTitle")
    title_sort: str | None = Field(default=None, alias="titleSort")
    edition_title: str | None = Field(default=None, alias="editionTitle")
    year: int | None = None
    summary: str | None = None
    studio: str | None = None

    images: list[Image] | None = Field(default=None, alias="Image")
    genres: list[Tag] | None = Field(default=None, alias="Genre")
    guids: list[GuidRef] | None = Field(default=None, alias="Guid")
    roles: list[Person] | None = Field(default=None, alias="Role")
    directors: list[Person] | None = Field(default=None, alias="Director")
    studios: list[Tag] | None = Field(default=None, alias="Studio")
    countries: list[Tag] | None = Field(default=None, alias="Country")
    subtitles: list[Subtitle] | None = Field(default=None, alias="Subtitle")

    @field_validator(
        "images",
        "genres",
        "guids",
        "roles",
        "directors",
        "studios",
        "countries",
        "subtitles",
    )
    @classmethod
    def _collapse_empty_lists(cls, value: list[Any] | None) -> list[Any] | None:
        return value or None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class MediaContainer(BaseModel):
    """Envelope wrapping zero or more metadata items."""

    model_config = ConfigDict(populate_by_name=True)

    offset: int = 0
    total_size: int = Field(default=0, alias="totalSize")
    identifier: str
    size: int = 0
    metadata: list[MovieMetadata] = Field(default_factory=list, alias="Metadata")

    @classmethod
    def of(cls, identifier: str, items: list[MovieMetadata]) -> "MediaContainer":
        return cls(
            identifier=identifier,
            total_size=len(items),
            size=len(items),
            metadata=list(items),
        )

    @classmethod
    def empty(cls, identifier: str) -> "MediaContainer":
        return cls.of(identifier, [])

    @property
    def first(self) -> MovieMetadata | None:
        return self.metadata[0] if self.metadata else None

    def to_payload(self) -> dict[str, Any]:
        """Return the ``{"MediaContainer": ...}`` response body."""

        return {"MediaContainer": self.model_dump(by_alias=True, exclude_none=True)}


class ImageContainer(BaseModel):
    """Envelope for the images-only view of an item."""

    model_config = ConfigDict(populate_by_name=True)

    offset: int = 0
    total_size: int = Field(default=0, alias="totalSize")
    identifier: str
    size: int = 0
    images: list[Image] = Field(default_factory=list, alias="Image")

    @classmethod
    def of(cls, identifier: str, images: list[Image]) -> "ImageContainer":
        return cls(
            identifier=identifier,
            total_size=len(images),
            size=len(images),
            images=list(images),
        )

    def to_payload(self) -> dict[str, Any]:
        return {"MediaContainer": self.model_dump(by_alias=True, exclude_none=True)}


class MatchRequest(BaseModel):
    """Hints Plex sends when asking the provider to match a library item.

    Plex includes TV-oriented keys (``parentTitle``, ``index`` ...) that a
    movie provider has no use for; they are ignored.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: int | None = None
    title: str | None = None
    filename: str | None = None
    guid: str | None = None
    year: int | None = None
    manual: bool = False
    include_adult: bool = Field(default=False, alias="includeAdult")


class MediaProviderScheme(BaseModel):
    scheme: str


class MediaProviderType(BaseModel):
    """A media type (1 = movie) with its supported GUID schemes."""

    type: int
    Scheme: list[MediaProviderScheme] = Field(default_factory=list)


class MediaProviderFeature(BaseModel):
    type: str
    key: str


class MediaProvider(BaseModel):
    """Root capability document returned from the provider root path."""

    identifier: str
    title: str
    version: str
    Types: list[MediaProviderType] = Field(default_factory=list)
    Feature: list[MediaProviderFeature] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {"MediaProvider": self.model_dump()}
