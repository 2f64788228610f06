"""Static description of the Encora movie provider."""

from __future__ import annotations

from .guid import LIBRARY_MATCHES_PATH, LIBRARY_METADATA_PATH
from .models import (
    MediaProvider,
    MediaProviderFeature,
    MediaProviderScheme,
    MediaProviderType,
)

MOVIE_PROVIDER_IDENTIFIER = "tv.plex.agents.custom.encora"
MOVIE_PROVIDER_TITLE = "Encora Movie Provider"
MOVIE_PROVIDER_VERSION = "1.0.0"
MOVIE_PROVIDER_BASE_PATH = "/movie"

METADATA_TYPE_MOVIE = 1


def build_movie_provider() -> MediaProvider:
    """Return the capability document Plex reads when the agent is added."""

    return MediaProvider(
        identifier=MOVIE_PROVIDER_IDENTIFIER,
        title=MOVIE_PROVIDER_TITLE,
        version=MOVIE_PROVIDER_VERSION,
        Types=[
            MediaProviderType(
                type=METADATA_TYPE_MOVIE,
                Scheme=[MediaProviderScheme(scheme=MOVIE_PROVIDER_IDENTIFIER)],
            )
        ],
        Feature=[
            MediaProviderFeature(type="metadata", key=LIBRARY_METADATA_PATH),
            MediaProviderFeature(type="match", key=LIBRARY_MATCHES_PATH),
        ],
    )
