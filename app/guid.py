"""Helpers for building and parsing Plex identifiers.

Plex addresses every item through a ``ratingKey`` token that must stay within
``[A-Za-z0-9_-]``. The GUID handed back to Plex wraps that token as
``{scheme}://{type}/{ratingKey}`` and the item is fetched again through
``/library/metadata/{ratingKey}``.
"""

from __future__ import annotations

import re
from typing import NamedTuple

LIBRARY_METADATA_PATH = "/library/metadata"
LIBRARY_MATCHES_PATH = "/library/metadata/matches"

TOKEN_RE = re.compile(r"[A-Za-z0-9_-]+")


class InvalidTokenError(ValueError):
    """Raised when a ratingKey token contains characters Plex rejects."""


class MalformedGuidError(ValueError):
    """Raised when a GUID is not shaped like ``scheme://type/token``."""


class ParsedGuid(NamedTuple):
    scheme: str
    metadata_type: str
    rating_key: str


def is_valid_token(value: str) -> bool:
    """Return ``True`` when ``value`` is a non-empty ``[A-Za-z0-9_-]`` token."""

    return bool(value) and TOKEN_RE.fullmatch(value) is not None


def build_guid(scheme: str, metadata_type: str, rating_key: str) -> str:
    """Return ``{scheme}://{metadata_type}/{rating_key}``."""

    if not is_valid_token(rating_key):
        raise InvalidTokenError(
            f'Invalid ratingKey: "{rating_key}". Must contain only ASCII letters, '
            "numbers, dashes, and underscores."
        )
    return f"{scheme}://{metadata_type}/{rating_key}"


def parse_guid(guid: str) -> ParsedGuid:
    """Split a GUID into scheme, type and token.

    The token is everything after the first ``/`` following ``://`` and may
    itself contain slashes.
    """

    scheme, separator, remainder = guid.partition("://")
    if not separator:
        raise MalformedGuidError(f'Invalid GUID format: "{guid}"')
    metadata_type, separator, rating_key = remainder.partition("/")
    if not separator:
        raise MalformedGuidError(f'Invalid GUID format: "{guid}"')
    return ParsedGuid(scheme, metadata_type, rating_key)


def build_resource_path(rating_key: str) -> str:
    return f"{LIBRARY_METADATA_PATH}/{rating_key}"


def build_resource_path_with_children(rating_key: str) -> str:
    return f"{LIBRARY_METADATA_PATH}/{rating_key}/children"


def build_external_ref(provider: str, identifier: str | int) -> str:
    """Return an external reference such as ``encora://15004``."""

    return f"{provider}://{identifier}"


def encode_opaque_path(path: str) -> str:
    """Encode a filesystem path as a lowercase hex token."""

    return path.encode("utf-8", "surrogatepass").hex()


def decode_opaque_path(token: str) -> str:
    """Invert :func:`encode_opaque_path`.

    Raises ``ValueError`` when the token is not valid hex or valid UTF-8.
    """

    return bytes.fromhex(token).decode("utf-8", "surrogatepass")
