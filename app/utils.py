"""Utility helpers for normalising upstream text."""

from __future__ import annotations

import re


HTML_TAG_RE = re.compile(r"<[^>]*>?")
SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")

# English language names as Encora reports them, mapped to ISO 639-2/B.
LANGUAGE_CODES: dict[str, str] = {
    "English": "eng",
    "French": "fre",
    "Spanish": "spa",
    "Dutch": "dut",
    "German": "ger",
    "Portuguese": "por",
    "Japanese": "jpn",
    "Russian": "rus",
    "Czech": "cze",
    "Korean": "kor",
    "Hungarian": "hun",
    "Swedish": "swe",
    "Polish": "pol",
    "Danish": "dan",
    "Norwegian": "nor",
    "Italian": "ita",
    "Finnish": "fin",
    "Hebrew": "heb",
    "Cantonese": "chi",
    "Catalan": "cat",
    "Yiddish": "yid",
    "American Sign Language": "sgn",
    "British Sign Language": "sgn",
    "Switzerland/German": "ger",
    "Filipino": "fil",
    "Croatian": "hrv",
    "Serbian": "srp",
    "Estonian": "est",
    "Latvian": "lav",
    "Lithuanian": "lit",
    "Romanian": "rum",
    "Portuguese (BR)": "por",
    "Greek": "gre",
    "Spanish (Latin)": "spa",
    "Mandarin": "chi",
    "Turkish": "tur",
    "Slovak": "slo",
    "Bulgarian": "bul",
    "Chinese": "chi",
    "Scots": "sco",
    "Malay": "may",
    "Kazakh": "kaz",
    "Georgian": "geo",
    "Arabic (Palestinian)": "ara",
    "Arabic": "ara",
    "Swahili": "swa",
    "Albanian": "alb",
    "Macedonian": "mac",
    "Ukrainian": "ukr",
    "Cornish": "cor",
    "Latin": "lat",
    "Armenian": "arm",
}


def map_language(language: str) -> str:
    """Return the ISO 639-2/B code for a language name, or the name itself."""

    return LANGUAGE_CODES.get(language, language)


def strip_html(value: str | None) -> str | None:
    """Remove ``<...>`` spans and surrounding whitespace.

    Entities are left untouched. Returns ``None`` when nothing remains.
    """

    if not value:
        return None
    cleaned = HTML_TAG_RE.sub("", value).strip()
    return cleaned or None


def first_non_empty(*values: str | None) -> str | None:
    for value in values:
        if value:
            return value
    return None


def slugify(value: str) -> str:
    """Return a lower-case, hyphen separated slug."""

    value = SLUG_SEPARATOR_RE.sub("-", value.lower())
    return value.strip("-")


def parse_int(value: str) -> int | None:
    """Convert ``value`` to ``int``, or ``None`` when it is not a usable integer.

    Digit runs past the interpreter's conversion limit count as unusable.
    """

    try:
        return int(value)
    except ValueError:
        return None
