"""Title templating for Encora recordings."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .config import DEFAULT_DATE_REPLACE_CHAR, DEFAULT_TITLE_FORMAT

if TYPE_CHECKING:
    from .services.encora import EncoraDate, EncoraRecording

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True, slots=True)
class DateParts:
    """Year, month and day as they should appear in a title."""

    year: str
    month: str
    day: str
    month_name: str

    @property
    def text(self) -> str:
        return f"{self.month_name} {self.day}, {self.year}"

    @property
    def iso(self) -> str:
        return f"{self.year}-{self.month}-{self.day}"

    @property
    def usa(self) -> str:
        return f"{self.month}-{self.day}-{self.year}"

    @property
    def numeric(self) -> str:
        return f"{self.day}-{self.month}-{self.year}"


@dataclass(frozen=True, slots=True)
class FormattedTitle:
    """Outcome of formatting; ``degraded`` marks the bare-show-name fallback."""

    title: str
    degraded: bool = False


def resolve_date_parts(date: "EncoraDate", replace_char: str) -> DateParts:
    """Split a recording date, masking the components Encora marks unknown."""

    year, month, day = "????", "??", "??"
    parts = date.full_date.split("-") if date.full_date else []
    if len(parts) == 3:
        year = parts[0]
        month = parts[1] if date.month_known else replace_char * 2
        day = parts[2] if date.day_known else replace_char * 2

    if date.month_known:
        month_name = _month_name(month)
    else:
        month_name = replace_char * 3
    return DateParts(year=year, month=month, day=day, month_name=month_name)


def _month_name(month: str) -> str:
    try:
        index = int(month) - 1
    except ValueError:
        return "Unknown"
    if 0 <= index < len(MONTH_NAMES):
        return MONTH_NAMES[index]
    return "Unknown"


class TitleFormatter:
    """Render recording titles from a ``{{placeholder}}`` template.

    Recognised placeholders are ``{{show}}``, ``{{tour}}``, ``{{master}}``,
    ``{{date}}``, ``{{date_iso}}``, ``{{date_usa}}`` and ``{{date_numeric}}``.
    Substitution is plain string replacement.
    """

    def __init__(
        self,
        template: str = DEFAULT_TITLE_FORMAT,
        replace_char: str = DEFAULT_DATE_REPLACE_CHAR,
    ) -> None:
        self._template = template
        self._replace_char = replace_char

    @property
    def template(self) -> str:
        return self._template

    def format(self, recording: "EncoraRecording") -> FormattedTitle:
        try:
            return FormattedTitle(self._render(recording))
        except Exception:
            logger.exception("Error formatting title for recording %s", recording.id)
            return FormattedTitle(recording.show, degraded=True)

    def _render(self, recording: "EncoraRecording") -> str:
        date = resolve_date_parts(recording.date, self._replace_char)
        replacements = (
            ("{{show}}", recording.show or ""),
            ("{{tour}}", recording.tour or ""),
            ("{{master}}", recording.master or ""),
            ("{{date}}", date.text),
            ("{{date_iso}}", date.iso),
            ("{{date_usa}}", date.usa),
            ("{{date_numeric}}", date.numeric),
        )
        title = self._template
        for placeholder, value in replacements:
            title = title.replace(placeholder, value)
        return title.strip()
