"""Partial-precision date filters.

Users filter by ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``. A partial date is
parsed into a (year, month, day) triple and then resolved into a concrete
bound whose missing fields depend on the comparison:

- ``before``: missing month/day default low (January, the 1st)
- ``after``: missing month/day default high (December, the month's last day)
- ``on``: covers the whole period the partial date names

Comparisons are strict, so ``before 2021`` and ``after 2021`` both exclude
every day of 2021.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

from .errors import ConflictingFilters, DateOutOfRange, MalformedDate, UnrecognizedDateFormat

logger = logging.getLogger(__name__)

# Checked in this order; month and year are prefix patterns
DAY_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
MONTH_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{2}")
YEAR_PATTERN = re.compile(r"^[0-9]{4}")
FIELD_PATTERN = re.compile(r"^[0-9]+$")


class Intent(Enum):
    """What a resolved bound will be compared against."""
    BEFORE = "before"
    AFTER = "after"
    ON = "on"


@dataclass(frozen=True)
class PartialDate:
    """A date with optional month and day precision."""
    year: int
    month: Optional[int] = None
    day: Optional[int] = None

    def __str__(self) -> str:
        parts = [f"{self.year:04d}"]
        if self.month is not None:
            parts.append(f"{self.month:02d}")
        if self.day is not None:
            parts.append(f"{self.day:02d}")
        return "-".join(parts)


def parse_partial_date(text: str) -> PartialDate:
    """Parse ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``.

    Raises:
        UnrecognizedDateFormat: If the text matches none of the shapes.
        MalformedDate: If a field is not a base-10 number.
    """
    value = text.strip()

    if not (DAY_PATTERN.match(value) or MONTH_PATTERN.match(value) or YEAR_PATTERN.match(value)):
        raise UnrecognizedDateFormat(
            f"Could not match {text!r} to YYYY, YYYY-MM or YYYY-MM-DD"
        )

    fields = value.split("-")
    if len(fields) > 3:
        raise UnrecognizedDateFormat(f"Date {text!r} has more fields than YYYY-MM-DD")

    for part in fields:
        if not FIELD_PATTERN.match(part):
            raise MalformedDate(f"Date {text!r} has a non-numeric field: {part!r}")

    numbers = [int(part, 10) for part in fields]
    return PartialDate(*numbers)


def _last_day(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def resolve_bound(ymd: PartialDate, intent: Intent) -> date:
    """Expand a partial date into a concrete bound for ``intent``.

    Raises:
        DateOutOfRange: If the defaulted year/month/day is not a real date.
    """
    if intent is Intent.AFTER:
        month = 12 if ymd.month is None else ymd.month
        if ymd.day is not None:
            day = ymd.day
        elif 1 <= month <= 12 and date.min.year <= ymd.year <= date.max.year:
            day = _last_day(ymd.year, month)
        else:
            # Let the date() check below report the bad month or year
            day = 31
    else:
        month = 1 if ymd.month is None else ymd.month
        day = 1 if ymd.day is None else ymd.day

    try:
        return date(ymd.year, month, day)
    except ValueError as e:
        raise DateOutOfRange(f"{ymd} is not a valid date: {e}") from None


def resolve_range(ymd: PartialDate) -> tuple[date, date]:
    """First and last day of the period named by a partial date."""
    return resolve_bound(ymd, Intent.BEFORE), resolve_bound(ymd, Intent.AFTER)


@dataclass(frozen=True)
class DateFilter:
    """Day predicate built from before/after/on options.

    ``before`` and ``after`` are exclusive bounds; ``on`` is an inclusive
    range. An empty filter matches every day.
    """
    before: Optional[date] = None
    after: Optional[date] = None
    on: Optional[tuple[date, date]] = None

    @classmethod
    def from_strings(
        cls,
        before: Optional[str] = None,
        after: Optional[str] = None,
        on: Optional[str] = None,
    ) -> DateFilter:
        """Build a filter from user-supplied partial date strings.

        Raises:
            ConflictingFilters: If ``on`` is combined with ``before``/``after``.
                Checked before any string is parsed.
            ParseError: If a date string is invalid.
        """
        if on is not None and (before is not None or after is not None):
            raise ConflictingFilters("--on cannot be combined with --before or --after")

        if on is not None:
            return cls(on=resolve_range(parse_partial_date(on)))

        before_bound = resolve_bound(parse_partial_date(before), Intent.BEFORE) if before is not None else None
        after_bound = resolve_bound(parse_partial_date(after), Intent.AFTER) if after is not None else None

        date_filter = cls(before=before_bound, after=after_bound)
        if date_filter.is_empty_range():
            logger.warning(
                "No day is both after %s and before %s; nothing will match",
                after_bound, before_bound,
            )
        return date_filter

    def is_empty_range(self) -> bool:
        if self.before is None or self.after is None:
            return False
        return (self.before - self.after).days <= 1

    def matches(self, day: date) -> bool:
        if self.on is not None:
            start, end = self.on
            return start <= day <= end
        if self.before is not None and not day < self.before:
            return False
        if self.after is not None and not day > self.after:
            return False
        return True
