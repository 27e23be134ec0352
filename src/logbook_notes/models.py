"""Data models for log entries, their timestamps and tags."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Optional

from .errors import InvalidOffset, ValidationError


# Entry boundary marker: the header line written for every entry
HEADER_PATTERN = re.compile(r"^\[(\d{2}:\d{2}:\d{2} (?:AM|PM) [+-]\d{4})\]$")
TAGS_PATTERN = re.compile(r"^#[^,]+(?:, #[^,]+)*$")

MAX_OFFSET_HOURS = 24


def utc_now() -> datetime:
    """Get current UTC time with timezone info."""
    return datetime.now(timezone.utc)


def validate_offset(offset_hours: Optional[float]) -> Optional[float]:
    """Check a UTC offset override before it is used to build a Timestamp.

    Returns:
        The offset as a float, or None when no override was given.

    Raises:
        InvalidOffset: If the offset is not a finite multiple of 0.25 hours
            strictly between -24 and 24.
    """
    if offset_hours is None:
        return None

    try:
        offset = float(offset_hours)
    except (TypeError, ValueError):
        raise InvalidOffset(f"UTC offset must be a number, got {offset_hours!r}") from None

    if not math.isfinite(offset) or offset % 0.25 != 0:
        raise InvalidOffset("UTC offset must be in increments of 0.25")
    if not -MAX_OFFSET_HOURS < offset < MAX_OFFSET_HOURS:
        raise InvalidOffset(
            f"UTC offset must be between -{MAX_OFFSET_HOURS} and {MAX_OFFSET_HOURS} hours"
        )

    return offset


def normalize_tags(tags: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Clean user-supplied tags into an ordered, duplicate-free tuple.

    A leading ``#`` and surrounding whitespace are dropped, so ``#food`` and
    ``food`` name the same tag.

    Raises:
        ValidationError: If a tag is empty or contains a comma or newline.
    """
    if not tags:
        return ()

    cleaned: list[str] = []
    for raw in tags:
        tag = raw.strip().lstrip("#").strip()
        if not tag:
            raise ValidationError(f"Tags must not be empty: {raw!r}")
        if "," in tag or "\n" in tag or "\r" in tag:
            raise ValidationError(f"Tags cannot contain commas or line breaks: {raw!r}")
        if tag not in cleaned:
            cleaned.append(tag)

    return tuple(cleaned)


@dataclass(frozen=True)
class Timestamp:
    """An instant pinned to a fixed UTC offset."""
    instant: datetime

    @classmethod
    def now(
        cls,
        utc_instant: Optional[datetime] = None,
        offset_hours: Optional[float] = None,
    ) -> Timestamp:
        """Build a Timestamp for ``utc_instant`` (default: now).

        Without an override the machine's local offset at call time is used.
        The override must already have passed ``validate_offset``.
        """
        if utc_instant is None:
            utc_instant = utc_now()
        elif utc_instant.tzinfo is None:
            utc_instant = utc_instant.replace(tzinfo=timezone.utc)

        if offset_hours is None:
            # astimezone() with no zone attaches the current fixed local offset
            return cls(utc_instant.astimezone())

        tz = timezone(timedelta(seconds=int(offset_hours * 3600)))
        return cls(utc_instant.astimezone(tz))

    @property
    def date(self) -> date:
        """Calendar date at the attached offset."""
        return self.instant.date()

    @property
    def filename_date(self) -> str:
        return self.instant.strftime("%Y-%m-%d")

    @property
    def display(self) -> str:
        # %p follows the locale; the log format always uses AM/PM
        meridiem = "AM" if self.instant.hour < 12 else "PM"
        return f"{self.instant.strftime('%I:%M:%S')} {meridiem} {self.instant.strftime('%z')}"


@dataclass(frozen=True)
class Entry:
    """A single journaled note, rendered once and appended to a daily file."""
    timestamp: Timestamp
    tags: tuple[str, ...] = ()
    content: str = ""

    def header(self) -> str:
        return f"[{self.timestamp.display}]"

    def tags_line(self) -> str:
        return ", ".join(f"#{tag}" for tag in self.tags)

    def render(self) -> str:
        """Render entry as log text.

        Header line, then the tags line when there are tags, then the raw
        content, with a single trailing newline.
        """
        lines = [self.header()]
        if self.tags:
            lines.append(self.tags_line())
        lines.append(self.content)
        return "\n".join(lines) + "\n"


@dataclass(frozen=True)
class LogEntry:
    """An entry as found in (or just written to) a daily log file."""
    day: date
    timestamp: str
    content: str
    tags: tuple[str, ...] = field(default_factory=tuple)
    text: str = ""

    @classmethod
    def from_entry(cls, entry: Entry) -> LogEntry:
        return cls(
            day=entry.timestamp.date,
            timestamp=entry.timestamp.display,
            content=entry.content,
            tags=entry.tags,
            text=entry.render(),
        )

    @classmethod
    def from_block(cls, day: date, block: str) -> LogEntry:
        """Parse one rendered entry.

        ``block`` starts with a header line. A line directly after the header
        that looks like ``#a, #b`` is read as the tags line.
        """
        rendered = block[:-1] if block.endswith("\n") else block
        lines = rendered.split("\n")
        match = HEADER_PATTERN.match(lines[0].rstrip("\r"))
        if match is None:
            raise ValueError(f"Not an entry header: {lines[0]!r}")

        body = lines[1:]
        tags: tuple[str, ...] = ()
        if len(body) > 1 and TAGS_PATTERN.match(body[0]):
            tags = tuple(part[1:] for part in body[0].split(", "))
            body = body[1:]

        return cls(
            day=day,
            timestamp=match.group(1),
            content="\n".join(body),
            tags=tags,
            text=block,
        )

    def to_dict(self) -> dict:
        """Convert entry to dictionary for JSON serialization."""
        return {
            "date": self.day.isoformat(),
            "timestamp": self.timestamp,
            "tags": list(self.tags),
            "content": self.content,
        }
