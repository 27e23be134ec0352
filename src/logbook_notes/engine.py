"""Core logbook engine - append-only daily files and filtered reads."""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, Iterator, Optional

from .dates import DateFilter
from .errors import LogFileError, ValidationError
from .models import HEADER_PATTERN, Entry, LogEntry, Timestamp, normalize_tags, validate_offset

logger = logging.getLogger(__name__)

LOGFILE_SUFFIX = ".txt"
LOGFILE_PATTERN = re.compile(r"^(\d{4}-\d{2}-\d{2})\.txt$")


def path_for(timestamp: Timestamp, logbook_dir: Path) -> Path:
    """Path of the daily log file that owns ``timestamp``'s local date."""
    return logbook_dir / f"{timestamp.filename_date}{LOGFILE_SUFFIX}"


def validate_write_options(
    message: Optional[str],
    tags: Optional[Iterable[str]] = None,
    offset_hours: Optional[float] = None,
) -> tuple[str, tuple[str, ...], Optional[float]]:
    """Check everything a write needs before any file is touched.

    Returns:
        Tuple of (message, normalized tags, offset).

    Raises:
        ValidationError: If the message is blank, a tag is invalid or the
            offset is not a quarter-hour increment.
    """
    if message is None or not message.strip():
        raise ValidationError("A message is required.")
    return message, normalize_tags(tags), validate_offset(offset_hours)


def split_entries(content: str) -> tuple[str, list[str]]:
    """Split daily file text on entry header lines.

    Returns:
        Tuple of (text before the first header, entry blocks). Each block
        keeps its own lines; the blank separator line written after every
        entry is removed.
    """
    preamble: list[str] = []
    blocks: list[list[str]] = []

    # Only "\n" ends a line; other line-break characters are content
    pieces = content.split("\n")
    file_lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        file_lines.append(pieces[-1])

    for line in file_lines:
        if HEADER_PATTERN.match(line.rstrip("\r\n")):
            blocks.append([line])
        elif blocks:
            blocks[-1].append(line)
        else:
            preamble.append(line)

    entries = []
    for lines in blocks:
        block = "".join(lines)
        if block.endswith("\n\n"):
            block = block[:-1]
        entries.append(block)

    return "".join(preamble), entries


class LogbookEngine:
    """Writes entries into, and reads them back out of, a logbook directory."""

    def __init__(self, logbook_dir: Path):
        self.logbook_dir = Path(logbook_dir)

    def path_for(self, timestamp: Timestamp) -> Path:
        return path_for(timestamp, self.logbook_dir)

    def day_path(self, day: date) -> Path:
        return self.logbook_dir / f"{day.isoformat()}{LOGFILE_SUFFIX}"

    def write(
        self,
        message: str,
        tags: Optional[Iterable[str]] = None,
        offset_hours: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> LogEntry:
        """Append one entry to today's log file.

        Args:
            message: Entry content; may span several lines
            tags: Tags to show above the content, in order
            offset_hours: Fixed UTC offset override in 0.25 hour steps.
                Defaults to the machine's current offset.
            now: UTC instant to stamp the entry with (default: now)

        Returns:
            The written entry.

        Raises:
            ValidationError: If the message, a tag or the offset is rejected.
                Nothing is written in that case.
            OSError: If the log file cannot be opened or written, including
                when the logbook directory does not exist.
        """
        message, entry_tags, offset = validate_write_options(message, tags, offset_hours)

        timestamp = Timestamp.now(now, offset)
        logfile_path = self.path_for(timestamp)
        entry = Entry(timestamp=timestamp, tags=entry_tags, content=message)

        # No lock: small appends from a single user are treated as atomic
        with open(logfile_path, "a", encoding="utf-8", newline="") as f:
            f.write(entry.render() + "\n")
            f.flush()

        logger.debug("Appended entry %s to %s", entry.header(), logfile_path)
        return LogEntry.from_entry(entry)

    def _log_files(self) -> list[tuple[date, Path]]:
        """All daily log files in the logbook directory, oldest first."""
        files = []
        for path in self.logbook_dir.iterdir():
            match = LOGFILE_PATTERN.match(path.name)
            if match is None or not path.is_file():
                logger.debug("Skipping non-log file %s", path)
                continue
            try:
                day = date.fromisoformat(match.group(1))
            except ValueError:
                logger.debug("Skipping log file with impossible date %s", path)
                continue
            files.append((day, path))

        files.sort()
        return files

    def days(self, date_filter: Optional[DateFilter] = None) -> list[date]:
        """Dates that have a log file and pass ``date_filter``."""
        date_filter = date_filter or DateFilter()
        return [day for day, _ in self._log_files() if date_filter.matches(day)]

    def read(self, date_filter: Optional[DateFilter] = None) -> Iterator[LogEntry]:
        """Entries whose day passes ``date_filter``, oldest first.

        The directory is listed and filtered immediately; files are opened one
        at a time as the returned iterator advances.

        Raises:
            OSError: If the logbook directory cannot be listed.
            LogFileError: While iterating, if a selected file is not valid UTF-8.
        """
        date_filter = date_filter or DateFilter()
        selected = [(day, path) for day, path in self._log_files() if date_filter.matches(day)]
        return self._iter_entries(selected)

    def _iter_entries(self, files: list[tuple[date, Path]]) -> Iterator[LogEntry]:
        for day, path in files:
            try:
                with open(path, "r", encoding="utf-8", newline="") as f:
                    content = f.read()
            except UnicodeDecodeError as e:
                raise LogFileError(f"Could not decode log file {path}: {e}") from e
            preamble, blocks = split_entries(content)
            if preamble.strip():
                logger.warning("Ignoring text before the first entry in %s", path)
            for block in blocks:
                yield LogEntry.from_block(day, block)


def write(
    logbook_dir: Path,
    message: str,
    tags: Optional[Iterable[str]] = None,
    offset_hours: Optional[float] = None,
    now: Optional[datetime] = None,
) -> LogEntry:
    """Append one entry to the logbook in ``logbook_dir``."""
    return LogbookEngine(logbook_dir).write(message, tags=tags, offset_hours=offset_hours, now=now)


def read(logbook_dir: Path, date_filter: Optional[DateFilter] = None) -> Iterator[LogEntry]:
    """Read entries from the logbook in ``logbook_dir``."""
    return LogbookEngine(logbook_dir).read(date_filter)
