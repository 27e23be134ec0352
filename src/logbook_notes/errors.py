"""Exception hierarchy for logbook operations.

File access failures are not wrapped: they surface as the built-in
``OSError`` raised by the failing call. Undecodable log files are the
exception and raise ``LogFileError``.
"""

from __future__ import annotations


class LogbookError(Exception):
    """Base exception for logbook operations."""
    pass


class ValidationError(LogbookError):
    """Raised when user-supplied options are rejected before any file I/O."""
    pass


class InvalidOffset(ValidationError):
    """Raised when a UTC offset is not a quarter-hour increment."""
    pass


class ConflictingFilters(ValidationError):
    """Raised when ``on`` is combined with ``before`` or ``after``."""
    pass


class ParseError(LogbookError):
    """Raised when a date filter string cannot be turned into a date."""
    pass


class MalformedDate(ParseError):
    """Raised when a date field is not a base-10 number."""
    pass


class UnrecognizedDateFormat(ParseError):
    """Raised when a date string matches none of the accepted shapes."""
    pass


class DateOutOfRange(ParseError):
    """Raised when a resolved year/month/day is not a real calendar date."""
    pass


class LogFileError(LogbookError):
    """Raised when a daily log file exists but is not valid UTF-8."""
    pass


class ConfigError(LogbookError):
    """Raised when the configuration cannot be read or written."""
    pass
