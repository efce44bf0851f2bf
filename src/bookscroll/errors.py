"""Exception types raised by bookscroll."""

from __future__ import annotations


class BookscrollError(Exception):
    """Base class for all bookscroll errors."""


class ConfigurationError(BookscrollError, ValueError):
    """Invalid configuration value (bad number, inconsistent limits)."""


class UnsupportedFormatError(BookscrollError, ValueError):
    """The file type is not handled by any parser."""


class DocumentLoadError(BookscrollError):
    """The whole document could not be opened. Fatal for that ingestion."""


class UnitLoadError(BookscrollError):
    """One logical unit failed to load. Ingestion skips it and continues."""

    def __init__(self, href: str, message: str = "") -> None:
        super().__init__(f"{href}: {message}" if message else href)
        self.href = href


class CoverResolutionError(BookscrollError):
    """A cover lookup, fetch or conversion step failed."""


class BookNotFoundError(BookscrollError, LookupError):
    """No shelf entry exists for the requested book id."""

    def __init__(self, book_id: str) -> None:
        super().__init__(f"Book not found: {book_id}")
        self.book_id = book_id


class PersistenceError(BookscrollError):
    """The backing store rejected a read or write."""
