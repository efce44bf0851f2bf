"""Base parser interface for all supported document formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

from bookscroll.chunking.chapters import TableOfContents
from bookscroll.chunking.nodes import Node
from bookscroll.errors import UnsupportedFormatError


@dataclass
class LogicalUnit:
    """One sub-document (e.g. a spine item). ``load`` parses it on demand."""

    href: str
    load: Callable[[], Node]


@dataclass
class LoadedDocument:
    title: str
    creator: str
    format: str
    units: list[LogicalUnit] = field(default_factory=list)
    toc: TableOfContents = field(default_factory=TableOfContents)
    cover_locators: list[str] = field(default_factory=list)
    # Archive lookup: path -> (bytes, media type), or None when absent
    read_resource: Callable[[str], Optional[tuple[bytes, str]]] = lambda path: None
    initial_chapter: str = "Start"


class BaseParser(ABC):
    """Abstract base for format-specific loaders."""

    SUPPORTED_EXTENSIONS: tuple[str, ...] = ()

    @abstractmethod
    def load(self, file_path: Path) -> LoadedDocument:
        """Open a file and describe its logical units.

        Raises ``DocumentLoadError`` when the file cannot be opened at all.
        """

    @classmethod
    def can_handle(cls, file_path: Path) -> bool:
        return file_path.suffix.lower() in cls.SUPPORTED_EXTENSIONS


def get_parser(file_path: Path) -> BaseParser:
    """Return the appropriate parser for a file."""
    from bookscroll.parsers.docx_parser import DocxParser
    from bookscroll.parsers.epub_parser import EpubParser

    parsers: list[type[BaseParser]] = [EpubParser, DocxParser]
    for parser_cls in parsers:
        if parser_cls.can_handle(file_path):
            return parser_cls()

    supported = []
    for p in parsers:
        supported.extend(p.SUPPORTED_EXTENSIONS)
    raise UnsupportedFormatError(
        f"Unsupported format: {file_path.suffix or file_path.name}. "
        f"Supported: {', '.join(supported)}"
    )
