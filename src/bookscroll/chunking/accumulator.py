"""In-progress text buffer and chunk construction."""

from __future__ import annotations

import itertools
from typing import Optional

from bookscroll.library.models import Chunk, ChunkKind

SEPARATOR = "\n\n"


class ChunkFactory:
    """Builds chunks for one book, numbering them in emission order."""

    def __init__(self, book_title: str, creator: str) -> None:
        self.book_title = book_title
        self.creator = creator
        self._counter = itertools.count()

    def text(self, content: str, chapter: str) -> Chunk:
        return self._make("chunk", ChunkKind.TEXT, content, chapter)

    def header(self, content: str) -> Chunk:
        # A header starts its own chapter
        return self._make("head", ChunkKind.HEADER, content, content)

    def _make(self, prefix: str, kind: ChunkKind, content: str, chapter: str) -> Chunk:
        return Chunk(
            id=f"{prefix}-{next(self._counter)}",
            kind=kind,
            content=content,
            book_title=self.book_title,
            creator=self.creator,
            chapter=chapter,
        )


class ChunkAccumulator:
    """Text buffer joined with blank lines, emitted as a single Text chunk."""

    def __init__(self) -> None:
        self._buffer = ""

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def text(self) -> str:
        return self._buffer

    def added_length(self, text: str) -> int:
        """How much ``append(text)`` would grow the buffer by."""
        return len(text) + (len(SEPARATOR) if self._buffer else 0)

    def append(self, text: str) -> None:
        if self._buffer:
            self._buffer += SEPARATOR
        self._buffer += text

    def flush(self, chapter: str, factory: ChunkFactory) -> Optional[Chunk]:
        content = self._buffer.strip()
        if not content:
            return None
        self._buffer = ""
        return factory.text(content, chapter)
