"""Data models for reading chunks and the book shelf."""

from __future__ import annotations

import enum
import time
import uuid
from dataclasses import asdict, dataclass, field
from typing import Any, Optional


class ChunkKind(str, enum.Enum):
    TEXT = "text"
    HEADER = "header"


@dataclass
class Chunk:
    """One independently renderable unit of reading content."""

    id: str  # unique within a book, ordered by emission
    kind: ChunkKind
    content: str
    book_title: str
    creator: str
    chapter: str
    timestamp: float = field(default_factory=time.time)
    cover_image: Optional[str] = None  # data URI, first chunk only

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        if self.cover_image is None:
            del data["cover_image"]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Chunk:
        return cls(
            id=data["id"],
            kind=ChunkKind(data["kind"]),
            content=data["content"],
            book_title=data.get("book_title", ""),
            creator=data.get("creator", ""),
            chapter=data.get("chapter", ""),
            timestamp=data.get("timestamp", 0.0),
            cover_image=data.get("cover_image"),
        )


@dataclass
class ParsedBook:
    """Result of one ingestion run, before it is put on the shelf."""

    title: str
    creator: str
    source_format: str = ""
    chunks: list[Chunk] = field(default_factory=list)
    cover_image: Optional[str] = None
    failed_units: list[str] = field(default_factory=list)


@dataclass
class BookRecord:
    """Shelf entry. Independent of the (large) chunk payload."""

    id: str
    title: str
    creator: str = "Unknown Author"
    total_chunks: int = 0
    last_read_index: int = 0
    bookmarks: list[str] = field(default_factory=list)  # chunk ids, no duplicates
    order: int = 0
    added_at: float = field(default_factory=time.time)

    @staticmethod
    def make_id() -> str:
        return str(uuid.uuid4())

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BookRecord:
        return cls(
            id=data["id"],
            title=data["title"],
            creator=data.get("creator", "Unknown Author"),
            total_chunks=data.get("total_chunks", 0),
            last_read_index=data.get("last_read_index", 0),
            bookmarks=list(dict.fromkeys(data.get("bookmarks") or [])),
            order=data.get("order", 0),
            added_at=data.get("added_at", 0.0),
        )
