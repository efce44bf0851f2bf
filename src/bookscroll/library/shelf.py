"""The shelf: ordered book records, reading progress and bookmarks."""

from __future__ import annotations

import json
import logging
import threading
import time
from typing import Optional

from bookscroll.errors import BookNotFoundError, PersistenceError

from .models import BookRecord, Chunk, ParsedBook
from .storage import Storage

log = logging.getLogger(__name__)

DIRECTIONS = ("up", "down")


def image_key(book_id: str, path: str) -> str:
    return f"{book_id}|{path}"


class Shelf:
    """Book collection backed by a ``Storage``.

    Every mutation rewrites the whole shelf list under one lock, so progress
    updates, bookmark toggles, reorders and removals never lose each other's
    writes.
    """

    def __init__(self, storage: Storage) -> None:
        self._storage = storage
        self._lock = threading.RLock()

    # ── Reads ──────────────────────────────────────────────

    def _read(self) -> list[BookRecord]:
        return [BookRecord.from_dict(d) for d in self._storage.get_shelf()]

    def _write(self, records: list[BookRecord]) -> None:
        self._storage.save_shelf([r.to_dict() for r in records])

    def list_books(self) -> list[BookRecord]:
        return sorted(self._read(), key=lambda r: r.order)

    def get_book(self, book_id: str) -> Optional[BookRecord]:
        for record in self._read():
            if record.id == book_id:
                return record
        return None

    def load_book(self, book_id: str) -> tuple[BookRecord, list[Chunk]]:
        record = self.get_book(book_id)
        if record is None:
            raise BookNotFoundError(book_id)
        payload = self._storage.chunks.get(book_id)
        chunks = [Chunk.from_dict(d) for d in json.loads(payload)] if payload else []
        return record, chunks

    def get_cover(self, book_id: str) -> Optional[str]:
        try:
            return self._storage.covers.get(book_id)
        except PersistenceError as e:
            log.warning("Cover read failed for %s: %s", book_id, e)
            return None

    # ── Add / remove ───────────────────────────────────────

    def add_book(self, parsed: ParsedBook) -> BookRecord:
        """Store a fully ingested book and append it to the shelf."""
        book_id = BookRecord.make_id()
        payload = json.dumps([c.to_dict() for c in parsed.chunks], ensure_ascii=False)

        # Payload first: a failure here leaves no shelf entry behind
        self._storage.chunks.put(book_id, payload)
        try:
            if parsed.cover_image:
                self._storage.covers.put(book_id, parsed.cover_image)
            with self._lock:
                records = self._read()
                record = BookRecord(
                    id=book_id,
                    title=parsed.title,
                    creator=parsed.creator or "Unknown Author",
                    total_chunks=len(parsed.chunks),
                    order=max((r.order for r in records), default=-1) + 1,
                    added_at=time.time(),
                )
                records.append(record)
                self._write(records)
        except PersistenceError:
            self._discard_payload(book_id)
            raise

        log.info("Added %r (%s), %d chunks", record.title, book_id, record.total_chunks)
        return record

    def _discard_payload(self, book_id: str) -> None:
        self._storage.chunks.delete(book_id)
        self._storage.covers.delete(book_id)
        self._storage.images.delete_prefix(image_key(book_id, ""))

    def remove_book(self, book_id: str) -> None:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.id != book_id]
            if len(remaining) != len(records):
                self._write(remaining)
        self._discard_payload(book_id)
        log.info("Removed %s", book_id)

    # ── Progress / bookmarks / order ───────────────────────

    def update_progress(self, book_id: str, index: int) -> Optional[BookRecord]:
        if index < 0:
            raise ValueError(f"Chunk index must be >= 0, got {index}")
        with self._lock:
            records = self._read()
            for record in records:
                if record.id == book_id:
                    record.last_read_index = index
                    self._write(records)
                    return record
        log.warning("Book not found for progress update %s", book_id)
        return None

    def toggle_bookmark(self, book_id: str, chunk_id: str) -> list[str]:
        """Add or remove ``chunk_id``; returns the resulting bookmarks."""
        with self._lock:
            records = self._read()
            for record in records:
                if record.id != book_id:
                    continue
                if chunk_id in record.bookmarks:
                    record.bookmarks = [b for b in record.bookmarks if b != chunk_id]
                else:
                    record.bookmarks.append(chunk_id)
                self._write(records)
                return list(record.bookmarks)
        return []

    def move_book(self, book_id: str, direction: str) -> bool:
        """Swap display position with the neighbour above or below."""
        if direction not in DIRECTIONS:
            raise ValueError(f"direction must be one of {DIRECTIONS}, got {direction!r}")
        with self._lock:
            ordered = sorted(self._read(), key=lambda r: r.order)
            index = next((i for i, r in enumerate(ordered) if r.id == book_id), -1)
            if index == -1:
                return False
            new_index = index - 1 if direction == "up" else index + 1
            if not 0 <= new_index < len(ordered):
                return False
            a, b = ordered[index], ordered[new_index]
            a.order, b.order = b.order, a.order
            self._write(ordered)
        return True

    # ── Auxiliary images ───────────────────────────────────

    def save_image(self, book_id: str, path: str, data: bytes) -> None:
        self._storage.images.put(image_key(book_id, path), data)

    def get_image(self, book_id: str, path: str) -> Optional[bytes]:
        try:
            return self._storage.images.get(image_key(book_id, path))
        except PersistenceError as e:
            log.warning("Image read failed for %s %s: %s", book_id, path, e)
            return None
