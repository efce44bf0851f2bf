"""Bookscroll - ebook to reading-chunk converter and shelf manager."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from bookscroll.config import AppConfig, load_config
from bookscroll.errors import BookNotFoundError, BookscrollError
from bookscroll.ingestion import BookIngestor
from bookscroll.library.models import BookRecord
from bookscroll.library.shelf import DIRECTIONS, Shelf
from bookscroll.library.storage import Storage

log = logging.getLogger(__name__)


class BookscrollApp:
    """Owns the storage context and exposes the shelf operations."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or load_config()
        self.storage = Storage(self.config.db_path)
        self.shelf = Shelf(self.storage)
        self.ingestor = BookIngestor.from_config(self.config)

    def import_file(self, file_path_str: str) -> BookRecord:
        file_path = Path(file_path_str).expanduser().resolve()
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        parsed = self.ingestor.ingest_file(file_path)
        if parsed.failed_units:
            log.warning(
                "%s: skipped %d unreadable units", file_path.name, len(parsed.failed_units)
            )
        return self.shelf.add_book(parsed)

    def close(self) -> None:
        self.storage.close()


def _setup_logging(config: AppConfig) -> None:
    root = logging.getLogger("bookscroll")
    target = os.path.abspath(config.log_path)
    for existing in root.handlers:
        if getattr(existing, "baseFilename", None) == target:
            return
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bookscroll", description=__doc__)
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="import an .epub or .docx file")
    add.add_argument("file")

    sub.add_parser("list", help="show the shelf")

    remove = sub.add_parser("remove", help="delete a book and its content")
    remove.add_argument("book_id")

    move = sub.add_parser("move", help="move a book up or down the shelf")
    move.add_argument("book_id")
    move.add_argument("direction", choices=DIRECTIONS)

    chunks = sub.add_parser("chunks", help="list the chunks of a book")
    chunks.add_argument("book_id")
    return parser


def _run(app: BookscrollApp, args: argparse.Namespace) -> int:
    if args.command == "add":
        record = app.import_file(args.file)
        print(f"{record.id}\t{record.title}\t{record.total_chunks} chunks")
    elif args.command == "list":
        for record in app.shelf.list_books():
            print(
                f"{record.id}\t{record.title}\t{record.creator}\t"
                f"{record.last_read_index}/{record.total_chunks}"
            )
    elif args.command == "remove":
        app.shelf.remove_book(args.book_id)
    elif args.command == "move":
        if not app.shelf.move_book(args.book_id, args.direction):
            print(f"Cannot move {args.book_id} {args.direction}", file=sys.stderr)
            return 1
    elif args.command == "chunks":
        _, chunks = app.shelf.load_book(args.book_id)
        for chunk in chunks:
            print(f"{chunk.id}\t{chunk.kind.value}\t{chunk.chapter}\t{len(chunk.content)}")
    return 0


def main(argv: Optional[Sequence[str]] = None, config: Optional[AppConfig] = None) -> int:
    args = _build_parser().parse_args(argv)
    config = config or load_config()
    _setup_logging(config)

    app = BookscrollApp(config=config)
    try:
        return _run(app, args)
    except (BookscrollError, FileNotFoundError) as e:
        if not isinstance(e, BookNotFoundError):
            log.error("%s failed: %s", args.command, e)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        app.close()


if __name__ == "__main__":
    sys.exit(main())
