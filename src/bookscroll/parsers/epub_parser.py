"""EPUB loader using ebooklib."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import ebooklib
from ebooklib import epub

from bookscroll.chunking.chapters import TableOfContents
from bookscroll.chunking.nodes import Node
from bookscroll.errors import DocumentLoadError, UnitLoadError

from .base import BaseParser, LoadedDocument, LogicalUnit
from .markup import html_to_node

log = logging.getLogger(__name__)


def _metadata(book: epub.EpubBook, namespace: str, name: str) -> list:
    # ebooklib raises KeyError for a namespace the package never declared
    try:
        return book.get_metadata(namespace, name)
    except KeyError:
        return []


class EpubParser(BaseParser):
    SUPPORTED_EXTENSIONS = (".epub",)

    def load(self, file_path: Path) -> LoadedDocument:
        try:
            book = epub.read_epub(str(file_path), options={"ignore_ncx": False})
        except Exception as e:
            raise DocumentLoadError(f"Cannot open EPUB {file_path.name}: {e}") from e

        title = self._get_meta(book, "title") or file_path.stem or "Untitled Book"
        creator = self._get_meta(book, "creator") or "Unknown Author"

        units = [
            LogicalUnit(href=item.get_name(), load=self._unit_loader(item))
            for item in self._spine_items(book)
        ]
        toc = TableOfContents(self._flatten_toc(book.toc))
        log.debug(
            "EPUB %s: %d spine items, %d toc entries", file_path.name, len(units), len(toc)
        )

        def read_resource(path: str) -> Optional[tuple[bytes, str]]:
            item = book.get_item_with_href(path)
            if item is None:
                return None
            return item.get_content(), item.media_type or ""

        return LoadedDocument(
            title=title,
            creator=creator,
            format="epub",
            units=units,
            toc=toc,
            cover_locators=self._cover_locators(book),
            read_resource=read_resource,
            initial_chapter="Start",
        )

    @staticmethod
    def _spine_items(book: epub.EpubBook) -> list[epub.EpubItem]:
        documents = [
            item
            for item in book.get_items_of_type(ebooklib.ITEM_DOCUMENT)
            if not isinstance(item, epub.EpubNav)
        ]
        id_to_item = {item.get_id(): item for item in documents}

        ordered = []
        for entry in book.spine:
            sid = entry[0] if isinstance(entry, tuple) else entry
            if sid in id_to_item:
                ordered.append(id_to_item[sid])
        # Fall back to all document items if the spine resolves to nothing
        return ordered or documents

    @staticmethod
    def _unit_loader(item: epub.EpubItem):
        def load() -> Node:
            try:
                return html_to_node(item.get_content())
            except Exception as e:
                raise UnitLoadError(item.get_name(), str(e)) from e

        return load

    @staticmethod
    def _flatten_toc(toc_list) -> list[tuple[str, str]]:
        entries: list[tuple[str, str]] = []

        def walk(nodes) -> None:
            for entry in nodes:
                if isinstance(entry, tuple):
                    # (Section, [children])
                    walk(list(entry))
                elif isinstance(entry, list):
                    walk(entry)
                elif isinstance(entry, (epub.Link, epub.Section)):
                    href = getattr(entry, "href", "") or ""
                    title = (entry.title or "").strip()
                    if href and title:
                        entries.append((href, title))

        walk(toc_list or [])
        return entries

    @staticmethod
    def _cover_locators(book: epub.EpubBook) -> list[str]:
        locators: list[str] = []

        # (a) cover item declared in the manifest
        for item in book.get_items_of_type(ebooklib.ITEM_COVER):
            locators.append(item.get_name())
        for item in book.get_items_of_type(ebooklib.ITEM_IMAGE):
            if "cover-image" in (getattr(item, "properties", None) or []):
                locators.append(item.get_name())

        # (b) <meta name="cover" content="<manifest id>"/>
        for _, attrs in _metadata(book, "OPF", "cover"):
            item = book.get_item_with_id((attrs or {}).get("content", ""))
            if item is not None:
                locators.append(item.get_name())

        return list(dict.fromkeys(locators))

    @staticmethod
    def _get_meta(book: epub.EpubBook, field: str) -> str:
        values = _metadata(book, "DC", field)
        if values:
            val = values[0]
            if isinstance(val, tuple):
                return str(val[0]).strip() if val[0] else ""
            return str(val).strip()
        return ""
