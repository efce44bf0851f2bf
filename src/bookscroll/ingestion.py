"""Turn a document file into an ordered list of reading chunks."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import httpx

from bookscroll.chunking.accumulator import ChunkFactory
from bookscroll.chunking.chapters import ChapterTracker
from bookscroll.chunking.policy import SegmentationPolicy
from bookscroll.chunking.traverser import DocumentTraverser, TraversalContext
from bookscroll.config import AppConfig
from bookscroll.errors import DocumentLoadError
from bookscroll.library.models import ParsedBook
from bookscroll.parsers.base import LoadedDocument, get_parser
from bookscroll.parsers.cover import resolve_cover

log = logging.getLogger(__name__)


class BookIngestor:
    """Runs parsing, chapter tracking and segmentation for one book at a time.

    Units are processed strictly in document order: the open buffer and the
    active chapter label carry over from one unit to the next.
    """

    def __init__(
        self,
        policy: Optional[SegmentationPolicy] = None,
        http_client: Optional[httpx.Client] = None,
        cover_timeout: float = 30.0,
    ) -> None:
        self.policy = policy or SegmentationPolicy()
        self.traverser = DocumentTraverser(self.policy)
        self._http_client = http_client
        self._cover_timeout = cover_timeout

    @classmethod
    def from_config(
        cls, config: AppConfig, http_client: Optional[httpx.Client] = None
    ) -> BookIngestor:
        return cls(
            policy=SegmentationPolicy.from_config(config),
            http_client=http_client,
            cover_timeout=config.cover_timeout,
        )

    def ingest_file(self, file_path: Path) -> ParsedBook:
        """Parse and chunk a file.

        Raises ``UnsupportedFormatError`` for unknown file types and
        ``DocumentLoadError`` when the file cannot be opened at all or none
        of its units load.
        """
        parser = get_parser(file_path)
        document = parser.load(file_path)
        return self.ingest(document)

    def ingest(self, document: LoadedDocument) -> ParsedBook:
        cover = resolve_cover(
            document.cover_locators,
            document.read_resource,
            client=self._http_client,
            timeout=self._cover_timeout,
        )

        ctx = TraversalContext(
            factory=ChunkFactory(document.title, document.creator),
            chapter=document.initial_chapter,
        )
        tracker = ChapterTracker(document.toc)
        failed: list[str] = []

        for unit in document.units:
            tracker.enter_unit(unit.href, ctx)
            try:
                self.traverser.traverse(unit.load(), ctx)
            except Exception as e:
                log.warning("Error parsing unit %s: %s", unit.href, e)
                failed.append(unit.href)

        if document.units and len(failed) == len(document.units):
            raise DocumentLoadError(
                f"None of the {len(failed)} units of {document.title!r} could be loaded"
            )

        ctx.flush()

        if ctx.chunks and cover:
            ctx.chunks[0].cover_image = cover

        log.info(
            "Ingested %r: %d units, %d chunks, %d failed",
            document.title,
            len(document.units),
            len(ctx.chunks),
            len(failed),
        )
        return ParsedBook(
            title=document.title,
            creator=document.creator,
            source_format=document.format,
            chunks=ctx.chunks,
            cover_image=cover,
            failed_units=failed,
        )
