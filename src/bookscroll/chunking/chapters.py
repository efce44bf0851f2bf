"""Chapter labels for logical units, looked up in the table of contents."""

from __future__ import annotations

import logging
from typing import Iterable, Optional
from urllib.parse import unquote

from bookscroll.chunking.traverser import TraversalContext

log = logging.getLogger(__name__)


def _normalize_href(href: str) -> str:
    """Drop the fragment and any leading parent-directory steps."""
    path = unquote(href.split("#")[0]) if href else ""
    while path.startswith(("../", "./")):
        path = path.split("/", 1)[1]
    return path


class TableOfContents:
    """Flat, reading-ordered list of (href, label) entries."""

    def __init__(self, entries: Iterable[tuple[str, str]] = ()) -> None:
        self.entries: list[tuple[str, str]] = [
            (href, label) for href, label in entries if href and label
        ]

    def __len__(self) -> int:
        return len(self.entries)

    def label_for(self, path: str) -> Optional[str]:
        """Label of the first entry pointing at ``path``, if any."""
        if not path:
            return None
        for href, label in self.entries:
            target = _normalize_href(href)
            if not target:
                continue
            if (
                target == path
                or target.endswith("/" + path)
                or path.endswith("/" + target)
            ):
                return label
        return None


class ChapterTracker:
    def __init__(self, toc: Optional[TableOfContents] = None) -> None:
        self.toc = toc or TableOfContents()

    def enter_unit(self, path: str, ctx: TraversalContext) -> str:
        """Switch ``ctx`` to the unit's label, flushing under the old one.

        Without a matching entry the active label is kept.
        """
        label = self.toc.label_for(path)
        label = label.strip() if label else ""
        if label and label != ctx.chapter:
            log.debug("Chapter %r -> %r at %s", ctx.chapter, label, path)
            ctx.start_chapter(label)
        return ctx.chapter
