"""Depth-first walk over a node tree that turns it into reading chunks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from bookscroll.chunking.accumulator import ChunkAccumulator, ChunkFactory
from bookscroll.chunking.nodes import Node, NodeCategory
from bookscroll.chunking.policy import SegmentationPolicy
from bookscroll.library.models import Chunk


@dataclass
class TraversalContext:
    """Mutable state of one ingestion run.

    Passed explicitly through every recursive call; never shared between
    runs.
    """

    factory: ChunkFactory
    chapter: str = "Start"
    accumulator: ChunkAccumulator = field(default_factory=ChunkAccumulator)
    chunks: list[Chunk] = field(default_factory=list)

    def flush(self) -> Optional[Chunk]:
        """Emit the pending buffer under the current chapter label."""
        chunk = self.accumulator.flush(self.chapter, self.factory)
        if chunk is not None:
            self.chunks.append(chunk)
        return chunk

    def start_chapter(self, label: str) -> None:
        self.flush()
        self.chapter = label


class DocumentTraverser:
    def __init__(self, policy: SegmentationPolicy) -> None:
        self.policy = policy

    def traverse(self, node: Node, ctx: TraversalContext) -> None:
        """Append the chunks found under ``node`` to ``ctx.chunks``."""
        if node.category is NodeCategory.MEDIA:
            return
        if self.policy.is_heading(node):
            self._visit_heading(node, ctx)
            return
        if self.policy.is_paragraph_like(node):
            self._visit_paragraph(node, ctx)
            return
        # Containers and unclassified blocks
        for child in node.children:
            self.traverse(child, ctx)

    def _visit_heading(self, node: Node, ctx: TraversalContext) -> None:
        text = node.text.strip()
        if not text:
            return
        ctx.flush()
        ctx.chunks.append(ctx.factory.header(text))
        ctx.chapter = text

    def _visit_paragraph(self, node: Node, ctx: TraversalContext) -> None:
        text = node.text.strip()
        if not text:
            return

        policy = self.policy
        acc = ctx.accumulator
        dialogue = policy.is_dialogue(text)

        # Never split a node: start a fresh buffer instead
        if policy.exceeds_hard(len(acc), acc.added_length(text)):
            ctx.flush()

        acc.append(text)

        if policy.is_self_contained_paragraph(text, dialogue):
            ctx.flush()
        elif policy.should_flush_after_append(len(acc), dialogue):
            ctx.flush()
