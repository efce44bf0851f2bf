"""Segmentation decisions: headings, dialogue lines and size limits."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from bookscroll.chunking.nodes import Node, NodeCategory
from bookscroll.config import AppConfig
from bookscroll.errors import ConfigurationError

# Exchange-style line markers. These follow common typographic conventions for
# dialogue (em-dash, hyphen, opening quotes) and lead-ins ending with a colon.
DIALOGUE_PREFIXES: tuple[str, ...] = ("—", "-", "“", '"')
DIALOGUE_SUFFIXES: tuple[str, ...] = (":",)


def is_dialogue_line(text: str) -> bool:
    """Default dialogue heuristic."""
    if not text:
        return False
    return text.startswith(DIALOGUE_PREFIXES) or text.endswith(DIALOGUE_SUFFIXES)


@dataclass(frozen=True)
class SegmentationPolicy:
    """Stateless chunk boundary rules.

    ``soft_limit`` is the preferred maximum buffer size, ``hard_limit`` the
    absolute one. A non-dialogue paragraph at least ``min_paragraph_length``
    long closes its chunk on its own. ``dialogue_detector`` can be swapped for
    content in languages with other dialogue conventions.
    """

    soft_limit: int = 500
    hard_limit: int = 900
    min_paragraph_length: int = 120
    dialogue_detector: Callable[[str], bool] = field(
        default=is_dialogue_line, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.soft_limit <= 0 or self.min_paragraph_length <= 0:
            raise ConfigurationError("chunk limits must be positive")
        if self.hard_limit < self.soft_limit:
            raise ConfigurationError("hard_limit must be >= soft_limit")

    @classmethod
    def from_config(cls, config: AppConfig) -> SegmentationPolicy:
        return cls(
            soft_limit=config.chunk_soft_limit,
            hard_limit=config.chunk_hard_limit,
            min_paragraph_length=config.min_paragraph_length,
        )

    @staticmethod
    def is_heading(node: Node) -> bool:
        return node.category is NodeCategory.HEADING

    @staticmethod
    def is_paragraph_like(node: Node) -> bool:
        return node.category is NodeCategory.PARAGRAPH

    def is_dialogue(self, text: str) -> bool:
        return self.dialogue_detector(text)

    def exceeds_hard(self, current_length: int, added_length: int) -> bool:
        return current_length + added_length > self.hard_limit

    def should_flush_after_append(self, new_length: int, dialogue: bool) -> bool:
        # Dialogue only yields to the hard limit
        if new_length >= self.hard_limit:
            return True
        return not dialogue and new_length >= self.soft_limit

    def is_self_contained_paragraph(self, text: str, dialogue: bool) -> bool:
        return not dialogue and len(text) >= self.min_paragraph_length
