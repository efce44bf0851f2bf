"""Generic document tree produced by the parsers and consumed by the traverser."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

HEADING_TAGS = frozenset(["h1", "h2", "h3", "h4", "h5", "h6"])
PARAGRAPH_TAGS = frozenset(["p", "li", "blockquote"])
MEDIA_TAGS = frozenset(["img", "image", "svg", "video", "audio", "iframe"])
CONTAINER_TAGS = frozenset(["div", "section", "article", "body"])


class NodeCategory(enum.Enum):
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    MEDIA = "media"
    CONTAINER = "container"
    OTHER = "other"


def classify(tag: str) -> NodeCategory:
    """Map a raw markup tag to its category. Unknown tags are OTHER."""
    tag = tag.lower()
    if tag in HEADING_TAGS:
        return NodeCategory.HEADING
    if tag in PARAGRAPH_TAGS:
        return NodeCategory.PARAGRAPH
    if tag in MEDIA_TAGS:
        return NodeCategory.MEDIA
    if tag in CONTAINER_TAGS:
        return NodeCategory.CONTAINER
    return NodeCategory.OTHER


@dataclass
class Node:
    tag: str
    text: str = ""
    children: list[Node] = field(default_factory=list)
    category: NodeCategory = field(init=False)

    def __post_init__(self) -> None:
        self.tag = self.tag.lower()
        self.category = classify(self.tag)

    @property
    def heading_level(self) -> int:
        """1-6 for headings, 0 otherwise."""
        if self.category is NodeCategory.HEADING:
            return int(self.tag[1])
        return 0
