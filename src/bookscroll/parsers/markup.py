"""HTML/XHTML to generic node tree."""

from __future__ import annotations

import re
import warnings

from bs4 import BeautifulSoup, Tag, XMLParsedAsHTMLWarning

from bookscroll.chunking.nodes import Node, NodeCategory, classify

warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)

_DROPPED_TAGS = ["script", "style", "sup"]
_TEXT_CATEGORIES = (NodeCategory.HEADING, NodeCategory.PARAGRAPH)


def _clean(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _text_of(element: Tag) -> str:
    # Only line breaks and nested blocks separate words; inline tags do not
    for tag in element.find_all(True):
        if tag.name == "br":
            tag.replace_with(" ")
        elif classify(tag.name) is not NodeCategory.OTHER:
            tag.insert_before(" ")
            tag.insert_after(" ")
    return _clean(element.get_text())


def element_to_node(element: Tag) -> Node:
    category = classify(element.name)
    if category is NodeCategory.MEDIA:
        return Node(element.name)
    if category in _TEXT_CATEGORIES:
        # Leaves for the traverser: text only, children are never visited
        return Node(element.name, text=_text_of(element))
    children = [
        element_to_node(child) for child in element.children if isinstance(child, Tag)
    ]
    return Node(element.name, children=children)


def html_to_node(html: str | bytes) -> Node:
    """Parse markup and return its ``body`` (or document root) as a node."""
    soup = BeautifulSoup(html, "lxml")
    for tag in soup.find_all(_DROPPED_TAGS):
        tag.decompose()

    root = soup.body or soup.find("html")
    if root is None:
        return Node("body")
    return element_to_node(root)
