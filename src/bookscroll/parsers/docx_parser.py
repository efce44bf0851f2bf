"""DOCX loader using python-docx."""

from __future__ import annotations

import re
from pathlib import Path

from docx import Document

from bookscroll.chunking.nodes import Node
from bookscroll.errors import DocumentLoadError

from .base import BaseParser, LoadedDocument, LogicalUnit

_HEADING_STYLE = re.compile(r"^Heading\s+(\d+)$")
_QUOTE_STYLES = ("Quote", "Intense Quote")


def style_to_tag(style_name: str) -> str:
    """Map a paragraph style name to the equivalent markup tag."""
    if style_name == "Title":
        return "h1"
    match = _HEADING_STYLE.match(style_name)
    if match and 1 <= int(match.group(1)) <= 6:
        return f"h{match.group(1)}"
    if style_name.startswith("List"):
        return "li"
    if style_name in _QUOTE_STYLES:
        return "blockquote"
    return "p"


class DocxParser(BaseParser):
    SUPPORTED_EXTENSIONS = (".docx",)

    def load(self, file_path: Path) -> LoadedDocument:
        try:
            doc = Document(str(file_path))
        except Exception as e:
            raise DocumentLoadError(f"Cannot open DOCX {file_path.name}: {e}") from e

        root = Node("body")
        for para in doc.paragraphs:
            style_name = para.style.name if para.style else ""
            text = re.sub(r"\s+", " ", para.text).strip()
            if not text:
                continue
            root.children.append(Node(style_to_tag(style_name), text=text))

        props = doc.core_properties
        first_heading = next(
            (n.text for n in root.children if n.heading_level and n.text), ""
        )
        title = (props.title or "").strip() or first_heading or file_path.stem
        creator = (props.author or "").strip() or "Unknown Author"

        return LoadedDocument(
            title=title,
            creator=creator,
            format="docx",
            units=[LogicalUnit(href=file_path.name, load=lambda: root)],
            initial_chapter="Document",
        )
