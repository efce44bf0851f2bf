"""Tests for markup conversion, format loaders and cover resolution."""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest

from bookscroll.chunking.nodes import NodeCategory
from bookscroll.errors import DocumentLoadError, UnsupportedFormatError
from bookscroll.parsers.base import get_parser
from bookscroll.parsers.cover import resolve_cover, to_data_uri
from bookscroll.parsers.docx_parser import DocxParser, style_to_tag
from bookscroll.parsers.epub_parser import EpubParser
from bookscroll.parsers.markup import html_to_node

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def make_epub(
    path: Path,
    chapters: list[tuple[str, str]],
    toc_labels: list[str] | None = None,
    cover: bytes | None = None,
) -> Path:
    from ebooklib import epub

    book = epub.EpubBook()
    book.set_identifier("test123")
    book.set_title("Test Book")
    book.set_language("en")
    book.add_author("Test Author")

    items = []
    for i, (title, body) in enumerate(chapters, start=1):
        item = epub.EpubHtml(title=title, file_name=f"ch{i}.xhtml", lang="en")
        item.content = f"<html><body>{body}</body></html>"
        book.add_item(item)
        items.append(item)

    labels = toc_labels if toc_labels is not None else [t for t, _ in chapters]
    book.toc = [
        epub.Link(f"ch{i}.xhtml", label, f"ch{i}")
        for i, label in enumerate(labels, start=1)
        if label
    ]
    book.add_item(epub.EpubNcx())
    book.add_item(epub.EpubNav())
    if cover is not None:
        book.set_cover("cover.png", cover, create_page=False)
    book.spine = items

    epub.write_epub(str(path), book)
    return path


# ── Markup ─────────────────────────────────────────


class TestMarkup:
    def test_body_is_root(self):
        root = html_to_node("<html><head><title>x</title></head><body><p>Hi</p></body></html>")
        assert root.tag == "body"
        assert [c.tag for c in root.children] == ["p"]
        assert root.children[0].text == "Hi"

    def test_text_collapsed(self):
        root = html_to_node("<body><p>  Hello\n   <em>big</em>\tworld </p></body>")
        assert root.children[0].text == "Hello big world"

    def test_dropped_tags(self):
        root = html_to_node(
            "<body><script>x()</script><style>p{}</style><p>Note<sup>1</sup></p></body>"
        )
        assert [c.tag for c in root.children] == ["p"]
        assert root.children[0].text == "Note"

    def test_structure_preserved(self):
        root = html_to_node(
            "<body><div><h2>T</h2><ul><li>a</li><li>b</li></ul><img src='i.png'/></div></body>"
        )
        div = root.children[0]
        assert div.category is NodeCategory.CONTAINER
        assert [c.tag for c in div.children] == ["h2", "ul", "img"]
        assert [li.text for li in div.children[1].children] == ["a", "b"]
        assert div.children[2].category is NodeCategory.MEDIA

    def test_paragraph_is_leaf(self):
        root = html_to_node("<body><blockquote><p>one</p><p>two</p></blockquote></body>")
        quote = root.children[0]
        assert quote.text == "one two"
        assert quote.children == []

    def test_inline_tags_do_not_split_words(self):
        root = html_to_node(
            "<html><body><p><span class='dc'>T</span>he <b>en</b>d.<br/>Next line.</p></body></html>"
        )
        assert root.children[0].text == "The end. Next line."

    def test_accepts_bytes(self):
        root = html_to_node(b"<html><body><p>Hi there</p></body></html>")
        assert root.children[0].text == "Hi there"


# ── EPUB ───────────────────────────────────────────


class TestEpubParser:
    def test_metadata_and_units(self, tmp_path: Path):
        f = make_epub(
            tmp_path / "book.epub",
            [("Chapter 1", "<p>One.</p>"), ("Chapter 2", "<p>Two.</p>")],
        )
        doc = EpubParser().load(f)
        assert doc.title == "Test Book"
        assert doc.creator == "Test Author"
        assert doc.format == "epub"
        assert doc.initial_chapter == "Start"
        assert [u.href for u in doc.units] == ["ch1.xhtml", "ch2.xhtml"]

    def test_unit_loads_body(self, tmp_path: Path):
        f = make_epub(tmp_path / "book.epub", [("C", "<h1>Title</h1><p>Body.</p>")])
        root = EpubParser().load(f).units[0].load()
        assert root.tag == "body"
        texts = [c.text for c in root.children]
        assert "Title" in texts
        assert "Body." in texts

    def test_toc(self, tmp_path: Path):
        f = make_epub(
            tmp_path / "book.epub",
            [("A", "<p>a</p>"), ("B", "<p>b</p>")],
            toc_labels=["Part A", "Part B"],
        )
        toc = EpubParser().load(f).toc
        assert toc.label_for("ch1.xhtml") == "Part A"
        assert toc.label_for("ch2.xhtml") == "Part B"

    def test_cover_locator(self, tmp_path: Path):
        f = make_epub(tmp_path / "book.epub", [("A", "<p>a</p>")], cover=PNG_BYTES)
        doc = EpubParser().load(f)
        assert "cover.png" in doc.cover_locators
        data, media_type = doc.read_resource("cover.png")
        assert data == PNG_BYTES
        assert media_type == "image/png"

    def test_no_cover(self, tmp_path: Path):
        f = make_epub(tmp_path / "book.epub", [("A", "<p>a</p>")])
        doc = EpubParser().load(f)
        assert doc.cover_locators == []
        assert doc.read_resource("missing.png") is None

    def test_corrupt_file(self, tmp_path: Path):
        f = tmp_path / "broken.epub"
        f.write_bytes(b"this is not a zip archive")
        with pytest.raises(DocumentLoadError):
            EpubParser().load(f)


# ── DOCX ───────────────────────────────────────────


class TestDocxParser:
    def test_style_mapping(self):
        assert style_to_tag("Title") == "h1"
        assert style_to_tag("Heading 1") == "h1"
        assert style_to_tag("Heading 6") == "h6"
        assert style_to_tag("Heading 8") == "p"
        assert style_to_tag("List Bullet") == "li"
        assert style_to_tag("Quote") == "blockquote"
        assert style_to_tag("Normal") == "p"

    def test_parse_simple_docx(self, tmp_path: Path):
        from docx import Document

        doc = Document()
        doc.core_properties.title = "My Doc"
        doc.core_properties.author = "Writer"
        doc.add_heading("Chapter One", level=1)
        doc.add_paragraph("First paragraph.")
        doc.add_paragraph("An item.", style="List Bullet")
        doc.add_paragraph("A quote.", style="Quote")
        f = tmp_path / "test.docx"
        doc.save(str(f))

        loaded = DocxParser().load(f)
        assert loaded.title == "My Doc"
        assert loaded.creator == "Writer"
        assert loaded.format == "docx"
        assert loaded.initial_chapter == "Document"
        assert len(loaded.units) == 1

        root = loaded.units[0].load()
        assert [(c.tag, c.text) for c in root.children] == [
            ("h1", "Chapter One"),
            ("p", "First paragraph."),
            ("li", "An item."),
            ("blockquote", "A quote."),
        ]

    def test_title_falls_back_to_heading(self, tmp_path: Path):
        from docx import Document

        doc = Document()
        doc.core_properties.title = ""
        doc.core_properties.author = ""
        doc.add_paragraph("Preface.")
        doc.add_heading("The Real Title", level=2)
        f = tmp_path / "untitled.docx"
        doc.save(str(f))

        loaded = DocxParser().load(f)
        assert loaded.title == "The Real Title"
        assert loaded.creator == "Unknown Author"

    def test_corrupt_file(self, tmp_path: Path):
        f = tmp_path / "broken.docx"
        f.write_bytes(b"garbage")
        with pytest.raises(DocumentLoadError):
            DocxParser().load(f)


# ── get_parser routing ─────────────────────────────


class TestGetParser:
    def test_supported_extensions(self, tmp_path: Path):
        assert isinstance(get_parser(tmp_path / "a.epub"), EpubParser)
        assert isinstance(get_parser(tmp_path / "a.EPUB"), EpubParser)
        assert isinstance(get_parser(tmp_path / "a.docx"), DocxParser)

    @pytest.mark.parametrize("name", ["test.xyz", "test.pdf", "test.doc", "noext"])
    def test_unsupported(self, tmp_path: Path, name: str):
        with pytest.raises(UnsupportedFormatError, match="Unsupported format"):
            get_parser(tmp_path / name)

    def test_unsupported_is_value_error(self, tmp_path: Path):
        with pytest.raises(ValueError):
            get_parser(tmp_path / "x.mobi")


# ── Cover ──────────────────────────────────────────


class TestResolveCover:
    def test_data_uri(self):
        assert to_data_uri(b"abc", "image/png") == "data:image/png;base64,YWJj"
        assert to_data_uri(b"abc").startswith("data:application/octet-stream;base64,")

    def test_first_locator_wins(self):
        store = {"a.jpg": (b"A", "image/jpeg"), "b.png": (b"B", "image/png")}
        uri = resolve_cover(["a.jpg", "b.png"], store.get)
        assert uri == to_data_uri(b"A", "image/jpeg")

    def test_falls_through_missing_locator(self):
        store = {"b.png": (b"B", "image/png")}
        assert resolve_cover(["a.jpg", "b.png"], store.get) == to_data_uri(b"B", "image/png")

    def test_media_type_guessed(self):
        uri = resolve_cover(["img/c.gif"], lambda p: (b"G", ""))
        assert uri.startswith("data:image/gif;base64,")

    def test_reader_error_means_no_cover(self):
        def boom(path):
            raise OSError("archive damaged")

        assert resolve_cover(["c.png"], boom) is None

    def test_nothing_to_resolve(self):
        assert resolve_cover([], lambda p: None) is None
        assert resolve_cover(["", "x.png"], lambda p: None) is None

    def test_remote_cover(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/cover.jpg"
            return httpx.Response(
                200, content=b"JPEG", headers={"content-type": "image/jpeg; q=1"}
            )

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            uri = resolve_cover(
                ["https://example.com/cover.jpg"], lambda p: None, client=client
            )
        assert uri == to_data_uri(b"JPEG", "image/jpeg")

    def test_remote_failure(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            uri = resolve_cover(["http://example.com/c.png"], lambda p: None, client=client)
        assert uri is None
