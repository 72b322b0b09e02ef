"""
Unit tests for the response body writer.
"""

from datetime import date

import pytest

from conftest import GIF_BYTES, PNG_BYTES
from webserver.handlers import static
from webserver.handlers.static import BodyWriter, NOT_FOUND_PAGE, WELCOME_PAGE
from webserver.handlers.template import template_tokens
from webserver.http.resolver import ResourceResolver


@pytest.fixture
def fixed_date(monkeypatch):
    """Pin <cs371date> to 2026-10-19."""
    monkeypatch.setattr(
        static,
        "template_tokens",
        lambda server_name: template_tokens(server_name, today=date(2026, 10, 19)),
    )


@pytest.fixture
def writer() -> BodyWriter:
    return BodyWriter(template_server="Test Server")


class TestBodySelection:
    """Each resolution gets exactly one kind of body."""

    def test_not_found_page(self, writer, resolver, recorder):
        writer.write(recorder, resolver.resolve("missing.html"))
        assert recorder.data == NOT_FOUND_PAGE
        assert b"404 NOT FOUND" in recorder.data

    def test_not_found_page_for_missing_image(self, writer, resolver, recorder):
        writer.write(recorder, resolver.resolve("missing.gif"))
        assert recorder.data == NOT_FOUND_PAGE

    def test_welcome_page(self, writer, resolver, recorder):
        writer.write(recorder, resolver.resolve(""))
        assert recorder.data == WELCOME_PAGE
        assert b"My web server works!" in recorder.data

    def test_gif_passthrough(self, writer, resolver, recorder):
        writer.write(recorder, resolver.resolve("photo.gif"))
        assert recorder.data == GIF_BYTES
        assert len(recorder.data) == 10

    def test_png_passthrough(self, writer, resolver, recorder):
        """PNG gets the same byte-for-byte treatment as GIF."""
        writer.write(recorder, resolver.resolve("logo.png"))
        assert recorder.data == PNG_BYTES

    def test_jpg_passthrough(self, writer, resolver, recorder, document_root):
        writer.write(recorder, resolver.resolve("pic.jpg"))
        assert recorder.data == (document_root / "pic.jpg").read_bytes()

    def test_binary_sent_in_chunks(self, resolver, recorder):
        BodyWriter(template_server="S", chunk_size=3).write(recorder, resolver.resolve("photo.gif"))

        assert [len(c) for c in recorder.chunks] == [3, 3, 3, 1]
        assert recorder.data == GIF_BYTES


class TestTemplatedText:
    """Text files are sent line by line with tokens replaced."""

    def test_tokens_replaced(self, writer, resolver, recorder, fixed_date):
        writer.write(recorder, resolver.resolve("index.html"))

        assert recorder.data.decode() == (
            "<html><body>\n"
            "<p>Today is 2026-10-19.</p>\n"
            "<p>Served by Test Server, yes Test Server.</p>\n"
            "<p>Nothing to replace here.</p>\n"
            "</body></html>"
        )

    def test_one_send_per_line(self, writer, resolver, recorder, fixed_date):
        writer.write(recorder, resolver.resolve("index.html"))
        assert len(recorder.chunks) == 5

    def test_line_endings_preserved(self, writer, document_root, recorder, fixed_date):
        (document_root / "mixed.html").write_bytes(b"a\r\nb <cs371date>\nc")

        writer.write(recorder, ResourceResolver(document_root).resolve("mixed.html"))

        assert recorder.data == b"a\r\nb 2026-10-19\nc"

    def test_file_without_tokens_unchanged(self, writer, resolver, recorder, document_root):
        writer.write(recorder, resolver.resolve("plain.html"))
        assert recorder.data == (document_root / "plain.html").read_bytes()

    def test_undecodable_bytes_survive(self, writer, document_root, recorder, fixed_date):
        (document_root / "latin.html").write_bytes(b"caf\xe9 <cs371server>\n")

        writer.write(recorder, ResourceResolver(document_root).resolve("latin.html"))

        assert recorder.data == b"caf\xe9 Test Server\n"

    def test_unknown_extension_is_templated(self, writer, document_root, recorder):
        (document_root / "page.txt").write_text("<cs371server>\n")

        writer.write(recorder, ResourceResolver(document_root).resolve("page.txt"))

        assert recorder.data == b"Test Server\n"

    def test_empty_file(self, writer, document_root, recorder):
        (document_root / "empty.html").write_bytes(b"")

        writer.write(recorder, ResourceResolver(document_root).resolve("empty.html"))

        assert recorder.data == b""


class TestFileErrors:
    """I/O failures propagate to the caller."""

    def test_file_removed_after_resolving(self, writer, resolver, recorder, document_root):
        resolution = resolver.resolve("plain.html")
        (document_root / "plain.html").unlink()

        with pytest.raises(FileNotFoundError):
            writer.write(recorder, resolution)

    def test_directory_cannot_be_read(self, writer, resolver, recorder):
        resolution = resolver.resolve("sub")
        assert resolution.status_ok

        with pytest.raises(OSError):
            writer.write(recorder, resolution)
