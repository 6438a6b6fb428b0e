from __future__ import annotations

import re
import xml.etree.ElementTree as ET
import zipfile

import pytest

from quire.builders.epub import EpubBuilder, xml_escape
from quire.errors import EpubZipError


def _build(book_dir, config):
    return EpubBuilder(config=config, book_dir=str(book_dir)).build()


def _chapters(n):
    return {
        f"{i:02d}-ch.md": f'---\ntitle: "Part {i}"\n---\n\nText {i}.\n' for i in range(1, n + 1)
    }


def test_mimetype_is_first_and_stored(make_book, load_config):
    book_dir = make_book()

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        first = zf.infolist()[0]
        assert first.filename == "mimetype"
        assert first.compress_type == zipfile.ZIP_STORED
        assert zf.read("mimetype") == b"application/epub+zip"
        assert all(
            info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist()[1:]
        )


def test_entry_order(make_book, load_config):
    book_dir = make_book(cover="cover.png")
    (book_dir / "assets" / "images" / "cover.png").write_bytes(b"\x89PNG\r\n")

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        assert zf.namelist() == [
            "mimetype",
            "META-INF/container.xml",
            "OEBPS/content.opf",
            "OEBPS/toc.ncx",
            "OEBPS/chapter001.xhtml",
            "OEBPS/chapter002.xhtml",
            "OEBPS/style.css",
            "OEBPS/cover.png",
        ]
        assert zf.read("OEBPS/cover.png") == b"\x89PNG\r\n"
        opf = zf.read("OEBPS/content.opf").decode("utf-8")
    assert 'href="cover.png" media-type="image/png" properties="cover-image"' in opf
    assert '<meta name="cover" content="cover-image"/>' in opf


def test_non_image_cover_is_skipped(make_book, load_config):
    book_dir = make_book(cover="cover.pdf")
    (book_dir / "assets" / "images" / "cover.pdf").write_bytes(b"%PDF-1.4")

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        assert not [n for n in zf.namelist() if "cover" in n]
        assert "cover-image" not in zf.read("OEBPS/content.opf").decode("utf-8")


def test_spine_ncx_and_files_agree(make_book, load_config):
    book_dir = make_book(chapters=_chapters(12))

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        opf = zf.read("OEBPS/content.opf").decode("utf-8")
        ncx = zf.read("OEBPS/toc.ncx").decode("utf-8")
        names = zf.namelist()

    spine = [int(n) for n in re.findall(r'<itemref idref="chapter(\d+)"/>', opf)]
    play_order = [int(n) for n in re.findall(r'playOrder="(\d+)"', ncx)]
    sources = re.findall(r'<content src="(chapter\d{3}\.xhtml)"/>', ncx)
    labels = re.findall(r"<text>(Part \d+)</text>", ncx)

    assert spine == list(range(1, 13))
    assert play_order == list(range(1, 13))
    assert sources == [f"chapter{n:03d}.xhtml" for n in range(1, 13)]
    assert labels == [f"Part {n}" for n in range(1, 13)]
    assert [n for n in names if n.startswith("OEBPS/chapter")] == [
        f"OEBPS/chapter{n:03d}.xhtml" for n in range(1, 13)
    ]


def test_metadata_and_chapter_content(make_book, load_config):
    book_dir = make_book(title="Cats & <Dogs>", author="O'Brien", language="fr")

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        opf = zf.read("OEBPS/content.opf").decode("utf-8")
        ncx = zf.read("OEBPS/toc.ncx").decode("utf-8")
        first = zf.read("OEBPS/chapter001.xhtml").decode("utf-8")
        second = zf.read("OEBPS/chapter002.xhtml").decode("utf-8")

    assert "<dc:title>Cats &amp; &lt;Dogs&gt;</dc:title>" in opf
    assert "<dc:creator>O&apos;Brien</dc:creator>" in opf
    assert "<dc:language>fr</dc:language>" in opf
    book_id = re.search(r'<dc:identifier id="bookid">(urn:uuid:[0-9a-f-]+)</dc:identifier>', opf).group(1)
    assert f'<meta name="dtb:uid" content="{book_id}"/>' in ncx
    assert re.search(r'<meta property="dcterms:modified">\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ</meta>', opf)

    assert "<title>Intro</title>" in first
    assert '<link rel="stylesheet" type="text/css" href="style.css"/>' in first
    assert first.index("<h1>Intro</h1>") < first.index("<p>Welcome &amp; hello.</p>")
    assert "<title>Chapter 2</title>" in second
    assert "<h1>" not in second
    assert "<text>Chapter 2</text>" in ncx


def test_chapters_are_well_formed_xml(make_book, load_config):
    book_dir = make_book(chapters={
        "01-tasks.md": "- [x] done\n- [ ] todo\n",
        "02-notes.md": "Note[^1].\n\n---\n\nLine  \nbreak ![alt](pic.png)\n\n[^1]: The footnote.\n",
    })

    output = _build(book_dir, load_config(book_dir))

    with zipfile.ZipFile(output) as zf:
        chapters = [name for name in zf.namelist() if name.startswith("OEBPS/chapter")]
        assert chapters == ["OEBPS/chapter001.xhtml", "OEBPS/chapter002.xhtml"]
        for name in chapters:
            ET.fromstring(zf.read(name))
        tasks = zf.read("OEBPS/chapter001.xhtml").decode("utf-8")
    assert tasks.count('type="checkbox" />') == 2


def test_identifier_is_fresh_per_build(make_book, load_config):
    book_dir = make_book()
    config = load_config(book_dir)

    assert EpubBuilder(config=config, book_dir=str(book_dir)).book_id != \
        EpubBuilder(config=config, book_dir=str(book_dir)).book_id


def test_write_failure_raises_zip_error(make_book, load_config, monkeypatch):
    book_dir = make_book()

    def _broken(self, name, data, *args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(zipfile.ZipFile, "writestr", _broken)

    with pytest.raises(EpubZipError, match="disk full"):
        _build(book_dir, load_config(book_dir))
    assert not (book_dir / "export" / "My-Book--Vol--1.epub").exists()


def test_xml_escape():
    assert xml_escape("a&b<c>\"d'") == "a&amp;b&lt;c&gt;&quot;d&apos;"
