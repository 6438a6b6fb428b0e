from __future__ import annotations

import os

import pytest

from quire.errors import AssetError
from quire.resolve import (
    collect_markdown_files,
    image_extension,
    resolve_cover,
    sanitize_filename,
)


def _touch(path, text="x\n"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_sanitize_replaces_each_disallowed_character():
    assert sanitize_filename("My Book: Vol. 1") == "My-Book--Vol--1"
    assert sanitize_filename("keep_this-one") == "keep_this-one"
    assert sanitize_filename("Café") == "Caf-"


def test_explicit_list_keeps_list_order_and_drops_missing(tmp_path):
    for name in ("a.md", "b.md", "c.md"):
        _touch(tmp_path / name)

    files = collect_markdown_files(str(tmp_path), ["c.md", "missing.md", "a.md"])

    assert [os.path.basename(f) for f in files] == ["c.md", "a.md"]


def test_explicit_list_may_name_nested_and_non_md_files(tmp_path):
    _touch(tmp_path / "part1" / "ch1.md")
    _touch(tmp_path / "appendix.txt")

    files = collect_markdown_files(str(tmp_path), ["appendix.txt", "part1/ch1.md"])

    assert files == [
        os.path.join(str(tmp_path), "appendix.txt"),
        os.path.join(str(tmp_path), "part1/ch1.md"),
    ]


def test_walk_is_recursive_and_lexicographic(tmp_path):
    _touch(tmp_path / "b.md")
    _touch(tmp_path / "a" / "z.md")
    _touch(tmp_path / "10.md")
    _touch(tmp_path / "2.md")
    _touch(tmp_path / "notes.txt")

    files = collect_markdown_files(str(tmp_path))

    assert files == sorted(files)
    assert [os.path.relpath(f, tmp_path) for f in files] == [
        "10.md",
        "2.md",
        os.path.join("a", "z.md"),
        "b.md",
    ]


def test_missing_content_dir_raises(tmp_path):
    with pytest.raises(AssetError, match="Content directory"):
        collect_markdown_files(str(tmp_path / "nope"))


def test_image_extension():
    assert image_extension("cover.PNG") == "png"
    assert image_extension("cover.jpeg") == "jpeg"
    assert image_extension("cover.pdf") is None
    assert image_extension("cover") is None


def test_resolve_cover_requires_existing_image(tmp_path):
    images = tmp_path / "assets" / "images"
    images.mkdir(parents=True)
    (images / "cover.png").write_bytes(b"\x89PNG")
    (images / "cover.pdf").write_bytes(b"%PDF")

    path, ext = resolve_cover(str(tmp_path), "cover.png")
    assert ext == "png"
    assert path.endswith("cover.png")

    assert resolve_cover(str(tmp_path), "cover.pdf") == (None, None)
    assert resolve_cover(str(tmp_path), "absent.jpg") == (None, None)
    assert resolve_cover(str(tmp_path), None) == (None, None)
