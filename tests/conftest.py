from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from quire.config import BookConfig


THEME = """<!DOCTYPE html>
<html>
<head><title>{{ title }}</title></head>
<body>
{{ content }}
</body>
</html>
"""


@pytest.fixture
def make_book(tmp_path: Path):
    """Build a book directory: book.yaml, assets/ themes, content/ chapters."""

    def _make(chapters: dict[str, str] | None = None, **config) -> Path:
        book_dir = tmp_path / "book"
        content = book_dir / "content"
        assets = book_dir / "assets"
        (assets / "images").mkdir(parents=True, exist_ok=True)
        content.mkdir(parents=True, exist_ok=True)

        data = {"title": "My Book: Vol. 1", "author": "Ada Writer"}
        data.update(config)
        (book_dir / "book.yaml").write_text(yaml.safe_dump(data), encoding="utf-8")

        for name in ("theme-light.html", "theme-dark.html", "theme-html.html"):
            (assets / name).write_text(THEME, encoding="utf-8")
        (assets / "style.css").write_text("body { color: #333; }\n", encoding="utf-8")

        if chapters is None:
            chapters = {
                "01-intro.md": '---\ntitle: "Intro"\n---\n\nWelcome & hello.\n',
                "02-body.md": "Just text, no frontmatter.\n",
            }
        for name, text in chapters.items():
            path = content / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")

        return book_dir

    return _make


@pytest.fixture
def load_config():
    def _load(book_dir: Path) -> BookConfig:
        return BookConfig.load(str(book_dir))

    return _load
