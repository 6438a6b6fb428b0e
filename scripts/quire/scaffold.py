"""
Project scaffolding for `quire init`.

Creates the directory layout, a default book.yaml, one sample chapter,
and the default light/dark/html themes plus style.css. Existing files
are left untouched.
"""

import os

from quire.config import CONFIG_FILENAME, BookConfig


DIRECTORIES = [
    "content",
    os.path.join("assets", "fonts"),
    os.path.join("assets", "images"),
    "export",
]

SAMPLE_CHAPTER = """---
title: "Introduction"
---

Welcome to your new book!

This is a sample chapter. You can start writing your content here.

## Getting Started

Edit the files in the `content` directory to add your chapters.
"""

_PAGE_THEME = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <style>
        body {
            font-family: 'Georgia', serif;
            line-height: 1.6;
            max-width: 800px;
            margin: 0 auto;
            padding: 20px;
            background: %(background)s;
            color: %(color)s;
        }
        h1, h2, h3 {
            color: %(heading)s;
        }
        code {
            background: %(code)s;
            padding: 2px 6px;
            border-radius: 3px;
        }
        pre {
            background: %(code)s;
            padding: 15px;
            border-radius: 5px;
            overflow-x: auto;
        }
    </style>
</head>
<body>
    {{ content }}
</body>
</html>
"""

THEME_LIGHT = _PAGE_THEME % {
    "background": "#fff", "color": "#333", "heading": "#2c3e50", "code": "#f4f4f4",
}
THEME_DARK = _PAGE_THEME % {
    "background": "#1a1a1a", "color": "#e0e0e0", "heading": "#fff", "code": "#2d2d2d",
}

THEME_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <link rel="stylesheet" href="style.css">
</head>
<body>
    <div class="container">
        {{ content }}
    </div>
</body>
</html>
"""

STYLE_CSS = """body {
    font-family: 'Georgia', serif;
    line-height: 1.6;
    max-width: 800px;
    margin: 0 auto;
    padding: 20px;
    background: #fff;
    color: #333;
}

h1, h2, h3 {
    color: #2c3e50;
}

code {
    background: #f4f4f4;
    padding: 2px 6px;
    border-radius: 3px;
}

pre {
    background: #f4f4f4;
    padding: 15px;
    border-radius: 5px;
    overflow-x: auto;
}

img {
    max-width: 100%;
    height: auto;
}
"""

FILES = {
    os.path.join("content", "01-introduction.md"): SAMPLE_CHAPTER,
    os.path.join("assets", "theme-light.html"): THEME_LIGHT,
    os.path.join("assets", "theme-dark.html"): THEME_DARK,
    os.path.join("assets", "theme-html.html"): THEME_HTML,
    os.path.join("assets", "style.css"): STYLE_CSS,
}


def init_project(path):
    """Scaffold a book project at path. Returns the list of files created."""
    for directory in DIRECTORIES:
        os.makedirs(os.path.join(path, directory), exist_ok=True)

    created = []
    if not os.path.exists(os.path.join(path, CONFIG_FILENAME)):
        created.append(BookConfig.default().save(path))

    for rel_path, content in FILES.items():
        target = os.path.join(path, rel_path)
        if os.path.exists(target):
            continue
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)
        created.append(target)

    return created
