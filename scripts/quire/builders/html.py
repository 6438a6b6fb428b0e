"""
HTML builder.

Pipeline: documents → one joined body → theme-html.html → export/{title}.html,
with the theme's style.css copied alongside.
"""

import html
import os
import shutil

from quire.builders.base import BaseBuilder
from quire.template import render_theme_file


THEME_FILE = "theme-html.html"
STYLESHEET = "style.css"
SEPARATOR = "\n<hr>\n"


def chapter_heading(doc):
    """`<h1>` for a document's frontmatter title, or "" without one."""
    if not doc.title:
        return ""
    return f"<h1>{html.escape(doc.title)}</h1>"


def join_documents(documents):
    return SEPARATOR.join(
        f"{chapter_heading(doc)}\n{doc.html}" for doc in documents
    )


class HtmlBuilder(BaseBuilder):
    format_name = "HTML"
    extension = ".html"

    def build(self):
        self.header()

        theme = self.require(THEME_FILE)
        self.log(f"  Theme: {theme}")

        rendered = render_theme_file(
            theme,
            title=self.config.title,
            content=join_documents(self.documents),
        )

        with open(self.output_file, "w", encoding="utf-8") as f:
            f.write(rendered)

        css_path = self.resolve(STYLESHEET)
        if css_path:
            shutil.copyfile(css_path, os.path.join(self.output_dir, STYLESHEET))
            self.log(f"  CSS:   {css_path}")

        print(f"  ✓ {self.output_file}")
        return self.output_file
