"""
PDF builder.

Pipeline:
    1. Compose cover + table of contents + chapters (page breaks between)
    2. Render into theme-light.html / theme-dark.html → export/temp_pdf.html
    3. Hand the HTML to the first external backend that succeeds:
         wkhtmltopdf → weasyprint → headless Chrome/Chromium
    4. Remove the temp HTML (and wkhtmltopdf's footer.html) regardless

Each backend is a plain function (html_path, pdf_path, run) that raises
PdfError on failure; `run` executes a command and raises PdfError on a
missing binary, non-zero exit or timeout.
"""

import functools
import html
import os
import pathlib

import fitz  # PyMuPDF

from quire.builders.base import BaseBuilder
from quire.errors import PdfError
from quire.resolve import resolve_cover, sanitize_filename
from quire.template import render_theme_file


THEMES = {
    "light": "theme-light.html",
    "dark": "theme-dark.html",
}
DEFAULT_THEME = "light"

TEMP_HTML = "temp_pdf.html"
FOOTER_HTML = "footer.html"

INSTALL_HINT = "install one of wkhtmltopdf, weasyprint, or Chrome/Chromium"

PAGE_BREAK = '<div style="page-break-before: always;"></div>'

# Page numbers and leader-dot TOC entries for CSS paged-media renderers
PAGED_MEDIA_CSS = """<style id="quire-paged-media">
@page {
    size: A4;
    margin: 2cm;
    @bottom-center { content: counter(page); }
}
.toc ul { list-style: none; padding-left: 0; }
.toc a::after {
    content: leader('.') target-counter(attr(href), page);
}
</style>
"""
PAGED_MEDIA_MARKER = 'id="quire-paged-media"'

FOOTER_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<script>
function subst() {
    var vars = {};
    var query = document.location.search.substring(1).split('&');
    for (var i = 0; i < query.length; i++) {
        var pair = query[i].split('=', 2);
        vars[pair[0]] = decodeURIComponent(pair[1]);
    }
    var nodes = document.getElementsByClassName('page');
    for (var j = 0; j < nodes.length; j++) {
        nodes[j].textContent = vars['page'];
    }
}
</script>
</head>
<body style="margin: 0;" onload="subst()">
<div style="text-align: center; font-size: 9pt; color: #666;"><span class="page"></span></div>
</body>
</html>
"""

CHROME_CANDIDATES = ("google-chrome", "chromium", "chromium-browser")


# ── HTML composition ───────────────────────────────────────────────────


def cover_fragment(book_dir, cover, title=""):
    """Full-page cover image, or "" for no cover or a non-image cover."""
    path, _ = resolve_cover(book_dir, cover)
    if not path:
        return ""
    uri = pathlib.Path(path).as_uri()
    return (
        '<div class="cover" style="page-break-after: always; height: 100vh; '
        'margin: 0; padding: 0; text-align: center;">\n'
        f'<img src="{uri}" alt="{html.escape(title)}" '
        'style="max-width: 100%; max-height: 100%; object-fit: contain;"/>\n'
        "</div>\n"
    )


def toc_fragment(documents):
    entries = "".join(
        f'<li><a href="#chapter-{index + 1}">{html.escape(doc.display_title(index))}</a></li>\n'
        for index, doc in enumerate(documents)
    )
    return (
        '<div class="toc" style="page-break-after: always;">\n'
        "<h1>Table of Contents</h1>\n"
        f"<ul>\n{entries}</ul>\n"
        "</div>\n"
    )


def body_fragment(documents):
    parts = []
    for index, doc in enumerate(documents):
        if index > 0:
            parts.append(PAGE_BREAK)
        parts.append(
            f'<h1 id="chapter-{index + 1}">{html.escape(doc.display_title(index))}</h1>\n'
            f"{doc.html}"
        )
    return "\n".join(parts)


def font_faces_fragment(book_dir, fonts):
    """@font-face rules for configured fonts (paths relative to book_dir)."""
    if not fonts:
        return ""
    rules = []
    for font in fonts:
        uri = pathlib.Path(os.path.abspath(os.path.join(book_dir, font["path"]))).as_uri()
        rules.append(
            f'@font-face {{ font-family: "{font["name"]}"; src: url("{uri}"); }}'
        )
    return "<style>\n" + "\n".join(rules) + "\n</style>\n"


def inject_paged_media_css(html_path):
    """Insert PAGED_MEDIA_CSS before </head> (or at the top). Applied once."""
    with open(html_path, "r", encoding="utf-8") as f:
        page = f.read()
    if PAGED_MEDIA_MARKER in page:
        return

    head_end = page.lower().find("</head>")
    if head_end == -1:
        page = PAGED_MEDIA_CSS + page
    else:
        page = page[:head_end] + PAGED_MEDIA_CSS + page[head_end:]

    with open(html_path, "w", encoding="utf-8") as f:
        f.write(page)


def footer_path(html_path):
    return os.path.join(os.path.dirname(html_path), FOOTER_HTML)


# ── Backends ───────────────────────────────────────────────────────────


def render_with_wkhtmltopdf(html_path, pdf_path, run):
    footer = footer_path(html_path)
    with open(footer, "w", encoding="utf-8") as f:
        f.write(FOOTER_TEMPLATE)

    run(
        [
            "wkhtmltopdf",
            "--enable-local-file-access",
            "--page-size", "A4",
            "--footer-html", footer,
            "--no-footer-line",
            "--disable-smart-shrinking",
            html_path,
            pdf_path,
        ],
        label="wkhtmltopdf",
    )


def render_with_weasyprint(html_path, pdf_path, run):
    inject_paged_media_css(html_path)
    run(["weasyprint", html_path, pdf_path], label="weasyprint")


def find_chrome(run):
    """First Chrome/Chromium binary that answers --version."""
    for name in CHROME_CANDIDATES:
        try:
            run([name, "--version"], label=name)
        except PdfError:
            continue
        return name
    raise PdfError("Chrome/Chromium not found")


def render_with_chrome(html_path, pdf_path, run):
    chrome = find_chrome(run)
    inject_paged_media_css(html_path)
    url = pathlib.Path(os.path.realpath(html_path)).as_uri()
    run(
        [
            chrome,
            "--headless",
            "--disable-gpu",
            f"--print-to-pdf={pdf_path}",
            url,
        ],
        label=chrome,
    )


BACKENDS = [
    ("wkhtmltopdf", render_with_wkhtmltopdf),
    ("weasyprint", render_with_weasyprint),
    ("chrome", render_with_chrome),
]


# ── Sample trimming ────────────────────────────────────────────────────


def trim_pdf(source, dest, start_page=1, end_page=None):
    """
    Copy pages start_page..end_page (1-based, inclusive) of source to dest.

    end_page=None means the last page; the range is clamped to the
    document. Returns the number of pages written.
    """
    with fitz.open(source) as doc:
        first = max(start_page or 1, 1)
        last = doc.page_count if end_page is None else min(end_page, doc.page_count)
        if first > last:
            raise PdfError(
                f"Sample range {start_page}-{end_page} selects no pages "
                f"(document has {doc.page_count})"
            )
        with fitz.open() as sample:
            sample.insert_pdf(doc, from_page=first - 1, to_page=last - 1)
            sample.save(dest)
    return last - first + 1


# ── Builders ───────────────────────────────────────────────────────────


class PdfBuilder(BaseBuilder):
    format_name = "PDF"
    extension = ".pdf"

    def __init__(self, *args, theme=DEFAULT_THEME, backends=None, **kwargs):
        super().__init__(*args, **kwargs)
        if theme not in THEMES:
            print(f"  Warning: unknown theme '{theme}', using '{DEFAULT_THEME}'")
            theme = DEFAULT_THEME
        self.theme = theme
        self.backends = BACKENDS if backends is None else backends
        self.timeout = self.config.get("pdf", {}).get("timeout")

    @property
    def temp_html(self):
        return os.path.join(self.output_dir, TEMP_HTML)

    def compose(self, documents):
        """Cover, table of contents and chapters as one HTML fragment."""
        return "\n".join([
            font_faces_fragment(self.book_dir, self.config.get("fonts")),
            cover_fragment(self.book_dir, self.config.get("cover"), self.config.title),
            toc_fragment(documents),
            body_fragment(documents),
        ])

    def build(self):
        self.header()
        self.render_book(self.output_file)
        print(f"  ✓ {self.output_file}")
        return self.output_file

    def render_book(self, pdf_path):
        """Write the themed HTML and convert it to pdf_path."""
        theme = self.require(THEMES[self.theme])
        self.log(f"  Theme: {theme}")

        rendered = render_theme_file(
            theme,
            title=self.config.title,
            content=self.compose(self.documents),
        )

        temp_html = self.temp_html
        with open(temp_html, "w", encoding="utf-8") as f:
            f.write(rendered)

        try:
            return self.run_backends(temp_html, pdf_path)
        finally:
            self._cleanup(temp_html)

    def run_backends(self, html_path, pdf_path):
        """Try each backend in order; return the name of the one that worked."""
        run = functools.partial(self.exec_cmd, timeout=self.timeout)
        failures = []

        for name, backend in self.backends:
            self.log(f"  Trying {name}...")
            try:
                backend(html_path, pdf_path, run)
            except PdfError as e:
                self.log(f"  ✗ {name} failed: {e}")
                failures.append(f"  {name}: {e}")
                continue
            self.log(f"  Rendered with {name}")
            return name

        if os.path.exists(pdf_path):
            os.remove(pdf_path)
        raise PdfError(
            "No PDF generator succeeded. Please " + INSTALL_HINT + ".\n"
            + "\n".join(failures)
        )

    def _cleanup(self, temp_html):
        for path in (temp_html, footer_path(temp_html)):
            if os.path.exists(path):
                os.remove(path)
        self.log("  Cleaned up intermediate files")


class SampleBuilder(PdfBuilder):
    """PDF of the configured sample page range."""

    format_name = "Sample PDF"
    extension = "-sample.pdf"

    @property
    def intermediate_pdf(self):
        return os.path.join(
            self.output_dir, f"{sanitize_filename(self.config.title)}-full.pdf"
        )

    def build(self):
        self.header()

        sample = self.config.get("sample") or {}
        start = sample.get("start_page", 1)
        end = sample.get("end_page")

        full_pdf = self.intermediate_pdf
        self.render_book(full_pdf)
        try:
            pages = trim_pdf(full_pdf, self.output_file, start, end)
        finally:
            if os.path.exists(full_pdf):
                os.remove(full_pdf)

        print(f"  ✓ {self.output_file} ({pages} pages)")
        return self.output_file
