"""
EPUB builder.

Pipeline: documents → chapterNNN.xhtml + content.opf + toc.ncx → zip.

Container layout, in write order:
    mimetype                  (stored, never compressed, always first)
    META-INF/container.xml
    OEBPS/content.opf
    OEBPS/toc.ncx
    OEBPS/chapter001.xhtml …
    OEBPS/style.css           (if assets/style.css exists)
    OEBPS/cover.{ext}         (if the configured cover is an image)
"""

import os
import uuid
import zipfile
from datetime import datetime, timezone
from xml.sax.saxutils import escape

from quire.builders.base import BaseBuilder
from quire.errors import EpubZipError
from quire.resolve import IMAGE_MEDIA_TYPES, resolve_cover


MIMETYPE = b"application/epub+zip"
STYLESHEET = "style.css"

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
    <rootfiles>
        <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
    </rootfiles>
</container>
"""

CHAPTER_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml" xml:lang="{lang}">
<head>
    <title>{title}</title>
    <link rel="stylesheet" type="text/css" href="{stylesheet}"/>
</head>
<body>
{heading}{body}
</body>
</html>
"""

NAV_POINT = """        <navPoint id="navpoint-{n}" playOrder="{n}">
            <navLabel>
                <text>{label}</text>
            </navLabel>
            <content src="{href}"/>
        </navPoint>
"""


def xml_escape(text):
    """Escape &, <, >, " and ' for XML text and attribute values."""
    return escape(str(text), {'"': "&quot;", "'": "&apos;"})


def chapter_href(n):
    """File name for the 1-based chapter n."""
    return f"chapter{n:03d}.xhtml"


class EpubBuilder(BaseBuilder):
    format_name = "EPUB"
    extension = ".epub"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.book_id = f"urn:uuid:{uuid.uuid4()}"

    def build(self):
        self.header()

        documents = self.documents
        css = self.read_asset(STYLESHEET)
        cover_path, cover_ext = resolve_cover(self.book_dir, self.config.get("cover"))

        if css is None:
            print("  Warning: No style.css found")
        if self.config.get("cover") and not cover_path:
            print(f"  Warning: Cover '{self.config.cover}' skipped (missing or not an image)")

        entries = [
            ("META-INF/container.xml", CONTAINER_XML),
            ("OEBPS/content.opf", self.render_opf(documents, css is not None, cover_ext)),
            ("OEBPS/toc.ncx", self.render_ncx(documents)),
        ]
        for index, doc in enumerate(documents):
            entries.append(
                (f"OEBPS/{chapter_href(index + 1)}", self.render_chapter(doc, index))
            )
        if css is not None:
            entries.append((f"OEBPS/{STYLESHEET}", css))
        if cover_path:
            with open(cover_path, "rb") as f:
                entries.append((f"OEBPS/cover.{cover_ext}", f.read()))
            self.log(f"  Cover: {cover_path}")

        self.log(f"  Chapters: {len(documents)}")
        self.write_container(self.output_file, entries)

        print(f"  ✓ {self.output_file}")
        return self.output_file

    # ── Container ──────────────────────────────────────────

    def write_container(self, path, entries):
        """Zip the entries after an uncompressed mimetype. Mimetype must be first."""
        try:
            with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zout:
                zout.writestr("mimetype", MIMETYPE, compress_type=zipfile.ZIP_STORED)
                for name, data in entries:
                    zout.writestr(name, data)
        except (OSError, zipfile.LargeZipFile) as e:
            if os.path.exists(path):
                os.remove(path)
            raise EpubZipError(f"Failed to write {path}: {e}") from e

    # ── Package document ───────────────────────────────────

    def render_opf(self, documents, has_css, cover_ext):
        modified = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")

        metadata = [
            f"        <dc:title>{xml_escape(self.config.title)}</dc:title>",
            f"        <dc:creator>{xml_escape(self.config.author)}</dc:creator>",
            f"        <dc:language>{xml_escape(self.config.lang)}</dc:language>",
            f'        <dc:identifier id="bookid">{self.book_id}</dc:identifier>',
            f'        <meta property="dcterms:modified">{modified}</meta>',
        ]
        manifest = [
            '        <item id="ncx" href="toc.ncx" media-type="application/x-dtbncx+xml"/>',
        ]
        if has_css:
            manifest.append(
                f'        <item id="style" href="{STYLESHEET}" media-type="text/css"/>'
            )
        if cover_ext:
            metadata.append('        <meta name="cover" content="cover-image"/>')
            manifest.append(
                f'        <item id="cover-image" href="cover.{cover_ext}" '
                f'media-type="{IMAGE_MEDIA_TYPES[cover_ext]}" properties="cover-image"/>'
            )

        spine = []
        for n in range(1, len(documents) + 1):
            manifest.append(
                f'        <item id="chapter{n}" href="{chapter_href(n)}" '
                'media-type="application/xhtml+xml"/>'
            )
            spine.append(f'        <itemref idref="chapter{n}"/>')

        return "\n".join([
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="bookid">',
            '    <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">',
            *metadata,
            "    </metadata>",
            "    <manifest>",
            *manifest,
            "    </manifest>",
            '    <spine toc="ncx">',
            *spine,
            "    </spine>",
            "</package>",
            "",
        ])

    # ── Navigation ─────────────────────────────────────────

    def render_ncx(self, documents):
        nav_points = "".join(
            NAV_POINT.format(
                n=index + 1,
                label=xml_escape(doc.display_title(index)),
                href=chapter_href(index + 1),
            )
            for index, doc in enumerate(documents)
        )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">\n'
            "    <head>\n"
            f'        <meta name="dtb:uid" content="{self.book_id}"/>\n'
            '        <meta name="dtb:depth" content="1"/>\n'
            '        <meta name="dtb:totalPageCount" content="0"/>\n'
            '        <meta name="dtb:maxPageNumber" content="0"/>\n'
            "    </head>\n"
            "    <docTitle>\n"
            f"        <text>{xml_escape(self.config.title)}</text>\n"
            "    </docTitle>\n"
            "    <navMap>\n"
            f"{nav_points}"
            "    </navMap>\n"
            "</ncx>\n"
        )

    # ── Chapters ───────────────────────────────────────────

    def render_chapter(self, doc, index):
        # Rendered markdown is already markup; only our own text is escaped
        heading = f"<h1>{xml_escape(doc.title)}</h1>\n" if doc.title else ""
        return CHAPTER_XHTML.format(
            lang=xml_escape(self.config.lang),
            title=xml_escape(doc.display_title(index)),
            stylesheet=STYLESHEET,
            heading=heading,
            body=doc.html,
        )
