"""
quire — markdown-to-book publishing toolchain (HTML, EPUB, PDF).

Public API:
    from quire.config import BookConfig
    from quire.resolve import collect_markdown_files, sanitize_filename
    from quire.documents import parse_document, split_frontmatter
    from quire.highlight import highlight_code_blocks
    from quire.template import render_template
    from quire.builders import BUILDERS
    from quire.scaffold import init_project
"""

__version__ = "0.1.0"
