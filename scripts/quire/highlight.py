"""
Fenced code block post-processing.

Scans rendered HTML for the exact shape markdown-it emits for fenced
code, `<pre><code class="language-X">...</code></pre>`, and checks the
language against Pygments' lexer registry. Known languages keep their
class and code untouched so the page stylesheet can style them; unknown
languages lose the class. Blocks containing nested tags are left alone.

Running the pass over its own output changes nothing.
"""

import functools
import html
import re

from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound


_CODE_BLOCK_RE = re.compile(
    r'<pre><code(?: class="language-(?P<lang>[\w+#.-]+)")?>(?P<code>[^<]*)</code></pre>'
)


@functools.lru_cache(maxsize=None)
def find_lexer(language):
    """Pygments lexer for a fence language token, or None if unknown."""
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return None


def is_known_language(language):
    return bool(language) and find_lexer(language.lower()) is not None


def _normalize_escapes(code):
    return html.escape(html.unescape(code))


def _replace_block(match):
    language = match.group("lang")
    code = match.group("code")

    if language and is_known_language(language):
        return f'<pre><code class="language-{language}">{code}</code></pre>'
    return f"<pre><code>{_normalize_escapes(code)}</code></pre>"


def highlight_code_blocks(rendered):
    """Rewrite every canonical fenced code block in an HTML string."""
    return _CODE_BLOCK_RE.sub(_replace_block, rendered)


def highlight_documents(documents):
    """Apply highlight_code_blocks to each document's html in place."""
    for doc in documents:
        doc.html = highlight_code_blocks(doc.html)
    return documents
