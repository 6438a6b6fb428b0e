"""
Source documents: frontmatter splitting and Markdown → HTML rendering.

Rendering uses markdown-it with strikethrough, tables, footnotes and
task lists enabled. Raw HTML in the source passes through unsanitized.
"""

import re

import yaml
from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin
from mdit_py_plugins.tasklists import tasklists_plugin

from quire.errors import MarkdownError


_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(?P<yaml>.*?)^---[ \t]*(?:\r?\n|\Z)",
    re.DOTALL | re.MULTILINE,
)

KNOWN_FIELDS = ("title", "author", "date")


class Frontmatter:
    """Metadata block from the top of a markdown file."""

    def __init__(self, title=None, author=None, date=None, extra=None):
        self.title = title
        self.author = author
        self.date = date
        self.extra = extra or {}

    @classmethod
    def from_mapping(cls, data):
        fields = {}
        extra = {}
        for key, value in data.items():
            if key in KNOWN_FIELDS:
                fields[key] = None if value is None else str(value)
            else:
                extra[str(key)] = value
        return cls(extra=extra, **fields)

    def get(self, key, default=None):
        if key in KNOWN_FIELDS:
            value = getattr(self, key)
            return default if value is None else value
        return self.extra.get(key, default)

    def __repr__(self):
        return f"Frontmatter(title={self.title!r}, author={self.author!r}, date={self.date!r})"


class SourceDocument:
    """One parsed markdown file. `html` is rewritten by the highlighter."""

    def __init__(self, path, frontmatter, content, html):
        self.path = path
        self.frontmatter = frontmatter
        self.content = content
        self.html = html

    @property
    def title(self):
        if self.frontmatter is None:
            return None
        return self.frontmatter.title

    def display_title(self, index):
        """Frontmatter title, or "Chapter N" for the 0-based index."""
        return self.title or f"Chapter {index + 1}"

    def __repr__(self):
        return f"SourceDocument({self.path!r})"


# ── Markdown renderer ──────────────────────────────────────────────────

_MD_PARSER = None

_VOID_INPUT_RE = re.compile(r"^(<input\b[^>]*?)\s*/?>$")


def _close_void_inputs(state):
    """Self-close the task-list checkbox when rendering XHTML."""
    if not state.md.options.get("xhtmlOut"):
        return
    for token in state.tokens:
        for child in token.children or ():
            if child.type == "html_inline":
                child.content = _VOID_INPUT_RE.sub(r"\1 />", child.content)


def _build_markdown_parser():
    md = MarkdownIt("commonmark")
    md.enable(["table", "strikethrough"])
    md.use(footnote_plugin)
    md.use(tasklists_plugin)
    md.core.ruler.after("github-tasklists", "xhtml_void_inputs", _close_void_inputs)
    return md


def _get_markdown_parser():
    global _MD_PARSER
    if _MD_PARSER is None:
        _MD_PARSER = _build_markdown_parser()
    return _MD_PARSER


def render_markdown(text):
    """Render a markdown body to an HTML fragment."""
    return _get_markdown_parser().render(text)


# ── Frontmatter ────────────────────────────────────────────────────────


def split_frontmatter(text, source="<string>"):
    """
    Split a leading ---delimited YAML block from the body.

    Returns (Frontmatter or None, body). An empty block gives an empty
    Frontmatter; a block that isn't valid YAML or isn't a mapping raises
    MarkdownError.
    """
    text = text.lstrip("\ufeff")
    match = _FRONTMATTER_RE.match(text)
    if not match:
        return None, text

    body = text[match.end():]
    try:
        data = yaml.safe_load(match.group("yaml"))
    except yaml.YAMLError as e:
        raise MarkdownError(f"Failed to parse frontmatter in {source}: {e}") from e

    if data is None:
        return Frontmatter(), body
    if not isinstance(data, dict):
        raise MarkdownError(
            f"Frontmatter in {source} must be a mapping, got {type(data).__name__}"
        )
    return Frontmatter.from_mapping(data), body


def parse_document(path):
    """Read one markdown file and render it."""
    with open(path, "r", encoding="utf-8") as f:
        text = f.read()

    frontmatter, body = split_frontmatter(text, source=path)
    return SourceDocument(
        path=path,
        frontmatter=frontmatter,
        content=body,
        html=render_markdown(body),
    )


def parse_documents(paths):
    return [parse_document(path) for path in paths]
