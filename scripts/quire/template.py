"""
Theme template rendering.

Themes are HTML files with `{{ title }}` and `{{ content }}` placeholders.
Content is trusted HTML, so nothing is autoescaped; a placeholder with
no value is an error rather than an empty string.
"""

import jinja2

from quire.errors import TemplateError


_ENV = jinja2.Environment(
    autoescape=False,
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)


def render_template(source, title, content):
    """Substitute title and content into a theme template string."""
    try:
        template = _ENV.from_string(source)
        return template.render(title=title, content=content)
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(f"line {e.lineno}: {e.message}") from e
    except jinja2.UndefinedError as e:
        raise TemplateError(str(e)) from e


def render_theme_file(path, title, content):
    """Read a theme file and render it."""
    with open(path, "r", encoding="utf-8") as f:
        source = f.read()
    return render_template(source, title, content)
