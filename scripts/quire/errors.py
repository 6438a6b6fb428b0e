"""
Error kinds raised by the quire pipeline.

Every export aborts on the first of these; the CLI prints the message
and exits non-zero. Plain filesystem failures surface as OSError.
"""


class QuireError(Exception):
    """Base class for all quire build errors."""
    kind = "Build"

    def __str__(self):
        return f"{self.kind} error: {super().__str__()}"


class ConfigError(QuireError):
    """Raised when book.yaml is missing or invalid."""
    kind = "Configuration"


class MarkdownError(QuireError):
    """Raised when a source file's frontmatter cannot be parsed."""
    kind = "Markdown parsing"


class TemplateError(QuireError):
    """Raised when a theme template is malformed or references unknown names."""
    kind = "Template"


class AssetError(QuireError):
    """Raised when a required theme file or content directory is missing."""
    kind = "Asset"


class PdfError(QuireError):
    """Raised when no PDF backend could render the book."""
    kind = "PDF generation"


class EpubZipError(QuireError):
    """Raised when the EPUB container cannot be written."""
    kind = "ZIP"
