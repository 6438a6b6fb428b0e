"""
Base builder class for all output formats.

Subclasses implement `build()` and set `format_name` / `extension`.
Shared logic (document loading, output naming, logging, external
process invocation) lives here so every format sees the same chapters
in the same order.
"""

import os
import subprocess
from abc import ABC, abstractmethod

from quire.documents import parse_documents
from quire.errors import PdfError
from quire.highlight import highlight_documents
from quire.resolve import (
    collect_markdown_files,
    export_dir,
    resolve_asset,
    require_asset,
    sanitize_filename,
)


class BaseBuilder(ABC):
    """
    Abstract base for format builders.

    Subclasses must define:
        format_name:  str   — human-readable name ("EPUB", "PDF", etc.)
        extension:    str   — output file extension (".epub", ".pdf", etc.)
        build():      method — the actual build logic
    """

    format_name = None  # Override in subclass
    extension = None    # Override in subclass

    def __init__(self, config, book_dir, content_dir=None, verbose=False, **kwargs):
        self.config = config
        self.book_dir = book_dir
        self.content_dir = content_dir or os.path.join(book_dir, "content")
        self.verbose = verbose
        self.kwargs = kwargs
        self._documents = None

    # ── Output path ────────────────────────────────────────

    @property
    def output_dir(self):
        return export_dir(self.book_dir)

    @property
    def output_file(self):
        return os.path.join(
            self.output_dir, f"{sanitize_filename(self.config.title)}{self.extension}"
        )

    # ── Logging ────────────────────────────────────────────

    def log(self, msg):
        if self.verbose:
            print(msg)

    def header(self):
        print(f"\n{'─' * 60}")
        print(f"  Building {self.format_name}: {self.config.title}")
        print(f"{'─' * 60}")

    # ── Documents ──────────────────────────────────────────

    @property
    def documents(self):
        """Collected, parsed and highlighted documents, in book order."""
        if self._documents is None:
            files = collect_markdown_files(
                self.content_dir, self.config.get("md_file_list")
            )
            self.log(f"  Input: {len(files)} files from {self.content_dir}")
            self._documents = highlight_documents(parse_documents(files))
        return self._documents

    # ── Asset resolution (delegates to shared module) ──────

    def resolve(self, filename):
        """Resolve an asset filename for this book, or None."""
        return resolve_asset(self.book_dir, filename)

    def require(self, filename):
        """Resolve an asset filename; AssetError if it's missing."""
        return require_asset(self.book_dir, filename)

    def read_asset(self, filename):
        """Text of an optional asset, or None if it doesn't exist."""
        path = self.resolve(filename)
        if not path:
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    # ── External commands ──────────────────────────────────

    def exec_cmd(self, cmd, label="Command", timeout=None):
        """
        Execute a command, raising PdfError on any failure.

        A missing executable, a non-zero exit, and a timeout all count
        as failure; stderr is carried in the error message.
        """
        self.log(f"  $ {' '.join(str(c) for c in cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except FileNotFoundError:
            raise PdfError(f"{label}: {cmd[0]} not found")
        except subprocess.TimeoutExpired:
            raise PdfError(f"{label}: timed out after {timeout}s")
        except OSError as e:
            raise PdfError(f"{label}: could not start {cmd[0]}: {e}")

        if result.returncode != 0:
            detail = (result.stderr or "").strip()
            raise PdfError(f"{label} failed (exit {result.returncode}): {detail}")
        return result

    # ── Abstract interface ─────────────────────────────────

    @abstractmethod
    def build(self):
        """
        Execute the build. Returns the output path; raises QuireError on failure.
        """
        ...
