"""
Command-line entry point.

Usage:
    quire init [path]                       Scaffold a new book project
    quire pdf [--theme light|dark]          Build export/{title}.pdf
    quire epub                              Build export/{title}.epub
    quire html                              Build export/{title}.html
    quire sample [light|dark]               Build export/{title}-sample.pdf

pdf, epub and html accept --book-dir (default .) and --content
(default {book-dir}/content).
"""

import argparse
import os
import sys
import traceback

from quire.builders import BUILDERS
from quire.config import BookConfig
from quire.errors import QuireError
from quire.scaffold import init_project


# ── Commands ───────────────────────────────────────────────────────────


def cmd_init(args):
    """Scaffold a new book project."""
    created = init_project(args.path)
    for path in created:
        print(f"  + {path}")
    print(f"Initialized new book project at: {args.path}")


def cmd_build(args):
    """Build one output format."""
    book_dir = args.book_dir
    content_dir = args.content or os.path.join(book_dir, "content")

    config = BookConfig.load(book_dir)
    config.summary()

    kwargs = {"verbose": args.verbose}
    if args.command in ("pdf", "sample"):
        kwargs["theme"] = args.theme

    builder = BUILDERS[args.command](
        config=config,
        book_dir=book_dir,
        content_dir=content_dir,
        **kwargs,
    )
    builder.build()
    print(f"\n  {builder.format_name} generated successfully!")


# ── Argument Parser ────────────────────────────────────────────────────


def build_parser():
    parser = argparse.ArgumentParser(
        prog="quire",
        description="Write books in markdown and export them to PDF, EPUB and HTML",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  %(prog)s init mybook                 Create a new book project
  %(prog)s pdf --theme dark            Dark-themed PDF of ./content
  %(prog)s epub --book-dir mybook      EPUB of mybook/content
  %(prog)s sample                      Sample PDF using book.yaml's page range
        """,
    )

    sub = parser.add_subparsers(dest="command")

    init_p = sub.add_parser("init", help="Initialize a new book project")
    init_p.add_argument("path", nargs="?", default=".", help="Where to create the book")

    pdf_p = sub.add_parser("pdf", help="Generate a PDF eBook")
    pdf_p.add_argument("--theme", choices=["light", "dark"], default="light")
    _add_book_args(pdf_p)

    epub_p = sub.add_parser("epub", help="Generate an EPUB eBook")
    _add_book_args(epub_p)

    html_p = sub.add_parser("html", help="Generate an HTML eBook")
    _add_book_args(html_p)

    sample_p = sub.add_parser("sample", help="Generate a sample PDF")
    sample_p.add_argument("theme", nargs="?", choices=["light", "dark"], default="light")
    sample_p.add_argument("--verbose", "-v", action="store_true")
    sample_p.set_defaults(book_dir=".", content=None)

    return parser


def _add_book_args(parser):
    parser.add_argument("--content", help="Content directory (default: {book-dir}/content)")
    parser.add_argument("--book-dir", default=".", help="Book directory with book.yaml and assets/")
    parser.add_argument("--verbose", "-v", action="store_true")


# ── Main ───────────────────────────────────────────────────────────────


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        if args.command == "init":
            cmd_init(args)
        else:
            cmd_build(args)
    except (QuireError, OSError) as e:
        print(f"\nError: {e}")
        return 1
    return 0


def run():
    """Console-script wrapper: crash log on unexpected errors."""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nCancelled.")
        sys.exit(1)
    except Exception as e:
        log_path = "build_error.log"
        with open(log_path, "w") as f:
            traceback.print_exc(file=f)
        print(f"\nUnexpected error: {e}")
        print(f"Full traceback written to {log_path}")
        sys.exit(1)
