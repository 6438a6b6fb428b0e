#!/usr/bin/env python3
"""
Run quire without installing it.

Usage:
    python scripts/build.py init mybook
    python scripts/build.py pdf --book-dir mybook --theme dark
    python scripts/build.py epub --book-dir mybook
    python scripts/build.py html --book-dir mybook

Requires: PyYAML, markdown-it-py, mdit-py-plugins, Pygments, Jinja2, PyMuPDF
Optional: wkhtmltopdf, weasyprint, or Chrome/Chromium (PDF)
"""

import os
import sys

# Ensure quire is importable from the scripts/ directory
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from quire.cli import run


if __name__ == "__main__":
    run()
