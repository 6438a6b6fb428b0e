"""
Source discovery, output naming, and asset lookup.

Every builder that needs to gather a book's markdown files, name its
output, or locate theme/cover assets imports from here.
"""

import os
import re

from quire.errors import AssetError


ASSETS_DIR = "assets"
EXPORT_DIR = "export"

# Cover formats an EPUB reader can display; anything else is skipped
IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg")

IMAGE_MEDIA_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_filename(name):
    """Replace every character outside [A-Za-z0-9_-] with '-'."""
    return _UNSAFE_FILENAME_CHARS.sub("-", name)


def collect_markdown_files(content_dir, md_file_list=None):
    """
    Gather the book's markdown files in reading order.

    With an explicit md_file_list, names are resolved against content_dir
    and kept in list order; names that don't exist are dropped. Otherwise
    every *.md under content_dir is collected and sorted by full path.
    """
    if not os.path.isdir(content_dir):
        raise AssetError(f"Content directory does not exist: {content_dir}")

    if md_file_list is not None:
        files = []
        for name in md_file_list:
            path = os.path.join(content_dir, name)
            if os.path.isfile(path):
                files.append(path)
        return files

    files = []
    for root, dirs, names in os.walk(content_dir):
        for fname in names:
            if fname.endswith(".md"):
                files.append(os.path.join(root, fname))
    files.sort()
    return files


def resolve_asset(book_dir, filename):
    """Path to an asset under {book_dir}/assets, or None if it doesn't exist."""
    if not filename:
        return None
    path = os.path.join(book_dir, ASSETS_DIR, filename)
    if os.path.exists(path):
        return os.path.abspath(path)
    return None


def require_asset(book_dir, filename):
    """Like resolve_asset, but a missing file is an AssetError."""
    path = resolve_asset(book_dir, filename)
    if not path:
        raise AssetError(
            f"Theme file not found: {os.path.join(book_dir, ASSETS_DIR, filename)}"
        )
    return path


def image_extension(filename):
    """Lowercased extension if filename is a supported image, else None."""
    ext = os.path.splitext(filename)[1].lstrip(".").lower()
    return ext if ext in IMAGE_EXTENSIONS else None


def resolve_cover(book_dir, cover):
    """
    Locate the configured cover under assets/images/.

    Returns (path, extension) for an existing image-type cover,
    or (None, None) for no cover, a missing file, or a non-image format.
    """
    if not cover:
        return None, None
    ext = image_extension(cover)
    if not ext:
        return None, None
    path = resolve_asset(book_dir, os.path.join("images", cover))
    if not path:
        return None, None
    return path, ext


def export_dir(book_dir):
    """Create (if needed) and return {book_dir}/export."""
    path = os.path.join(book_dir, EXPORT_DIR)
    os.makedirs(path, exist_ok=True)
    return path
