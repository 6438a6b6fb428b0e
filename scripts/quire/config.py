"""
Book configuration: load, validate, and provide defaults for book.yaml.
"""

import copy
import os

import yaml

from quire.errors import ConfigError


CONFIG_FILENAME = "book.yaml"

# Fields required in every book.yaml
REQUIRED_FIELDS = ["title", "author"]

# Scalars YAML may parse as numbers or dates (title: 1984, version: 1.0)
STRING_FIELDS = ["title", "author", "language", "version", "cover"]

# Defaults applied if missing
DEFAULTS = {
    "language": "en",
    "cover": None,
    "version": None,
    "md_file_list": None,
    "sample": {},
    "fonts": [],
    "pdf": {},
}

# Defaults within sub-configs
SAMPLE_DEFAULTS = {
    "start_page": 1,
    "end_page": None,
}

PDF_DEFAULTS = {
    "timeout": None,
}

# Written by `quire init`
SCAFFOLD = {
    "title": "My Book",
    "author": "Author Name",
    "language": "en",
    "version": "1.0.0",
}


class BookConfig:
    """
    Loaded, validated book configuration.

    Usage:
        config = BookConfig.load(book_dir)
        config.title               # "The Trench Mage"
        config.sample["end_page"]  # None
        config.get("cover")        # None if not set
    """

    def __init__(self, data, book_dir=None):
        self._data = data
        self.book_dir = book_dir

    @classmethod
    def load(cls, book_dir):
        """Load and validate book.yaml from a book directory."""
        yaml_path = os.path.join(book_dir, CONFIG_FILENAME)
        if not os.path.exists(yaml_path):
            raise ConfigError(f"Configuration file not found: {yaml_path}")

        with open(yaml_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Failed to parse {CONFIG_FILENAME}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(
                f"{CONFIG_FILENAME} must be a YAML mapping, got {type(data).__name__}"
            )

        # Validate required fields
        missing = [key for key in REQUIRED_FIELDS if not data.get(key)]
        if missing:
            raise ConfigError(
                f"{CONFIG_FILENAME} missing required fields: {', '.join(missing)}"
            )

        # Apply top-level defaults
        for key, default in DEFAULTS.items():
            if data.get(key) is None:
                data[key] = copy.deepcopy(default)

        _validate(data)

        # Apply sub-section defaults
        for key, default in SAMPLE_DEFAULTS.items():
            data["sample"].setdefault(key, default)
        for key, default in PDF_DEFAULTS.items():
            data["pdf"].setdefault(key, default)

        return cls(data, book_dir)

    @classmethod
    def default(cls):
        """Configuration written into freshly scaffolded projects."""
        return cls(dict(SCAFFOLD))

    def save(self, book_dir):
        """Write this configuration as book.yaml under book_dir."""
        yaml_path = os.path.join(book_dir, CONFIG_FILENAME)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self._data, f, sort_keys=False, allow_unicode=True)
        return yaml_path

    # ── Attribute access ───────────────────────────────────

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"BookConfig has no field '{name}'")

    def get(self, key, default=None):
        return self._data.get(key, default)

    # ── Convenience ────────────────────────────────────────

    @property
    def lang(self):
        return self.get("language") or "en"

    def summary(self):
        """Print a short config summary."""
        print(f"\n  Book:   {self.title}")
        print(f"  Author: {self.author}")
        if self.book_dir:
            print(f"  Source: {self.book_dir}")
        if self.get("version"):
            print(f"  Version: {self.version}")


def _validate(data):
    """Type checks; scalar string fields are coerced to str in place."""
    for key in STRING_FIELDS:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            raise ConfigError(f"{key} must be a string")
        data[key] = str(value)

    files = data.get("md_file_list")
    if files is not None:
        if not isinstance(files, list) or not all(isinstance(f, str) for f in files):
            raise ConfigError("md_file_list must be a list of filenames")

    for key in ("sample", "pdf"):
        if not isinstance(data[key], dict):
            raise ConfigError(f"'{key}' must be a mapping")

    fonts = data.get("fonts")
    if not isinstance(fonts, list):
        raise ConfigError("fonts must be a list of {name, path} entries")
    for font in fonts:
        if not isinstance(font, dict) or not font.get("name") or not font.get("path"):
            raise ConfigError("each font entry needs a 'name' and a 'path'")
