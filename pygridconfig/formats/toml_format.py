"""TOML configuration sources.

TOML has no null value, so keys that would be null in JSON or YAML are simply
absent from a TOML document.
"""
from typing import Any

try:
    import tomllib  # Available in Python 3.11+
except ImportError:
    import tomli as tomllib  # Fallback for Python versions < 3.11

from ..core.base_format import BaseFormat


class TomlFormat(BaseFormat):
    """Parses TOML documents."""

    name = "toml"
    extensions = (".toml",)
    description = "Tom's Obvious, Minimal Language."
    errors = (tomllib.TOMLDecodeError,)

    def _parse(self, text: str) -> Any:
        return tomllib.loads(text, **self.options)
