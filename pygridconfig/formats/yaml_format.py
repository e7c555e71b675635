"""YAML configuration sources, parsed with PyYAML's safe loader."""
from typing import Any

import yaml

from ..core.base_format import BaseFormat


class YamlFormat(BaseFormat):
    """Parses YAML documents.

    Multi-document streams are rejected as malformed. Non-string
    mapping keys (``1: one``) are converted to strings. The safe loader takes
    no options, so passing any raises `TypeError`.
    """

    name = "yaml"
    aliases = ("yml",)
    extensions = (".yaml", ".yml")
    description = "YAML Ain't Markup Language."
    errors = (yaml.YAMLError,)
    takes_options = False

    def _parse(self, text: str) -> Any:
        return yaml.safe_load(text)
