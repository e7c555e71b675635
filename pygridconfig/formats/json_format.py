"""JSON configuration sources, parsed with the standard library `json` module."""
import json
from typing import Any

from ..core.base_format import BaseFormat


class JsonFormat(BaseFormat):
    """Parses JSON documents.

    Options given to the constructor (e.g. ``parse_float=decimal.Decimal``)
    are passed through to `json.loads`.
    """

    name = "json"
    extensions = (".json",)
    description = "JavaScript Object Notation."
    errors = (json.JSONDecodeError,)

    def _parse(self, text: str) -> Any:
        return json.loads(text, **self.options)
