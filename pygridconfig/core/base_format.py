"""
Base format adapter class that all configuration parsers inherit from.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, IO, Tuple, Type, Union

from .exceptions import SourceError


class BaseFormat(ABC):
    """Abstract base class for all configuration file formats.

    A format adapter turns a source document into a nested dictionary with
    string keys. Subclasses implement `loads` with their parser of choice;
    reading streams and files, and normalizing the parsed result, is shared
    here so every format hands the same shape to `GridConfig`.

    Attributes:
        name (str): The canonical name of the format (e.g., "json").
        aliases (Tuple[str, ...]): Other names accepted for the format.
        extensions (Tuple[str, ...]): File suffixes, including the dot.
        description (str): A brief description of the format.
        errors (Tuple[Type[Exception], ...]): The exceptions the parser
            raises for malformed documents.
        takes_options (bool): Whether the parser accepts keyword options.
    """

    name: str = "unnamed"
    aliases: Tuple[str, ...] = ()
    extensions: Tuple[str, ...] = ()
    description: str = "No description provided"
    errors: Tuple[Type[Exception], ...] = ()
    takes_options: bool = True

    def __init__(self, **options: Any) -> None:
        """Initializes the format with parser-specific options.

        Args:
            **options: Keyword arguments forwarded to the underlying parser,
                where the parser accepts any.

        Raises:
            TypeError: If options are given to a format whose parser takes
                none.
        """
        if options and not self.takes_options:
            raise TypeError(
                f"The {self.name} format takes no parser options, got: {', '.join(sorted(options))}"
            )
        self.options = options

    @abstractmethod
    def _parse(self, text: str) -> Any:
        """Parses a document into native Python values.

        Subclasses must override this method and call their parser. The result
        is normalized by `loads`.
        """
        raise NotImplementedError("Subclasses must implement _parse()")

    def loads(self, text: str) -> Dict[str, Any]:
        """Parses a document held in a string.

        Args:
            text (str): The document.

        Returns:
            Dict[str, Any]: The parsed nested mapping.

        Raises:
            SourceError: If the document is malformed or does not contain a
                mapping at the top level.
        """
        try:
            parsed = self._parse(text)
        except self.errors as e:
            raise SourceError(f"Invalid {self.name} document: {e}") from e
        return self._normalize(parsed)

    def load(self, stream: IO) -> Dict[str, Any]:
        """Parses a document from a text or binary stream."""
        data = stream.read()
        if isinstance(data, bytes):
            try:
                data = data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise SourceError(f"A {self.name} document must be UTF-8 encoded: {e}") from e
        return self.loads(data)

    def load_file(self, path: Union[str, Path]) -> Dict[str, Any]:
        """Parses a document from a file on disk."""
        try:
            with open(path, "rb") as f:
                return self.load(f)
        except OSError as e:
            raise SourceError(f"Could not read {path}: {e}") from e

    @classmethod
    def matches(cls, name: str) -> bool:
        """Checks whether `name` refers to this format, ignoring case."""
        name = name.lower().lstrip(".")
        return name == cls.name or name in cls.aliases

    def _normalize(self, parsed: Any) -> Dict[str, Any]:
        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise SourceError(
                f"A {self.name} configuration must contain a mapping at the top level, "
                f"got {type(parsed).__name__}"
            )
        return _stringify_keys(parsed)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


def _stringify_keys(value: Any) -> Any:
    """Recursively converts mapping keys to strings."""
    if isinstance(value, dict):
        return {str(key): _stringify_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_stringify_keys(item) for item in value]
    return value
