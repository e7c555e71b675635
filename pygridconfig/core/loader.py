"""Builds `GridConfig` values from configuration sources.

This module handles choosing a parser and reading the source:
1.  Discovering all available `BaseFormat` implementations.
2.  Selecting one by declared name, or by the suffix of the source.
3.  Reading the document from a file, a URL or an open stream.
4.  Wrapping the parsed mapping in a `GridConfig`.
"""

import os
import pkgutil
import inspect
import logging
from pathlib import Path, PurePosixPath
from typing import Any, List, Optional, Type, Union
from urllib.parse import urlparse

from .base_format import BaseFormat
from .config import Config
from .exceptions import SourceError, UnsupportedFormatError
from .grid_config import GridConfig
from .. import formats as formats_package
from ..utils.remote import fetch_source, is_remote

# Initialize a logger for this module.
logger = logging.getLogger(__name__)


def discover_formats() -> List[Type[BaseFormat]]:
    """Discovers all format classes within the `pygridconfig.formats` package.

    This function iterates through the modules in the `formats` package,
    inspects their members, and collects all classes that are subclasses of
    `BaseFormat` (excluding `BaseFormat` itself).

    Returns:
        List[Type[BaseFormat]]: The discovered format classes, sorted by name.
    """
    found = {}
    path = os.path.dirname(formats_package.__file__)

    for _, name, _ in pkgutil.iter_modules([path]):
        try:
            module = __import__(f"pygridconfig.formats.{name}", fromlist=["*"])
            for _, item in inspect.getmembers(module, inspect.isclass):
                if issubclass(item, BaseFormat) and item is not BaseFormat:
                    found[item.name] = item
        except ImportError as e:
            logger.warning(f"Could not import format module {name}: {e}")
    return [found[name] for name in sorted(found)]


def get_format(name: str, **options: Any) -> BaseFormat:
    """Returns a format adapter by name or alias, ignoring case.

    Args:
        name (str): The format name, e.g. "JSON", "toml" or "yml".
        **options: Passed to the format's constructor.

    Raises:
        UnsupportedFormatError: If no format has this name.
        TypeError: If the format takes no parser options but some are given.
    """
    for format_cls in discover_formats():
        if format_cls.matches(name):
            return format_cls(**options)
    raise UnsupportedFormatError(f"Unsupported configuration format: '{name}'")


def detect_format(path: Union[str, Path], **options: Any) -> BaseFormat:
    """Returns the format adapter matching the suffix of a file name.

    Raises:
        UnsupportedFormatError: If the suffix is not known to any format.
    """
    suffix = Path(path).suffix.lower()
    for format_cls in discover_formats():
        if suffix in format_cls.extensions:
            return format_cls(**options)
    raise UnsupportedFormatError(f"Cannot detect the configuration format of '{path}'")


def _resolve_format(source: Any, fmt: Any, **options: Any) -> BaseFormat:
    if isinstance(fmt, BaseFormat):
        return fmt
    if fmt and fmt != "auto":
        return get_format(fmt, **options)
    if is_remote(source):
        return detect_format(PurePosixPath(urlparse(source).path), **options)
    if isinstance(source, (str, Path)):
        return detect_format(source, **options)
    raise UnsupportedFormatError("A format must be given when loading from a stream")


def load_config(
    source: Any,
    fmt: Union[str, BaseFormat, None] = None,
    config: Optional[Config] = None,
    **options: Any,
) -> GridConfig:
    """Loads a `GridConfig` from a file, a URL or a stream.

    Args:
        source (Any): A file path, an ``http(s)://`` URL, or an object with a
            `read` method returning text or bytes.
        fmt (Union[str, BaseFormat, None]): A format name, a format instance,
            or None (or "auto") to detect the format from the file suffix.
        config (Optional[Config]): The tool settings, used for the network
            timeout and retries of remote sources.
        **options: Passed to the format adapter's parser.

    Returns:
        GridConfig: The parsed configuration.

    Raises:
        UnsupportedFormatError: If the format is unknown or cannot be detected.
        SourceError: If the source does not exist or cannot be parsed.
    """
    config = config if config is not None else Config()
    parser = _resolve_format(source, fmt, **options)
    logger.info(f"Loading {parser.name} configuration from {source!r}")

    try:
        if hasattr(source, "read"):
            parsed = parser.load(source)
        elif is_remote(source):
            text = fetch_source(source, timeout=config.get("timeout", 30), retries=config.get("retries", 3))
            parsed = parser.loads(text)
        elif Path(source).is_file():
            parsed = parser.load_file(source)
        else:
            raise SourceError(f"Configuration file not found: {source}")
    except SourceError as e:
        logger.error(f"Failed to load configuration from {source!r}: {e}")
        raise

    return GridConfig(parsed)
