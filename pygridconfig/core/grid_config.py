"""The hierarchical configuration value and its unfolding.

A `GridConfig` wraps one nested dictionary with string keys. Values can be
read and written with dot separated paths (``"group.key"``), enumerated as
sorted leaf paths, and unfolded: every sequence-valued entry named by the
caller is expanded into one configuration per element, combined across keys
as a Cartesian product.

Example:
    >>> config = GridConfig({"model": {"lr": [0.1, 0.01]}, "seed": 1})
    >>> [c["model.lr"] for c in config.unfold("model.lr")]
    [0.1, 0.01]
"""

import copy
import logging
from collections import namedtuple
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from .exceptions import PathSegmentError

logger = logging.getLogger(__name__)


class _Missing:
    """Private marker for "no value stored at this path"."""

    def __repr__(self) -> str:
        return "<missing>"


_MISSING = _Missing()


class _AllKeys:
    """Marker requesting that every leaf path be unfolded."""

    def __repr__(self) -> str:
        return "ALL"


ALL = _AllKeys()


class ValueKind(Enum):
    """The three shapes a stored value can take."""
    SCALAR = "scalar"
    SEQUENCE = "sequence"
    GROUP = "group"


def kind_of(value: Any) -> ValueKind:
    """Classifies a value returned by `GridConfig.get`.

    Strings and bytes are scalars even though they are iterable. Anything that
    is neither a list, a tuple nor a group is treated as a scalar.
    """
    if isinstance(value, (GridConfig, dict)):
        return ValueKind.GROUP
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    return ValueKind.SCALAR


def _freeze(value: Any) -> Any:
    """Builds a hashable mirror of a JSON-like value."""
    if isinstance(value, dict):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, set):
        return frozenset(_freeze(item) for item in value)
    return value


class GridConfig:
    """A hierarchical configuration using string keys.

    Indexing:
    * indexable with dot separated hierarchical keys (e.g. ``"group.key"``);
    * a default value can be passed to `get`;
    * if a key does not exist, the default is returned instead of raising;
    * the default value defaults to ``None``.

    Field access:
    * first-level keys are readable and writable as attributes
      (``config.group.key``), or explicitly through `get_field`/`set_field`
      when a key collides with a method name.

    Groups returned by indexing are views: they share the parent's nested
    dictionary, so writes through a view are visible in the parent.
    """

    def __init__(self, cfg: Optional[Mapping] = None) -> None:
        if cfg is None:
            cfg = {}
        elif isinstance(cfg, GridConfig):
            cfg = cfg.as_dict()
        elif not isinstance(cfg, dict):
            cfg = dict(cfg)
        object.__setattr__(self, "_cfg", cfg)

    @classmethod
    def load(cls, source: Any, fmt: Any = None, **options: Any) -> "GridConfig":
        """Loads a configuration from a file, URL or stream.

        Args:
            source (Any): A path, an ``http(s)://`` URL or a readable stream.
            fmt (Any): A format name ("json", "toml", "yaml"), a format
                instance, or None to detect it from the file suffix.
            **options: Passed to the format adapter.

        Returns:
            GridConfig: The parsed configuration.
        """
        from .loader import load_config

        return load_config(source, fmt=fmt, **options)

    # -- conversion -----------------------------------------------------------

    def as_dict(self) -> Dict[str, Any]:
        """Returns the wrapped dictionary itself (not a copy)."""
        return self._cfg

    as_mapping = as_dict

    def as_namedtuple(self) -> tuple:
        """Returns the first-level fields as a namedtuple.

        Keys that are not valid identifiers are renamed positionally
        (``_0``, ``_1``, ...), as `collections.namedtuple` does.
        """
        names = self.field_names()
        fields = namedtuple("GridConfigFields", names, rename=True)
        return fields(*(self.get_field(name) for name in names))

    def copy(self) -> "GridConfig":
        """Returns an independent deep copy."""
        return GridConfig(copy.deepcopy(self._cfg))

    def __deepcopy__(self, memo: Dict[int, Any]) -> "GridConfig":
        return GridConfig(copy.deepcopy(self._cfg, memo))

    def empty(self) -> "GridConfig":
        """Returns a new, empty configuration."""
        return GridConfig()

    # -- paths ----------------------------------------------------------------

    def get(self, path: str, default: Any = None) -> Any:
        """Retrieves a value using a dot-separated path.

        Args:
            path (str): The dot-separated key (e.g. "group.key").
            default (Any): Returned when any segment of the path is missing.

        Returns:
            Any: A `GridConfig` view if the value is a group, the stored value
            otherwise, or `default` if the path does not exist.

        Raises:
            PathSegmentError: If a non-final segment is not a group.
        """
        value: Any = self._cfg
        parent = ""
        for segment in path.split("."):
            if not isinstance(value, dict):
                raise PathSegmentError(path, parent)
            if segment not in value:
                return default
            value = value[segment]
            parent = segment
        return GridConfig(value) if isinstance(value, dict) else value

    def set(self, path: str, value: Any) -> None:
        """Sets a value using a dot-separated path.

        Missing intermediate groups are created.

        Args:
            path (str): The dot-separated key (e.g. "group.key").
            value (Any): The value to store. A `GridConfig` is stored as its
                underlying dictionary.

        Raises:
            PathSegmentError: If an existing intermediate value is not a group.
        """
        *groups, leaf = path.split(".")
        target = self._cfg
        for segment in groups:
            target = target.setdefault(segment, {})
            if not isinstance(target, dict):
                raise PathSegmentError(path, segment)
        if isinstance(value, GridConfig):
            value = value.as_dict()
        target[leaf] = value

    def has(self, path: str) -> bool:
        """Checks whether a path exists; a stored None counts as present."""
        return self.get(path, default=_MISSING) is not _MISSING

    def __getitem__(self, path: str) -> Any:
        return self.get(path)

    def __setitem__(self, path: str, value: Any) -> None:
        self.set(path, value)

    def __contains__(self, path: object) -> bool:
        return isinstance(path, str) and self.has(path)

    # -- enumeration ----------------------------------------------------------

    def keys(self, prefix: Optional[str] = None) -> List[str]:
        """Returns every leaf path, sorted.

        Args:
            prefix (Optional[str]): If given, only the leaf paths under this
                group, still fully qualified.

        Returns:
            List[str]: The sorted leaf paths. A missing prefix yields an empty
            list.

        Raises:
            PathSegmentError: If `prefix` names a value that is not a group.
        """
        if prefix is not None:
            group = self.get(prefix, default=_MISSING)
            if group is _MISSING:
                return []
            if not isinstance(group, GridConfig):
                raise PathSegmentError(prefix, prefix.rsplit(".", 1)[-1])
            return [f"{prefix}.{key}" for key in group.keys()]

        all_keys = []
        for key, value in self._cfg.items():
            if isinstance(value, dict):
                all_keys.extend(f"{key}.{subkey}" for subkey in GridConfig(value).keys())
            else:
                all_keys.append(key)
        return sorted(all_keys)

    def values(self, prefix: Optional[str] = None) -> Iterator[Any]:
        """Yields the value of every leaf path, in key order."""
        return (self.get(key) for key in self.keys(prefix))

    def pairs(self, prefix: Optional[str] = None) -> Iterator[Tuple[str, Any]]:
        """Yields ``(path, value)`` for every leaf path, in key order."""
        return ((key, self.get(key)) for key in self.keys(prefix))

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        return self.pairs()

    def __len__(self) -> int:
        return len(self.keys())

    def is_empty(self) -> bool:
        return len(self) == 0

    def filter(self, predicate: Callable[[str, Any], bool]) -> "GridConfig":
        """Keeps only the leaf entries for which ``predicate(path, value)`` holds.

        Returns:
            GridConfig: A new configuration holding the retained leaves at
            their original paths.
        """
        filtered = self.empty()
        for path, value in self:
            if predicate(path, value):
                filtered.set(path, value)
        return filtered

    # -- fields ---------------------------------------------------------------

    def get_field(self, name: str) -> Any:
        return self.get(name)

    def set_field(self, name: str, value: Any) -> None:
        self.set(name, value)

    def has_field(self, name: str) -> bool:
        return self.has(name)

    def field_names(self) -> List[str]:
        """Returns the first-level keys, sorted."""
        return sorted(self._cfg)

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, so methods win over keys.
        if name.startswith("_"):
            raise AttributeError(name)
        return self.get_field(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or hasattr(type(self), name):
            raise AttributeError(f"Cannot assign field '{name}' as an attribute; use set_field()")
        self.set_field(name, value)

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self.field_names()))

    # -- comparison -----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GridConfig):
            return NotImplemented
        return self._cfg == other._cfg

    def __hash__(self) -> int:
        return hash((type(self).__name__, _freeze(self._cfg)))

    def __repr__(self) -> str:
        from ..utils.display import format_config

        return format_config(self)

    # -- unfolding ------------------------------------------------------------

    def unfold(self, *keys: Any) -> List["GridConfig"]:
        """Unfolds this configuration at `keys`; see `unfold`."""
        return unfold(self, *keys)


def as_dict(config: GridConfig) -> Dict[str, Any]:
    """Returns the hierarchical configuration as a native dict."""
    return config.as_dict()


def as_namedtuple(config: GridConfig) -> tuple:
    """Returns the first-level fields of a configuration as a namedtuple."""
    return config.as_namedtuple()


def unfold(config: GridConfig, *keys: Any) -> List[GridConfig]:
    """Unfolds a configuration at `keys`.

    For every key whose value is a sequence, one copy of `config` is made per
    item, with the key set to that item. For every key whose value is a group,
    the group is fully unfolded first and one copy is made per resulting
    variant. Keys holding scalars, or missing keys, do not branch. With
    several keys every combination is produced; the first key varies slowest.

    Passing `ALL` as the only key unfolds every leaf path. With no keys the
    result is ``[config]``.

    Args:
        config (GridConfig): The configuration to unfold.
        *keys: Dot-separated paths, or `ALL`.

    Returns:
        List[GridConfig]: The unfolded configurations. No two of them share
        mutable state.

    Raises:
        ValueError: If `ALL` is combined with explicit keys.
    """
    if any(key is ALL for key in keys):
        if len(keys) != 1:
            raise ValueError("ALL cannot be combined with explicit keys")
        keys = tuple(config.keys())

    results = _unfold(config, keys)
    logger.debug(f"Unfolded {list(keys)} into {len(results)} configuration(s)")
    return results


def _unfold(config: GridConfig, keys: Tuple[str, ...]) -> List[GridConfig]:
    if not keys:
        return [config]

    key, rest = keys[0], keys[1:]
    value = config.get(key)
    if kind_of(value) is ValueKind.GROUP:
        value = [variant.as_dict() for variant in unfold(value, ALL)]

    if kind_of(value) is not ValueKind.SEQUENCE:
        return _unfold(config, rest)

    results = []
    for item in value:
        config_slice = copy.deepcopy(config)
        config_slice.set(key, copy.deepcopy(item))
        results.extend(_unfold(config_slice, rest))
    return results
