"""pygridconfig: hierarchical configurations that unfold into grids.

This package provides `GridConfig`, a string-keyed configuration addressed
with dotted paths, which can be loaded from JSON, TOML or YAML and unfolded
into every combination of its list-valued entries.
"""

from .core.exceptions import GridConfigError, PathSegmentError, SourceError, UnsupportedFormatError
from .core.grid_config import ALL, GridConfig, ValueKind, as_dict, as_namedtuple, kind_of, unfold
from .core.loader import load_config

__version__ = "0.1.0"
__license__ = "MIT"

__all__ = [
    "__version__",
    "__license__",
    "ALL",
    "GridConfig",
    "ValueKind",
    "as_dict",
    "as_namedtuple",
    "kind_of",
    "unfold",
    "load_config",
    "GridConfigError",
    "PathSegmentError",
    "SourceError",
    "UnsupportedFormatError",
]
