"""Format adapters for configuration sources.

This package contains the parsers that are discovered by
`pygridconfig.core.loader`. Each module in this package should contain one or
more classes that inherit from `pygridconfig.core.base_format.BaseFormat`.
"""
from .json_format import JsonFormat
from .toml_format import TomlFormat
from .yaml_format import YamlFormat
