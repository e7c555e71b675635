"""Core components for pygridconfig.

This package contains the configuration value and its unfolding, the base
class for format adapters, the loader that dispatches between them, and the
settings of the gridcfg tool.
"""
