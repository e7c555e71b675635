"""Utility modules for pygridconfig.

This package contains helper modules for fetching configuration sources over
the network and for rendering configurations for humans.
"""
