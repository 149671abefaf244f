"""PyPI resolution package.

Public entry points are re-exported here so callers can use
``registry.pypi.resolve`` without knowing the module layout.
"""
from registry.pypi.resolver import detect_build_deps, resolve, resolve_many

__all__ = ["detect_build_deps", "resolve", "resolve_many"]
