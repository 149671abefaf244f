"""Build-time requirement detection from pyproject.toml text.

Two strategies are supported:

* ``requires``: the ``[build-system] requires = [...]`` array, each entry
  normalized to a nixpkgs attribute.
* ``backend``: the ``[build-system] build-backend`` string, mapped to a
  nixpkgs attribute by substring match against known backend families.

Both are total: a missing section, missing key, or unparsable document
yields the conservative default instead of an error.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from constants import BUILD_BACKEND_FAMILIES, NIX_ATTR_OVERRIDES, Constants
from registry.pypi.specifier import normalize

try:
    import tomllib as toml  # type: ignore
except ImportError:  # Python < 3.11
    import tomli as toml  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DEPS: Tuple[str, ...] = (Constants.DEFAULT_BUILD_DEP,)

_SECTION_HEADER_RE = re.compile(r"^\s*\[build-system\]\s*(?:#.*)?$", re.MULTILINE)
_NEXT_HEADER_RE = re.compile(r"^\s*\[", re.MULTILINE)
_REQUIRES_RE = re.compile(r"^\s*requires\s*=\s*\[([^\]]*)\]", re.MULTILINE)
_BACKEND_RE = re.compile(r"^\s*build-backend\s*=\s*['\"]([^'\"]*)['\"]", re.MULTILINE)
_QUOTED_RE = re.compile(r"['\"]([^'\"]+)['\"]")


def _load_build_system(text: str) -> Optional[Dict[str, Any]]:
    """Return the [build-system] table, {} when absent, None when unparsable."""
    try:
        data = toml.loads(text)
    except (toml.TOMLDecodeError, TypeError, ValueError, RecursionError, MemoryError) as e:
        logger.debug("pyproject.toml is not valid TOML (%s); using text scan", e)
        return None
    table = data.get("build-system")
    return table if isinstance(table, dict) else {}


def _build_system_section(text: str) -> Optional[str]:
    """Raw text of the [build-system] section, or None if there is none."""
    header = _SECTION_HEADER_RE.search(text)
    if not header:
        return None
    body = text[header.end():]
    nxt = _NEXT_HEADER_RE.search(body)
    return body[:nxt.start()] if nxt else body


def _scan_requires(text: str) -> Sequence[str]:
    section = _build_system_section(text)
    if section is None:
        return []
    match = _REQUIRES_RE.search(section)
    if not match:
        return []
    return _QUOTED_RE.findall(match.group(1))


def _scan_backend(text: str) -> str:
    section = _build_system_section(text)
    if section is None:
        return ""
    match = _BACKEND_RE.search(section)
    return match.group(1).strip() if match else ""


def extract_build_requirements(
    text: str,
    overrides: Mapping[str, str] = NIX_ATTR_OVERRIDES,
) -> Tuple[str, ...]:
    """Return nixpkgs attrs for ``[build-system] requires``, in declared order.

    Falls back to ``("setuptools",)`` when the section or key is missing or
    no entry yields a usable name.
    """
    table = _load_build_system(text or "")
    if table is None:
        specifiers = _scan_requires(text or "")
    else:
        requires = table.get("requires")
        specifiers = [r for r in requires if isinstance(r, str)] if isinstance(requires, list) else []

    deps = []
    for spec in specifiers:
        attr = normalize(spec, overrides)
        if attr:
            deps.append(attr)
    if not deps:
        return DEFAULT_BUILD_DEPS
    return tuple(deps)


def extract_build_backend(text: str) -> str:
    """Return the raw ``build-backend`` identifier, or "" when not declared."""
    table = _load_build_system(text or "")
    if table is None:
        return _scan_backend(text or "")
    backend = table.get("build-backend")
    return backend.strip() if isinstance(backend, str) else ""


def map_build_backend(
    backend: str,
    families: Sequence[Tuple[str, str]] = BUILD_BACKEND_FAMILIES,
) -> str:
    """Map a backend identifier such as ``hatchling.build`` to a nixpkgs attr.

    The first family whose marker occurs in ``backend`` wins; anything
    unrecognized maps to setuptools.
    """
    for marker, attr in families:
        if backend and marker in backend:
            return attr
    return Constants.DEFAULT_BUILD_DEP


def extract_backend_build_deps(
    text: str,
    families: Sequence[Tuple[str, str]] = BUILD_BACKEND_FAMILIES,
) -> Tuple[str, ...]:
    """Backend strategy counterpart of ``extract_build_requirements``."""
    return (map_build_backend(extract_build_backend(text), families),)
