"""PEP 508 specifier to nixpkgs attribute normalization."""
from __future__ import annotations

import re
from typing import Iterable, Mapping, Optional, Tuple

from constants import NIX_ATTR_OVERRIDES

# The distribution name is always the first token of a PEP 508 specifier.
_NAME_RE = re.compile(r"^([A-Za-z0-9_.-]+)")
_MARKER_DELIMITER = ";"


def _sanitize_identifier(specifier: str) -> str:
    """Return the bare distribution name, preserving its original case.

    "httpx>=0.27" -> "httpx", "pydantic[email]>=2" -> "pydantic".
    """
    match = _NAME_RE.match(specifier.strip())
    return match.group(1) if match else ""


def normalize(specifier: str, overrides: Mapping[str, str] = NIX_ATTR_OVERRIDES) -> str:
    """Map a dependency specifier to its nixpkgs python attribute name.

    Most names match after lower-casing and replacing underscores with
    hyphens; ``overrides`` holds the exceptions and is returned verbatim.
    Returns an empty string when the specifier has no name token.
    """
    name = _sanitize_identifier(specifier)
    if not name:
        return ""
    normalized = name.lower().replace("_", "-")
    return overrides.get(normalized, normalized)


def normalize_dependencies(
    specifiers: Optional[Iterable[str]],
    overrides: Mapping[str, str] = NIX_ATTR_OVERRIDES,
) -> Tuple[str, ...]:
    """Normalize a ``requires_dist`` list, preserving order.

    Entries carrying an environment marker (``; sys_platform == ...``,
    ``; extra == ...``) are optional or platform specific and are dropped.
    """
    deps = []
    for spec in specifiers or ():
        if not isinstance(spec, str) or _MARKER_DELIMITER in spec:
            continue
        attr = normalize(spec, overrides)
        if attr:
            deps.append(attr)
    return tuple(deps)
