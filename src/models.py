"""Data models for package resolution."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from constants import Constants


@dataclass(frozen=True)
class ReleaseMetadata:
    """Latest release of a package as published by the registry."""
    name: str
    version: str
    artifact_url: str
    digest_hex: str
    requires_dist: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageResolution:
    """Pinned descriptor of a PyPI package for a Nix build recipe.

    ``hash_expr`` is ready to embed: either a quoted SRI literal such as
    ``"sha256-..."`` or the bare fallback sentinel. ``build_deps`` is never
    empty.
    """
    name: str
    version: str = ""
    hash_expr: str = Constants.FALLBACK_HASH
    build_deps: Tuple[str, ...] = (Constants.DEFAULT_BUILD_DEP,)
    runtime_deps: Tuple[str, ...] = field(default_factory=tuple)
    resolved: bool = False

    @classmethod
    def fallback(cls, name: Optional[str]) -> "PackageResolution":
        """Unpinned stub returned whenever version or hash resolution fails."""
        return cls(name=name or "")

    def as_dict(self) -> Dict[str, Any]:
        """Flat key/value view consumed by templating and exports."""
        return {
            "name": self.name,
            "version": self.version,
            "hash_expr": self.hash_expr,
            "build_deps": list(self.build_deps),
            "runtime_deps": list(self.runtime_deps),
            "resolved": self.resolved,
        }
