"""Resolve PyPI package names into pinned Nix package descriptors.

``resolve`` never raises. Version and hash pinning decide ``resolved``;
build-tool detection from the sdist is best effort and on failure only
falls back to setuptools for the build dependencies.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import requests
import urllib3

from constants import BUILD_BACKEND_FAMILIES, NIX_ATTR_OVERRIDES, BuildStrategy, Constants
from errors import MalformedDigestError, ResolutionError
from models import PackageResolution
from common.logging_utils import extra_context, is_debug_enabled, Timer
from registry.pypi import client
from registry.pypi.archive import extract_member
from registry.pypi.build_system import (
    DEFAULT_BUILD_DEPS,
    extract_backend_build_deps,
    extract_build_requirements,
)
from registry.pypi.integrity import integrity_expression
from registry.pypi.specifier import normalize_dependencies

logger = logging.getLogger(__name__)


def detect_build_deps(
    artifact_url: str,
    strategy: str = BuildStrategy.REQUIRES.value,
    overrides: Mapping[str, str] = NIX_ATTR_OVERRIDES,
    families: Sequence[Tuple[str, str]] = BUILD_BACKEND_FAMILIES,
) -> Tuple[str, ...]:
    """Download the sdist and derive build dependencies from its pyproject.toml.

    Any download, archive or lookup failure yields ``("setuptools",)``.
    """
    try:
        res = client.open_artifact(artifact_url)
        try:
            content = extract_member(res.raw, "/" + Constants.BUILD_CONFIG_FILE)
        finally:
            res.close()
    except (ResolutionError, requests.RequestException, urllib3.exceptions.HTTPError) as e:
        logger.debug(
            "Build metadata unavailable; using default build deps",
            extra=extra_context(
                event="fallback",
                component="resolver",
                action="detect_build_deps",
                outcome=type(e).__name__,
            )
        )
        return DEFAULT_BUILD_DEPS

    text = content.decode("utf-8", errors="replace")
    try:
        if strategy == BuildStrategy.BACKEND.value:
            return extract_backend_build_deps(text, families)
        return extract_build_requirements(text, overrides)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.warning("Could not parse %s; using default build deps", Constants.BUILD_CONFIG_FILE, exc_info=True)
        return DEFAULT_BUILD_DEPS


def _resolve(
    name: str,
    url: str,
    strategy: str,
    overrides: Mapping[str, str],
    families: Sequence[Tuple[str, str]],
) -> PackageResolution:
    try:
        meta = client.fetch_latest(name, url)
    except ResolutionError as e:
        logger.warning("Could not resolve %s: %s", name, e)
        return PackageResolution.fallback(name)

    try:
        if not meta.digest_hex:
            raise MalformedDigestError(f"no {Constants.DIGEST_ALGORITHM} digest for {name!r}")
        hash_expr = integrity_expression(meta.digest_hex)
    except MalformedDigestError as e:
        logger.warning("Could not pin %s: %s", name, e)
        return PackageResolution.fallback(name)

    return PackageResolution(
        name=meta.name,
        version=meta.version,
        hash_expr=hash_expr,
        build_deps=detect_build_deps(meta.artifact_url, strategy, overrides, families),
        runtime_deps=normalize_dependencies(meta.requires_dist, overrides),
        resolved=True,
    )


def resolve(
    name: str,
    *,
    url: Optional[str] = None,
    strategy: Optional[str] = None,
    overrides: Mapping[str, str] = NIX_ATTR_OVERRIDES,
    families: Sequence[Tuple[str, str]] = BUILD_BACKEND_FAMILIES,
) -> PackageResolution:
    """Return a pinned descriptor of the latest release of ``name``.

    Args:
        name: Package name as typed by the user.
        url: Registry base URL; defaults to Constants.REGISTRY_URL_PYPI.
        strategy: "requires" or "backend"; defaults to Constants.BUILD_STRATEGY.
        overrides: PyPI name to nixpkgs attr exceptions.
        families: Ordered backend-substring to nixpkgs attr pairs.

    Returns:
        PackageResolution: Always a value; check ``resolved`` for degradation.
    """
    with Timer() as timer:
        try:
            result = _resolve(
                name,
                url or Constants.REGISTRY_URL_PYPI,
                strategy or Constants.BUILD_STRATEGY,
                overrides,
                families,
            )
        except Exception:  # pylint: disable=broad-exception-caught
            logger.warning("Unexpected error resolving %s", name, exc_info=True)
            result = PackageResolution.fallback(name)

    if is_debug_enabled(logger):
        logger.debug(
            "Package resolved",
            extra=extra_context(
                event="function_exit",
                component="resolver",
                action="resolve",
                outcome="resolved" if result.resolved else "fallback",
                duration_ms=timer.duration_ms(),
                package_manager="pypi"
            )
        )
    return result


def resolve_many(
    names: Iterable[str],
    *,
    max_workers: Optional[int] = None,
    **kwargs,
) -> List[PackageResolution]:
    """Resolve several names, returning results in input order.

    Names are independent, so they are fanned out over a thread pool of at
    most ``max_workers`` (default Constants.MAX_CONCURRENCY); one worker
    resolves sequentially.
    """
    names = list(names)
    workers = Constants.MAX_CONCURRENCY if max_workers is None else max_workers
    logger.info("Resolving %d package(s) with %d worker(s).", len(names), max(workers, 1))
    if workers <= 1 or len(names) <= 1:
        return [resolve(n, **kwargs) for n in names]
    with ThreadPoolExecutor(max_workers=min(workers, len(names))) as executor:
        return list(executor.map(lambda n: resolve(n, **kwargs), names))
