"""PyPI registry client: fetch release metadata and source artifacts."""
from __future__ import annotations

import json
import logging
import urllib.parse
from typing import Any, Dict, List, Optional

import requests

from constants import Constants
from errors import NetworkError, NoSourceArtifactError, NotFoundError
from models import ReleaseMetadata
from common.http_client import safe_get
from common.logging_utils import extra_context, is_debug_enabled, Timer, safe_url

logger = logging.getLogger(__name__)

HEADERS_JSON = {"Accept": "application/json"}


def _select_source_artifact(urls: Optional[List[Dict[str, Any]]]) -> Optional[Dict[str, Any]]:
    """Return the first artifact tagged as a source distribution."""
    for artifact in urls or []:
        if isinstance(artifact, dict) and artifact.get("packagetype") == Constants.SDIST_PACKAGETYPE:
            return artifact
    return None


def fetch_latest(name: str, url: str = Constants.REGISTRY_URL_PYPI) -> ReleaseMetadata:
    """Fetch the latest release of ``name`` and select its sdist.

    Args:
        name: Package name as typed by the user.
        url: Registry base URL ending in "/". Defaults to PyPI.

    Returns:
        ReleaseMetadata: Version, sdist URL and digest, raw requires_dist.

    Raises:
        NotFoundError: Unknown package, or a payload without release info.
        NoSourceArtifactError: The latest release has no sdist.
        NetworkError: Transport failure or unexpected HTTP status.
    """
    if not name or not name.strip():
        raise NotFoundError("empty package name")
    fullurl = url + urllib.parse.quote(name.strip(), safe="") + "/json"

    with Timer() as timer:
        res = safe_get(fullurl, context="pypi", headers=HEADERS_JSON)

    if res.status_code == 404:
        logger.debug(
            "HTTP 404 received; package not found",
            extra=extra_context(
                event="http_response",
                outcome="not_found",
                status_code=404,
                target=safe_url(fullurl),
                package_manager="pypi"
            )
        )
        raise NotFoundError(f"{name} is not on the registry")
    if not 200 <= res.status_code < 300:
        logger.warning(
            "HTTP non-2xx handled",
            extra=extra_context(
                event="http_response",
                outcome="handled_non_2xx",
                status_code=res.status_code,
                duration_ms=timer.duration_ms(),
                target=safe_url(fullurl),
                package_manager="pypi"
            )
        )
        raise NetworkError(f"registry returned {res.status_code} for {name!r}")

    try:
        j = json.loads(res.text)
    except json.JSONDecodeError as e:
        logger.warning("Couldn't decode JSON for %s, assuming package missing.", name)
        raise NotFoundError(f"undecodable metadata for {name!r}") from e

    info = j.get("info") if isinstance(j, dict) else None
    if not isinstance(info, dict) or not info.get("version"):
        raise NotFoundError(f"no release info for {name!r}")

    artifact = _select_source_artifact(j.get("urls"))
    if artifact is None:
        raise NoSourceArtifactError(f"no sdist found for {name!r}")

    digests = artifact.get("digests") or {}
    requires_dist = info.get("requires_dist") or []
    meta = ReleaseMetadata(
        name=info.get("name") or name,
        version=str(info["version"]),
        artifact_url=artifact.get("url") or "",
        digest_hex=digests.get(Constants.DIGEST_ALGORITHM) or "",
        requires_dist=tuple(r for r in requires_dist if isinstance(r, str)),
    )
    if is_debug_enabled(logger):
        logger.debug(
            "Selected source artifact",
            extra=extra_context(
                event="decision",
                component="client",
                action="select_sdist",
                outcome="found",
                target=safe_url(meta.artifact_url),
                package_manager="pypi",
                duration_ms=timer.duration_ms()
            )
        )
    return meta


def open_artifact(artifact_url: str) -> requests.Response:
    """Start a streaming download of an artifact.

    The caller reads ``response.raw`` and must close the response.

    Raises:
        NetworkError: Missing URL, transport failure, or non-2xx status.
    """
    if not artifact_url:
        raise NetworkError("artifact has no download URL")
    res = safe_get(artifact_url, context="sdist", stream=True)
    if not 200 <= res.status_code < 300:
        res.close()
        raise NetworkError(f"artifact download returned {res.status_code}")
    res.raw.decode_content = True
    return res
