"""Shared fixtures: in-memory sdists and fake HTTP responses."""

import io
import json
import tarfile
from unittest.mock import MagicMock

import pytest

from constants import Constants


def build_sdist(files):
    """Return .tar.gz bytes containing ``files`` ({path: text or bytes})."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for path, content in files.items():
            data = content.encode("utf-8") if isinstance(content, str) else content
            info = tarfile.TarInfo(name=path)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


class _RawStream(io.BytesIO):
    """Stand-in for ``requests.Response.raw``; accepts attribute writes."""


def json_response(payload, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = payload if isinstance(payload, str) else json.dumps(payload)
    return resp


def artifact_response(body, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.raw = _RawStream(body)
    return resp


def pypi_payload(name="demo", version="1.2.3", digest="deadbeef", requires_dist=None, urls=None):
    if urls is None:
        urls = [
            {
                "packagetype": "bdist_wheel",
                "url": f"https://files.example/{name}-{version}-py3-none-any.whl",
                "digests": {"sha256": "00" * 32},
            },
            {
                "packagetype": "sdist",
                "url": f"https://files.example/{name}-{version}.tar.gz",
                "digests": {"sha256": digest},
            },
        ]
    return {
        "info": {"name": name, "version": version, "requires_dist": requires_dist},
        "urls": urls,
    }


@pytest.fixture
def restore_constants(monkeypatch):
    """Snapshot tunables mutated by config loading so tests stay isolated."""
    for attr in ("REGISTRY_URL_PYPI", "REQUEST_TIMEOUT", "MAX_CONCURRENCY", "BUILD_STRATEGY"):
        monkeypatch.setattr(Constants, attr, getattr(Constants, attr))
    return Constants
