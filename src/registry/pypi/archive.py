"""Streaming extraction of a single member from a source distribution."""
from __future__ import annotations

import gzip
import io
import logging
import tarfile
import zlib
from typing import BinaryIO, Union

from errors import MemberNotFoundError, StreamCorruptError

logger = logging.getLogger(__name__)


def _member_matches(path: str, filename: str) -> bool:
    # sdists wrap their contents in an unknown "<name>-<version>/" directory
    return path == filename or path.endswith("/" + filename)


def extract_member(stream: Union[bytes, BinaryIO], member_suffix: str) -> bytes:
    """Return the contents of the first archive member ending in ``member_suffix``.

    The stream is decompressed and read once, front to back, as a tar
    archive; nothing is seeked and only the matching member is held in
    memory. A gzip stream cut short surfaces as StreamCorruptError.

    Args:
        stream: Raw ``.tar.gz`` bytes or a readable binary file-like object.
        member_suffix: File name to look for, with or without a leading "/"
            (e.g. "/pyproject.toml").

    Raises:
        StreamCorruptError: If the data is not a readable gzip/tar stream.
        MemberNotFoundError: If the archive ends without a matching member.
    """
    if isinstance(stream, (bytes, bytearray)):
        stream = io.BytesIO(stream)
    filename = member_suffix.lstrip("/")
    scanned = 0
    try:
        with gzip.GzipFile(fileobj=stream, mode="rb") as gz, \
                tarfile.open(fileobj=gz, mode="r|") as tar:
            for member in tar:
                scanned += 1
                if not member.isfile() or not _member_matches(member.name, filename):
                    continue
                handle = tar.extractfile(member)
                if handle is None:
                    continue
                logger.debug("Found %s after %d archive entries", member.name, scanned)
                return handle.read()
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise StreamCorruptError(f"unreadable archive stream: {e}") from e
    raise MemberNotFoundError(f"{filename} not found in archive ({scanned} entries)")
