"""Conversion of registry hex digests to Nix SRI hash expressions."""
from __future__ import annotations

import base64
import binascii

from constants import Constants
from errors import MalformedDigestError


def hex_to_integrity_fragment(hex_digest: str) -> str:
    """Return the base64 part of an SRI hash (the text after ``sha256-``).

    Raises:
        MalformedDigestError: If ``hex_digest`` is not a string, is of odd
            length, or contains non-hex characters.
    """
    if not isinstance(hex_digest, str):
        raise MalformedDigestError(f"non-string digest: {hex_digest!r}")
    try:
        raw = binascii.unhexlify(hex_digest)
    except (binascii.Error, ValueError) as exc:
        raise MalformedDigestError(f"invalid hex digest: {hex_digest!r}") from exc
    return base64.b64encode(raw).decode("ascii")


def integrity_expression(hex_digest: str, algorithm: str = Constants.DIGEST_ALGORITHM) -> str:
    """Return a quoted SRI literal ready to embed, e.g. ``"sha256-3q2+7w=="``."""
    return f'"{algorithm}-{hex_to_integrity_fragment(hex_digest)}"'


def integrity_fragment_to_hex(fragment: str) -> str:
    """Inverse of ``hex_to_integrity_fragment``; lower-case hex output."""
    try:
        return base64.b64decode(fragment, validate=True).hex()
    except (binascii.Error, ValueError) as exc:
        raise MalformedDigestError(f"invalid base64 fragment: {fragment!r}") from exc
