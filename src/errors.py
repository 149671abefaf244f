"""Exception types raised inside the resolution pipeline.

None of these escape ``registry.pypi.resolver.resolve``; they exist so the
individual stages can report distinct failure kinds and callers of the
stages can log them differently.
"""


class ResolutionError(Exception):
    """Base class for all pipeline stage failures."""


class NetworkError(ResolutionError):
    """Connection failure, timeout, or non-2xx status on an HTTP call."""


class NotFoundError(ResolutionError):
    """The registry has no usable entry for the requested name."""


class NoSourceArtifactError(NotFoundError):
    """The release exists but publishes no source distribution."""


class StreamCorruptError(ResolutionError):
    """The artifact bytes are not a valid gzip-compressed tar stream."""


class MemberNotFoundError(ResolutionError):
    """The archive was read to the end without a matching member."""


class MalformedDigestError(ResolutionError):
    """A digest from the registry is not valid hexadecimal."""
