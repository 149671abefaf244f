"""Shared HTTP helpers used by the registry client.

Encapsulates common request/timeout error handling so modules avoid
duplicating try/except blocks. Transport failures are raised as
``errors.NetworkError`` so callers can degrade instead of exiting.
"""
from __future__ import annotations

import logging
from typing import Any

import requests

from constants import Constants
from errors import NetworkError
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer

logger = logging.getLogger(__name__)


def safe_get(url: str, *, context: str, **kwargs: Any) -> requests.Response:
    """Perform a GET request with consistent error handling and DEBUG traces.

    Args:
        url: Target URL.
        context: Human-readable source tag for logs (e.g., "pypi", "sdist").
        **kwargs: Passed through to requests.get (e.g., headers, stream).

    Returns:
        requests.Response: The HTTP response object, whatever its status.

    Raises:
        NetworkError: On timeout or any other transport failure.
    """
    safe_target = safe_url(url)
    kwargs.setdefault("timeout", Constants.REQUEST_TIMEOUT)
    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http_client",
                    action="GET",
                    target=safe_target,
                    context=context
                )
            )
        try:
            res = requests.get(url, **kwargs)
        except requests.Timeout as exc:
            logger.warning(
                "%s request timed out after %s seconds",
                context,
                kwargs["timeout"],
            )
            raise NetworkError(f"{context} request to {safe_target} timed out") from exc
        except requests.RequestException as exc:  # includes ConnectionError
            logger.warning("%s connection error: %s", context, exc)
            raise NetworkError(f"{context} connection error: {exc}") from exc

        if is_debug_enabled(logger):
            logger.debug(
                "HTTP response",
                extra=extra_context(
                    event="http_response",
                    component="http_client",
                    action="GET",
                    status_code=res.status_code,
                    duration_ms=t.duration_ms(),
                    target=safe_target,
                    context=context
                )
            )
        return res
