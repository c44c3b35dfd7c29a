"""Shared HTTP request handling for upstream services."""

import logging
from typing import Any

import requests

from ..errors import AuthenticationFailed, UpstreamError, UpstreamTimeout

logger = logging.getLogger(__name__)


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    *,
    service: str,
    timeout: float,
    **kwargs: Any,
) -> Any:
    """Make a single request and return the decoded JSON body.

    Nothing is retried; every failure is translated into the spotlink error
    taxonomy and chained to the underlying requests exception.

    Args:
        session: Session to send the request with
        method: HTTP method (e.g., "GET")
        url: Absolute URL
        service: Service name used in log and error messages
        timeout: Seconds to wait for connect and for each read
        **kwargs: Passed through to ``session.request``

    Returns:
        The parsed JSON body

    Raises:
        UpstreamTimeout: The call exceeded ``timeout``
        AuthenticationFailed: The service answered 401
        UpstreamError: Any other transport failure, non-success status or
            unparseable body
    """
    logger.debug(f"{service} {method} {url}")
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.Timeout as e:
        raise UpstreamTimeout(f"{service} request timed out after {timeout}s: {url}") from e
    except requests.RequestException as e:
        raise UpstreamError(f"{service} request failed: {e}") from e

    if response.status_code == 401:
        raise AuthenticationFailed(f"{service} rejected the credentials (HTTP 401)")
    if not response.ok:
        raise UpstreamError(
            f"{service} returned HTTP {response.status_code}: {response.text[:200]}",
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"{service} returned an unparseable body", status_code=response.status_code
        ) from e
