"""HTTP helpers shared by the remote service clients.

Translates ``requests`` failures into the package's error taxonomy so the
engine and CLI only ever see ``BlogSyncError`` subclasses.
"""

import logging
from typing import Any

import requests

from ..errors import DecodeError, TransportError

logger = logging.getLogger(__name__)

# (connect, read) seconds
DEFAULT_TIMEOUT = (10, 60)

USER_AGENT = "blog-sync"


def create_session(
    auth: tuple[str, str] | None = None, verify: bool = True
) -> requests.Session:
    """Create a ``requests.Session`` with the package user agent."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    if auth is not None:
        session.auth = auth
    session.verify = verify
    return session


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    ok: tuple[int, ...] = (200,),
    timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    **kwargs: Any,
) -> requests.Response:
    """
    Send a request and check the status code.

    Args:
        session: Session to send with
        method: HTTP method
        url: Absolute URL
        ok: Status codes treated as success
        timeout: (connect, read) timeout in seconds
        **kwargs: Passed through to ``session.request``

    Returns:
        The response (not yet consumed when ``stream=True``)

    Raises:
        TransportError: On connection errors, timeouts, authentication
            failures and any status not in ``ok``. 404 responses are
            returned unchanged when 404 is listed in ``ok``.
    """
    logger.debug("%s %s", method, url)
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.RequestException as exc:
        raise TransportError(f"{method} {url} failed: {exc}") from exc

    status = response.status_code
    if status in ok:
        return response

    if status in (401, 403):
        raise TransportError(
            f"Authentication failed for {method} {url} (HTTP {status})",
            status_code=status,
        )
    raise TransportError(
        f"{method} {url} returned HTTP {status}: {_error_message(response)}",
        status_code=status,
    )


def decode_json(response: requests.Response) -> Any:
    """Decode a JSON body.

    Raises:
        DecodeError: If the body is not valid JSON.
    """
    try:
        return response.json()
    except ValueError as exc:
        raise DecodeError(
            f"Malformed JSON response from {response.url}: {exc}"
        ) from exc


def unwrap_envelope(response: requests.Response) -> Any:
    """Return the ``data`` member of a ``{"code": ..., "data": ...}`` envelope.

    Raises:
        DecodeError: If the body is not a JSON object with a ``data`` member.
    """
    body = decode_json(response)
    if not isinstance(body, dict) or "data" not in body:
        raise DecodeError(
            f"Unexpected response shape from {response.url}: missing 'data'"
        )
    return body["data"]


def _error_message(response: requests.Response) -> str:
    """Best-effort extraction of an API error message."""
    try:
        body = response.json()
    except ValueError:
        return response.reason or ""
    if isinstance(body, dict):
        return str(body.get("error_msg") or body.get("error") or response.reason)
    return response.reason or ""
