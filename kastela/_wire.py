"""
Wire-level helpers shared by the sync and async clients.

``Call`` is the request envelope handed to the dispatcher, and
``normalize_error`` decides the message for every non-2xx response.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable

from kastela.errors import ServerError
from kastela.version import VERSION_HEADER, check_version

logger = logging.getLogger(__name__)


def _passthrough(data: Any) -> Any:
    return data


def discard(data: Any) -> None:
    """Unwrap for operations that return nothing."""
    return None


@dataclass(frozen=True)
class Call:
    """A single request to issue against the Kastela server."""

    method: str
    path: str
    body: Any = None
    unwrap: Callable[[Any], Any] = _passthrough

    @property
    def has_body(self) -> bool:
        return self.method not in ("GET", "DELETE")


def read_body(response) -> Any:
    """
    Decode a response body.

    Works for both ``requests.Response`` and ``httpx.Response``.

    Returns:
        Parsed JSON, the raw text if the body is not JSON, or None if empty
    """
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def normalize_error(status_code: int, body: Any) -> ServerError:
    """
    Convert a non-2xx response into a single ServerError.

    Args:
        status_code: HTTP status of the response
        body: Decoded response body (see ``read_body``)

    Returns:
        ServerError whose message is the ``error`` field of a JSON
        object body, or the body text itself
    """
    if isinstance(body, dict):
        if "error" in body:
            message = str(body["error"])
        else:
            message = json.dumps(body)
    elif body is None or body == "":
        message = f"request failed with status code {status_code}"
    else:
        message = str(body)

    return ServerError(message, status_code=status_code)


def handle_response(response, call: Call, expected_version: str) -> Any:
    """
    Turn a received response into the call's result.

    Non-2xx responses raise the normalized error. 2xx responses must
    pass the version check before the body is returned.

    Raises:
        ServerError: On a non-2xx status
        VersionMismatchError: If the server version is not compatible
    """
    body = read_body(response)
    status = response.status_code

    if not 200 <= status < 300:
        logger.debug(f"Kastela {call.method} {call.path} failed with status {status}")
        raise normalize_error(status, body)

    check_version(expected_version, response.headers.get(VERSION_HEADER))
    return call.unwrap(body)
