"""Server version negotiation.

The server reports its version in the ``X-Kastela-Version`` header of
every response. A client build pins an expected version line such as
``v0.2`` and accepts any server in that line, plus the ``v0.0.0``
sentinel used by unversioned development servers.
"""

import logging
import re

from kastela.errors import VersionMismatchError

logger = logging.getLogger(__name__)

VERSION_HEADER = "X-Kastela-Version"
SENTINEL_VERSION = (0, 0, 0)

_SEMVER = re.compile(
    r"^[v=]?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<pre>[0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)
_LINE = re.compile(r"^[v=]?(0|[1-9]\d*)(?:\.(0|[1-9]\d*))?(?:\.(0|[1-9]\d*))?$")


def _parse_line(expected_line: str) -> tuple[int, ...]:
    match = _LINE.match(expected_line.strip())
    if not match:
        raise ValueError(f"Invalid version line: {expected_line!r}")
    return tuple(int(part) for part in match.groups() if part is not None)


def satisfies(expected_line: str, actual: str | None) -> bool:
    """
    Check whether a server version belongs to the expected line.

    Args:
        expected_line: Partial version such as ``v0.2`` (matches ``0.2.x``)
        actual: Version string reported by the server, may be None

    Returns:
        True if ``actual`` is in the line or is exactly ``v0.0.0``.
        Prerelease versions never match a line.
    """
    if not actual:
        return False

    match = _SEMVER.match(actual.strip())
    if not match:
        return False

    version = (int(match["major"]), int(match["minor"]), int(match["patch"]))
    if match["pre"] is not None:
        return False
    if version == SENTINEL_VERSION:
        return True

    line = _parse_line(expected_line)
    return version[: len(line)] == line


def check_version(expected_line: str, actual: str | None) -> None:
    """Raise VersionMismatchError unless ``actual`` satisfies ``expected_line``."""
    if not satisfies(expected_line, actual):
        logger.warning(
            f"Kastela server version {actual} does not match expected {expected_line}.x"
        )
        raise VersionMismatchError(expected_line, actual)
