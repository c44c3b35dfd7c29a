"""Spotify identifier parsing."""

import re

from ..errors import InvalidArgument

SPOTIFY_KINDS = ("track", "album", "playlist")

_URL_PATTERN = re.compile(
    r"^https?://open\.spotify\.com/(?:intl-[a-z]{2}(?:-[a-z]{2})?/)?"
    r"(track|album|playlist)/([A-Za-z0-9]+)(?:[/?#].*)?$"
)
_URI_PATTERN = re.compile(r"^spotify:(track|album|playlist):([A-Za-z0-9]+)$")
_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")


def require_id(value: object, kind: str) -> str:
    """Validate a catalog identifier before it is put in a URL.

    Raises:
        InvalidArgument: If the value is not a non-empty string.
    """
    if not isinstance(value, str):
        raise InvalidArgument(f"The {kind} ID must be a string, received type {type(value).__name__}")
    if not value.strip():
        raise InvalidArgument(f"The {kind} ID was not provided")
    return value.strip()


def parse_spotify_reference(value: str, default_kind: str | None = None) -> tuple[str, str]:
    """Split a Spotify reference into its kind and ID.

    Supports:
        - https://open.spotify.com/track/ID
        - https://open.spotify.com/intl-de/album/ID?si=...
        - spotify:playlist:ID
        - a bare ID, when ``default_kind`` is given

    Returns:
        A (kind, id) tuple, kind being one of "track", "album", "playlist".

    Raises:
        InvalidArgument: If the value can't be parsed.
    """
    value = require_id(value, default_kind or "Spotify")

    for pattern in (_URL_PATTERN, _URI_PATTERN):
        match = pattern.match(value)
        if match:
            return match.group(1), match.group(2)

    if default_kind is None:
        raise InvalidArgument(f"Not a Spotify URL or URI: {value}")
    if default_kind not in SPOTIFY_KINDS:
        raise InvalidArgument(f"Unknown Spotify kind: {default_kind}")
    if not _ID_PATTERN.match(value):
        raise InvalidArgument(f"Not a valid Spotify {default_kind} ID: {value}")

    return default_kind, value
