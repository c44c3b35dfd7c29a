"""Utility modules for HTTP transport and identifiers."""

from .http import request_json
from .identifiers import parse_spotify_reference, require_id

__all__ = [
    "request_json",
    "parse_spotify_reference",
    "require_id",
]
