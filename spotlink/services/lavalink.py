"""Lavalink search node service."""

import logging
from typing import Any

import requests

from ..config import SearchNodeConfig
from ..errors import MalformedResponse, UpstreamError
from ..models.candidate import SearchCandidate
from ..utils.http import request_json

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_SOURCE = "ytsearch"

# loadType values across Lavalink v3 (upper case) and v4 (lower case)
_EMPTY_LOAD_TYPES = {"NO_MATCHES", "empty"}
_FAILED_LOAD_TYPES = {"LOAD_FAILED", "error"}


class LavalinkClient:
    """Client for a Lavalink node's load tracks endpoint.

    Authenticates with the node's own password, never the Spotify token.
    """

    def __init__(
        self,
        node: SearchNodeConfig,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._node = node
        self._timeout = timeout
        self._session = session or requests.Session()

    def search(self, query: str, source: str = DEFAULT_SEARCH_SOURCE) -> list[SearchCandidate]:
        """Run a search query, e.g. ``ytsearch:Artist - Title``."""
        return self.load_tracks(f"{source}:{query}")

    def load_tracks(self, identifier: str) -> list[SearchCandidate]:
        """Load tracks for an identifier, keeping the node's ranking order.

        Returns:
            Candidates in the order the node returned them; empty on no matches.

        Raises:
            UpstreamError: Non-success status or a failed load.
            UpstreamTimeout: The call timed out.
            MalformedResponse: The body is not a recognizable result list.
        """
        data = request_json(
            self._session,
            "GET",
            f"{self._node.base_url}/loadtracks",
            service="Lavalink",
            timeout=self._timeout,
            params={"identifier": identifier},
            headers={"Authorization": self._node.password},
        )

        raw_tracks = self._extract_tracks(data, identifier)
        candidates = [SearchCandidate.from_dict(raw) for raw in raw_tracks]
        logger.debug(f"Lavalink returned {len(candidates)} results for '{identifier}'")
        return candidates

    def close(self) -> None:
        self._session.close()

    def _extract_tracks(self, data: Any, identifier: str) -> list:
        """Pull the result list out of a v2, v3 or v4 response body."""
        # v2 answers with a bare list
        if isinstance(data, list):
            return data

        if not isinstance(data, dict):
            raise MalformedResponse(f"Unexpected Lavalink response for '{identifier}'")

        load_type = data.get("loadType")
        if load_type in _EMPTY_LOAD_TYPES:
            return []
        if load_type in _FAILED_LOAD_TYPES:
            exception = data.get("exception") or data.get("data") or {}
            message = exception.get("message") if isinstance(exception, dict) else None
            raise UpstreamError(f"Lavalink failed to load '{identifier}': {message or 'unknown error'}")

        if isinstance(data.get("tracks"), list):
            return data["tracks"]

        # v4: "search" carries a list, "track" a single object
        payload = data.get("data")
        if isinstance(payload, list):
            return payload
        if isinstance(payload, dict) and load_type == "track":
            return [payload]
        if isinstance(payload, dict) and isinstance(payload.get("tracks"), list):
            return payload["tracks"]

        raise MalformedResponse(f"Lavalink response for '{identifier}' has no track list")
