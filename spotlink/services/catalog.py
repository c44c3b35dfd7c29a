"""Spotify catalog service for fetching track metadata."""

import logging
from typing import Any

import requests

from ..config import SPOTIFY_API_URL
from ..errors import InvalidArgument, MalformedResponse
from ..models.track import Track
from ..utils.http import request_json
from ..utils.identifiers import require_id
from .credentials import CredentialManager

logger = logging.getLogger(__name__)

# Spotify caps pages at 50 album tracks / 100 playlist items
ALBUM_PAGE_LIMIT = 50
PLAYLIST_PAGE_LIMIT = 100


class CatalogClient:
    """Service for reading tracks, albums and playlists from the Spotify Web API.

    Every request reads the bearer token from the credential manager at call
    time. A 401 surfaces as AuthenticationFailed; nothing is retried.
    """

    def __init__(
        self,
        credentials: CredentialManager,
        api_url: str = SPOTIFY_API_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._credentials = credentials
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def fetch_track(self, track_id: str) -> Track:
        """Fetch a single track.

        Args:
            track_id: Spotify track ID

        Returns:
            The canonical Track
        """
        track_id = require_id(track_id, "track")
        data = self._get(f"{self._api_url}/tracks/{track_id}")
        return self._parse_track(data, f"track {track_id}")

    def fetch_album_tracks(self, album_id: str) -> list[Track]:
        """Fetch every track on an album, in album order.

        An album with no tracks yields an empty list.
        """
        album_id = require_id(album_id, "album")
        items = self._get_all_items(
            f"{self._api_url}/albums/{album_id}/tracks",
            {"limit": ALBUM_PAGE_LIMIT},
            f"album {album_id}",
        )
        tracks = [self._parse_track(item, f"album {album_id}") for item in items]
        logger.debug(f"Album {album_id}: {len(tracks)} tracks")
        return tracks

    def fetch_playlist_tracks(self, playlist_id: str) -> list[Track]:
        """Fetch every track in a playlist, in playlist order.

        Items whose track has been removed from the catalog come back as
        ``{"track": null}`` and are skipped.
        """
        playlist_id = require_id(playlist_id, "playlist")
        items = self._get_all_items(
            f"{self._api_url}/playlists/{playlist_id}/tracks",
            {"limit": PLAYLIST_PAGE_LIMIT},
            f"playlist {playlist_id}",
        )

        tracks = []
        for position, item in enumerate(items):
            if not isinstance(item, dict) or "track" not in item:
                raise MalformedResponse(
                    f"Playlist {playlist_id} item {position} has no track wrapper"
                )
            if item["track"] is None:
                logger.warning(
                    f"Skipping unavailable track at position {position} in playlist {playlist_id}"
                )
                continue
            tracks.append(self._parse_track(item["track"], f"playlist {playlist_id}"))

        logger.debug(f"Playlist {playlist_id}: {len(tracks)} tracks")
        return tracks

    def close(self) -> None:
        self._session.close()

    def _get(self, url: str, params: dict | None = None) -> Any:
        return request_json(
            self._session,
            "GET",
            url,
            service="Spotify",
            timeout=self._timeout,
            params=params,
            headers={
                "Authorization": self._credentials.authorization_header(),
                "Content-Type": "application/json",
            },
        )

    def _get_all_items(self, url: str, params: dict, label: str) -> list:
        """Collect ``items`` across pages by following ``next`` links."""
        items: list = []
        visited: set[str] = set()
        next_url: str | None = url

        while next_url:
            if next_url in visited:
                raise MalformedResponse(f"Spotify pagination for {label} repeats {next_url}")
            visited.add(next_url)

            # The next link already carries offset and limit
            data = self._get(next_url, params if next_url == url else None)
            if not isinstance(data, dict) or not isinstance(data.get("items"), list):
                raise MalformedResponse(f"Spotify response for {label} has no items list")
            items.extend(data["items"])
            next_url = data.get("next")

        return items

    def _parse_track(self, data: Any, label: str) -> Track:
        try:
            return Track.from_dict(data)
        except InvalidArgument as e:
            raise MalformedResponse(f"Malformed track in {label}: {e}") from e
