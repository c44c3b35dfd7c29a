"""Public entry point: turn Spotify IDs into titles or playable tracks."""

import logging
from typing import Any, Callable

from .config import SPOTIFY_API_URL, SPOTIFY_TOKEN_URL, BatchMode, Config, SearchNodeConfig
from .errors import InvalidArgument
from .models.candidate import SearchCandidate
from .models.track import Track
from .processors.ranking import CandidateRanker
from .processors.resolver import ResolutionResult, TrackResolver
from .services.catalog import CatalogClient
from .services.credentials import CredentialManager
from .services.lavalink import LavalinkClient

logger = logging.getLogger(__name__)


class SpotifyParser:
    """Converts Spotify tracks, albums and playlists into Lavalink tracks.

    With ``convert=False`` the ``get_*`` methods return display titles
    ("Artist1, Artist2 - Title"); with ``convert=True`` they search the
    node and return the best matching candidate(s).

    Example:
        with SpotifyParser({"host": "localhost", "port": 2333, "password": "pw"},
                           client_id, client_secret) as parser:
            parser.get_track("4uLU6hMCjMI75M1A2tKUQC", convert=True)
    """

    def __init__(
        self,
        node: SearchNodeConfig | dict,
        client_id: str,
        client_secret: str,
        timeout: float = 10.0,
        batch_mode: BatchMode = BatchMode.FAIL_FAST,
        max_workers: int = 4,
        api_url: str = SPOTIFY_API_URL,
        token_url: str = SPOTIFY_TOKEN_URL,
        refresh_margin: float = 60.0,
        retry_interval: float = 30.0,
        on_error: Callable[[Exception], None] | None = None,
        ranker: CandidateRanker | None = None,
    ) -> None:
        if not client_id or not client_secret:
            raise InvalidArgument("Spotify client ID and client secret are required")
        try:
            self.node = SearchNodeConfig.from_mapping(node)
        except ValueError as e:
            raise InvalidArgument(str(e)) from e

        self.credentials = CredentialManager(
            client_id,
            client_secret,
            token_url=token_url,
            timeout=timeout,
            refresh_margin=refresh_margin,
            retry_interval=retry_interval,
            on_error=on_error,
        )
        self.catalog = CatalogClient(self.credentials, api_url=api_url, timeout=timeout)
        self.search = LavalinkClient(self.node, timeout=timeout)
        self.resolver = TrackResolver(
            self.catalog,
            self.search,
            ranker=ranker,
            batch_mode=batch_mode,
            max_workers=max_workers,
        )

    @classmethod
    def from_config(cls, config: Config, **kwargs: Any) -> "SpotifyParser":
        """Build a parser from a loaded Config."""
        return cls(
            config.search_node,
            config.spotify.client_id,
            config.spotify.client_secret,
            timeout=config.timeout,
            batch_mode=config.batch_mode,
            max_workers=config.max_workers,
            api_url=config.spotify.api_url,
            token_url=config.spotify.token_url,
            refresh_margin=config.spotify.refresh_margin,
            retry_interval=config.spotify.retry_interval,
            **kwargs,
        )

    def get_track(self, track_id: str, convert: bool = False) -> str | SearchCandidate | None:
        """Fetch a track as a display title, or its best Lavalink match."""
        track = self.catalog.fetch_track(track_id)
        if convert:
            return self.resolver.resolve(track)
        return track.display_title

    def get_album_tracks(
        self, album_id: str, convert: bool = False, show_progress: bool = False
    ) -> list[str] | list[ResolutionResult]:
        """Fetch an album's tracks as display titles, or resolve each one."""
        tracks = self.catalog.fetch_album_tracks(album_id)
        if convert:
            return self.resolver.resolve_many(tracks, show_progress=show_progress)
        return [track.display_title for track in tracks]

    def get_playlist_tracks(
        self, playlist_id: str, convert: bool = False, show_progress: bool = False
    ) -> list[str] | list[ResolutionResult]:
        """Fetch a playlist's tracks as display titles, or resolve each one."""
        tracks = self.catalog.fetch_playlist_tracks(playlist_id)
        if convert:
            return self.resolver.resolve_many(tracks, show_progress=show_progress)
        return [track.display_title for track in tracks]

    def fetch_track(self, track: Track | dict) -> SearchCandidate | None:
        """Resolve a Track, or a raw Spotify track object, to its best match."""
        if isinstance(track, dict):
            track = Track.from_dict(track)
        return self.resolver.resolve(track)

    def close(self) -> None:
        """Stop token renewal and release HTTP sessions."""
        self.credentials.close()
        self.catalog.close()
        self.search.close()

    def __enter__(self) -> "SpotifyParser":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
