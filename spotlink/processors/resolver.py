"""End-to-end track resolution."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Sequence

from tqdm import tqdm

from ..config import BatchMode
from ..errors import InvalidArgument, SpotLinkError
from ..models.candidate import SearchCandidate
from ..models.track import Artist, Track
from ..services.catalog import CatalogClient
from ..services.lavalink import DEFAULT_SEARCH_SOURCE, LavalinkClient
from .ranking import CandidateRanker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionResult:
    """Outcome of resolving one item of an album or playlist."""

    track: Track
    candidate: SearchCandidate | None = None
    error: SpotLinkError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dictionary."""
        return {
            "title": self.track.display_title,
            "candidate": self.candidate.to_dict() if self.candidate else None,
            "error": str(self.error) if self.error else None,
        }


def validate_track(track: object) -> Track:
    """Reject anything that isn't a usable Track before touching the network."""
    if not isinstance(track, Track):
        raise InvalidArgument(f"Expected a Track, received type {type(track).__name__}")
    if not track.artists:
        raise InvalidArgument("The track artists list is empty")
    if not all(isinstance(artist, Artist) and artist.name for artist in track.artists):
        raise InvalidArgument("Every track artist needs a name")
    if not isinstance(track.title, str) or not track.title:
        raise InvalidArgument("The track title is empty")
    return track


class TrackResolver:
    """Orchestrates catalog lookup, search and ranking.

    Single tracks go straight through ``resolve``. Albums and playlists are
    resolved item by item on a thread pool; ``batch_mode`` decides whether
    one failing item aborts the batch or is recorded and skipped.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        search: LavalinkClient,
        ranker: CandidateRanker | None = None,
        batch_mode: BatchMode = BatchMode.FAIL_FAST,
        max_workers: int = 4,
        search_source: str = DEFAULT_SEARCH_SOURCE,
    ) -> None:
        self._catalog = catalog
        self._search = search
        self._ranker = ranker or CandidateRanker()
        self._batch_mode = BatchMode(batch_mode)
        self._max_workers = max_workers
        self._search_source = search_source

    @property
    def batch_mode(self) -> BatchMode:
        return self._batch_mode

    def resolve(self, track: Track) -> SearchCandidate | None:
        """Find the best playable match for a track.

        Returns:
            The chosen candidate, or None if the search came back empty.

        Raises:
            InvalidArgument: The track has no artists or no title.
        """
        track = validate_track(track)
        query = track.display_title
        candidates = self._search.search(query, source=self._search_source)

        if not candidates:
            logger.info(f"No search results for '{query}'")
            return None
        return self._ranker.select(track, candidates)

    def resolve_track_id(self, track_id: str) -> SearchCandidate | None:
        return self.resolve(self._catalog.fetch_track(track_id))

    def resolve_album(
        self,
        album_id: str,
        batch_mode: BatchMode | None = None,
        show_progress: bool = False,
    ) -> list[ResolutionResult]:
        tracks = self._catalog.fetch_album_tracks(album_id)
        return self.resolve_many(tracks, batch_mode, show_progress)

    def resolve_playlist(
        self,
        playlist_id: str,
        batch_mode: BatchMode | None = None,
        show_progress: bool = False,
    ) -> list[ResolutionResult]:
        tracks = self._catalog.fetch_playlist_tracks(playlist_id)
        return self.resolve_many(tracks, batch_mode, show_progress)

    def resolve_many(
        self,
        tracks: Sequence[Track],
        batch_mode: BatchMode | None = None,
        show_progress: bool = False,
    ) -> list[ResolutionResult]:
        """Resolve tracks independently, returning results in input order.

        Args:
            tracks: Tracks to resolve
            batch_mode: Overrides the resolver's default for this call
            show_progress: Display a tqdm progress bar

        Raises:
            SpotLinkError: In fail-fast mode, the first failing item's error
                (first in input order).
        """
        mode = BatchMode(batch_mode) if batch_mode is not None else self._batch_mode
        if not tracks:
            return []

        results: list[ResolutionResult] = []
        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures: list[Future] = [executor.submit(self.resolve, track) for track in tracks]

            with tqdm(
                zip(tracks, futures),
                total=len(futures),
                desc="Resolving",
                unit="track",
                disable=not show_progress,
            ) as progress:
                for track, future in progress:
                    try:
                        results.append(ResolutionResult(track=track, candidate=future.result()))
                    except SpotLinkError as e:
                        if mode is BatchMode.FAIL_FAST:
                            logger.error(f"Could not resolve '{track}', aborting batch: {e}")
                            for pending in futures:
                                pending.cancel()
                            raise
                        logger.warning(f"Could not resolve '{track}': {e}")
                        results.append(ResolutionResult(track=track, error=e))

        resolved = sum(1 for result in results if result.candidate is not None)
        logger.info(f"Resolved {resolved}/{len(results)} tracks")
        return results
