"""Search result ranking.

Search nodes return noisy results: lyric videos, remixes, live versions,
fan uploads. The ranker picks one candidate by running a fixed sequence of
stable refinement passes over the node's own ordering. Each pass moves the
candidates that satisfy its predicate ahead of those that don't and keeps
relative order inside both groups, so the last pass dominates and ties fall
back to the node's relevance order.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Sequence

from ..models.candidate import SearchCandidate
from ..models.track import Track

logger = logging.getLogger(__name__)

# Suffix YouTube puts on auto-generated artist channels
TOPIC_CHANNEL_SUFFIX = " - Topic"

OFFICIAL_AUDIO_PATTERN = re.compile(r"(official)? ?audio", re.IGNORECASE)
LYRICS_VIDEO_PATTERN = re.compile(r"(official)? ?lyrics? ?(video)?", re.IGNORECASE)
MUSIC_VIDEO_PATTERN = re.compile(r"(official)? ?(music)? ?video", re.IGNORECASE)


def matches_exactly(value: str, text: str) -> bool:
    """Case-insensitive full-string match of ``text`` against a literal ``value``."""
    return re.fullmatch(re.escape(value), text, re.IGNORECASE) is not None


def expected_channel_names(track: Track) -> tuple[str, str]:
    primary = track.primary_artist.name
    return primary, f"{primary}{TOPIC_CHANNEL_SUFFIX}"


def is_artist_channel(track: Track, candidate: SearchCandidate) -> bool:
    """Uploaded by the primary artist's channel or its "- Topic" channel."""
    return any(
        matches_exactly(name, candidate.info.author)
        for name in expected_channel_names(track)
    )


def is_official_audio(track: Track, candidate: SearchCandidate) -> bool:
    return OFFICIAL_AUDIO_PATTERN.search(candidate.info.title) is not None


def is_lyrics_video(track: Track, candidate: SearchCandidate) -> bool:
    return LYRICS_VIDEO_PATTERN.search(candidate.info.title) is not None


def is_music_video(track: Track, candidate: SearchCandidate) -> bool:
    return MUSIC_VIDEO_PATTERN.search(candidate.info.title) is not None


def is_exact_title(track: Track, candidate: SearchCandidate) -> bool:
    """Result title is the bare track title."""
    return matches_exactly(track.title, candidate.info.title)


@dataclass(frozen=True)
class RankingPass:
    """One named refinement step."""

    name: str
    predicate: Callable[[Track, SearchCandidate], bool]

    def apply(self, track: Track, candidates: Sequence[SearchCandidate]) -> list[SearchCandidate]:
        """Move matching candidates to the front, preserving order in each group."""
        matched = []
        unmatched = []
        for candidate in candidates:
            if self.predicate(track, candidate):
                matched.append(candidate)
            else:
                unmatched.append(candidate)
        return matched + unmatched


# Weakest first; the last pass has the final say
DEFAULT_PASSES: tuple[RankingPass, ...] = (
    RankingPass("channel_name", is_artist_channel),
    RankingPass("official_audio", is_official_audio),
    RankingPass("lyrics_video", is_lyrics_video),
    RankingPass("music_video", is_music_video),
    RankingPass("exact_title", is_exact_title),
)


class CandidateRanker:
    """Selects the best search result for a track.

    Stateless: one instance can serve any number of concurrent resolutions.
    """

    def __init__(self, passes: Sequence[RankingPass] = DEFAULT_PASSES) -> None:
        self._passes = tuple(passes)

    def rank(self, track: Track, candidates: Sequence[SearchCandidate]) -> list[SearchCandidate]:
        """Return every candidate, best first."""
        ranked = list(candidates)
        for ranking_pass in self._passes:
            ranked = ranking_pass.apply(track, ranked)
        return ranked

    def select(self, track: Track, candidates: Sequence[SearchCandidate]) -> SearchCandidate | None:
        """Pick the single best candidate.

        Returns None only when ``candidates`` is empty; if no heuristic fires
        the node's first result wins.
        """
        if not candidates:
            return None

        best = self.rank(track, candidates)[0]
        logger.debug(
            f"Selected '{best.info.title}' by '{best.info.author}' "
            f"for '{track.display_title}' out of {len(candidates)} results"
        )
        return best
