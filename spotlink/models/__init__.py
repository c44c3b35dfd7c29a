"""Data models for tracks, search results and credentials."""

from .track import Artist, Track, display_title
from .candidate import CandidateInfo, SearchCandidate
from .credential import Credential

__all__ = [
    "Artist",
    "Track",
    "display_title",
    "CandidateInfo",
    "SearchCandidate",
    "Credential",
]
