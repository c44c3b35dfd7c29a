"""Resolve Spotify tracks, albums and playlists into Lavalink tracks."""

from .config import BatchMode, Config, SearchNodeConfig, SpotifyConfig
from .errors import (
    AuthenticationFailed,
    CredentialUnavailable,
    InvalidArgument,
    MalformedResponse,
    SpotLinkError,
    UpstreamError,
    UpstreamTimeout,
)
from .models import Artist, SearchCandidate, Track, display_title
from .parser import SpotifyParser
from .processors import CandidateRanker, ResolutionResult, TrackResolver

__version__ = "0.1.0"

__all__ = [
    "BatchMode",
    "Config",
    "SearchNodeConfig",
    "SpotifyConfig",
    "AuthenticationFailed",
    "CredentialUnavailable",
    "InvalidArgument",
    "MalformedResponse",
    "SpotLinkError",
    "UpstreamError",
    "UpstreamTimeout",
    "Artist",
    "SearchCandidate",
    "Track",
    "display_title",
    "SpotifyParser",
    "CandidateRanker",
    "ResolutionResult",
    "TrackResolver",
]
