"""Processor modules for ranking search results and resolving tracks."""

from .ranking import CandidateRanker, RankingPass
from .resolver import ResolutionResult, TrackResolver

__all__ = ["CandidateRanker", "RankingPass", "ResolutionResult", "TrackResolver"]
