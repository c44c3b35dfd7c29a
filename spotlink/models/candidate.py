"""Search node result models."""

from dataclasses import dataclass, field
from typing import Any

from ..errors import MalformedResponse

# Keys of a Lavalink track info object mapped onto CandidateInfo fields
_INFO_FIELDS = {
    "identifier": "identifier",
    "isSeekable": "is_seekable",
    "author": "author",
    "length": "length",
    "isStream": "is_stream",
    "position": "position",
    "title": "title",
    "uri": "uri",
    "sourceName": "source_name",
}


@dataclass(frozen=True)
class CandidateInfo:
    """Descriptive metadata for one search result."""

    author: str
    title: str
    identifier: str | None = None
    is_seekable: bool = False
    length: int = 0  # milliseconds
    is_stream: bool = False
    position: int = 0  # milliseconds
    uri: str | None = None
    source_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


@dataclass(frozen=True)
class SearchCandidate:
    """One raw result from the search node's load tracks query.

    ``track`` is the opaque, base64 playable reference the node hands back;
    it is passed through untouched.
    """

    track: str
    info: CandidateInfo

    @classmethod
    def from_dict(cls, data: Any) -> "SearchCandidate":
        """Parse a Lavalink track object (v3 "track" or v4 "encoded").

        Raises:
            MalformedResponse: If the reference, info, author or title is missing.
        """
        if not isinstance(data, dict):
            raise MalformedResponse(f"Search result must be an object, got {type(data).__name__}")

        reference = data.get("track") or data.get("encoded")
        if not isinstance(reference, str) or not reference:
            raise MalformedResponse("Search result has no playable reference")

        raw_info = data.get("info")
        if not isinstance(raw_info, dict):
            raise MalformedResponse("Search result has no info object")

        for key in ("author", "title"):
            if not isinstance(raw_info.get(key), str):
                raise MalformedResponse(f"Search result info has no {key}")

        known = {attr: raw_info[key] for key, attr in _INFO_FIELDS.items() if key in raw_info}
        extra = {key: value for key, value in raw_info.items() if key not in _INFO_FIELDS}

        return cls(track=reference, info=CandidateInfo(**known, extra=extra))

    def to_dict(self) -> dict:
        """Convert back to the Lavalink wire shape."""
        info = {key: getattr(self.info, attr) for key, attr in _INFO_FIELDS.items()}
        info.update(self.info.extra)
        return {"track": self.track, "info": info}
