"""Canonical track data models."""

from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import InvalidArgument


@dataclass(frozen=True)
class Artist:
    """A credited artist."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise InvalidArgument(f"Artist name must be a non-empty string, got {self.name!r}")


@dataclass(frozen=True)
class Track:
    """Catalog track normalized to its artists and title.

    Album tracks, playlist items and single-track lookups all reduce to
    this shape.
    """

    artists: tuple[Artist, ...]
    title: str

    def __post_init__(self) -> None:
        # Accept any iterable of artists but store an immutable tuple
        object.__setattr__(self, "artists", tuple(self.artists))
        if not self.artists:
            raise InvalidArgument("Track must have at least one artist")
        if not all(isinstance(artist, Artist) for artist in self.artists):
            raise InvalidArgument("Track artists must be Artist instances")
        if not isinstance(self.title, str) or not self.title:
            raise InvalidArgument(f"Track title must be a non-empty string, got {self.title!r}")

    @classmethod
    def create(cls, artists: Iterable[str], title: str) -> "Track":
        """Build a track from plain artist names."""
        return cls(artists=tuple(Artist(name) for name in artists), title=title)

    @classmethod
    def from_dict(cls, data: Any) -> "Track":
        """Normalize a raw catalog object into a Track.

        Handles:
            - Track objects: {"artists": [{"name": ...}], "name": ...}
            - Playlist item wrappers: {"track": {...}}
            - Artists given as plain strings
            - Title under "title" instead of "name"

        Raises:
            InvalidArgument: If the object lacks an artist list or a title.
        """
        if not isinstance(data, dict):
            raise InvalidArgument(f"Track data must be an object, got {type(data).__name__}")

        if isinstance(data.get("track"), dict):
            data = data["track"]

        raw_artists = data.get("artists")
        if not isinstance(raw_artists, list) or not raw_artists:
            raise InvalidArgument("Track data has no artist list")

        names = []
        for raw in raw_artists:
            name = raw.get("name") if isinstance(raw, dict) else raw
            names.append(name)

        title = data.get("name")
        if title is None:
            title = data.get("title")
        if title is None:
            raise InvalidArgument("Track data has no title")

        return cls.create(names, title)

    @property
    def primary_artist(self) -> Artist:
        """The first credited artist."""
        return self.artists[0]

    @property
    def display_title(self) -> str:
        """Human-readable "Artist1, Artist2 - Title" string."""
        return display_title(self)

    def __str__(self) -> str:
        return self.display_title


def display_title(track: Track) -> str:
    """Join artist names with ", " and append " - <title>"."""
    artists = ", ".join(artist.name for artist in track.artists)
    return f"{artists} - {track.title}"
