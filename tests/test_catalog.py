"""Unit tests for spotlink/services/catalog.py."""

import sys
from pathlib import Path

import pytest
import requests
import responses
from responses import matchers

# Add parent dir to path so spotlink is importable as a package
sys.path.insert(0, str(Path(__file__).parent.parent))

from spotlink.errors import (
    AuthenticationFailed,
    CredentialUnavailable,
    InvalidArgument,
    MalformedResponse,
    UpstreamError,
    UpstreamTimeout,
)
from spotlink.models import Track
from spotlink.services.catalog import CatalogClient

API = "https://api.spotify.com/v1"


class StubCredentials:
    """Hands out a fixed token, or raises a given error."""

    def __init__(self, token: str = "test-token", error: Exception | None = None) -> None:
        self.token = token
        self.error = error
        self.calls = 0

    def authorization_header(self) -> str:
        self.calls += 1
        if self.error:
            raise self.error
        return f"Bearer {self.token}"


def spotify_track(title: str, *artists: str) -> dict:
    return {"artists": [{"name": a, "type": "artist"} for a in artists], "name": title}


@pytest.fixture
def credentials():
    return StubCredentials()


@pytest.fixture
def catalog(credentials):
    return CatalogClient(credentials, timeout=5)


class TestFetchTrack:
    """Tests for fetch_track()."""

    @responses.activate
    def test_fetches_and_normalizes(self, catalog):
        """A track lookup should return a canonical Track."""
        responses.add(
            responses.GET,
            f"{API}/tracks/abc123",
            json=spotify_track("One Kiss", "Calvin Harris", "Dua Lipa"),
        )
        track = catalog.fetch_track("abc123")
        assert track == Track.create(["Calvin Harris", "Dua Lipa"], "One Kiss")

    @responses.activate
    def test_sends_bearer_token(self, catalog, credentials):
        """Requests should carry the current bearer token."""
        responses.add(responses.GET, f"{API}/tracks/abc123", json=spotify_track("T", "A"))
        catalog.fetch_track("abc123")
        assert responses.calls[0].request.headers["Authorization"] == "Bearer test-token"

    @responses.activate
    def test_reads_token_fresh_each_call(self, catalog, credentials):
        """Each request should read the token again."""
        responses.add(responses.GET, f"{API}/tracks/a", json=spotify_track("T", "A"))
        responses.add(responses.GET, f"{API}/tracks/b", json=spotify_track("T", "A"))
        catalog.fetch_track("a")
        credentials.token = "rotated"
        catalog.fetch_track("b")
        assert responses.calls[1].request.headers["Authorization"] == "Bearer rotated"

    @pytest.mark.parametrize("bad_id", ["", "   ", None, 123])
    def test_invalid_id(self, catalog, credentials, bad_id):
        """Empty or non-string IDs should fail before any request."""
        with pytest.raises(InvalidArgument):
            catalog.fetch_track(bad_id)
        assert credentials.calls == 0

    @responses.activate
    def test_missing_title(self, catalog):
        """A body without a title is malformed."""
        responses.add(responses.GET, f"{API}/tracks/x", json={"artists": [{"name": "A"}]})
        with pytest.raises(MalformedResponse):
            catalog.fetch_track("x")

    @responses.activate
    def test_missing_artists(self, catalog):
        """A body without artists is malformed."""
        responses.add(responses.GET, f"{API}/tracks/x", json={"name": "T"})
        with pytest.raises(MalformedResponse):
            catalog.fetch_track("x")

    @responses.activate
    def test_not_found(self, catalog):
        """A 404 should surface as UpstreamError with the status."""
        responses.add(
            responses.GET,
            f"{API}/tracks/missing",
            status=404,
            json={"error": {"status": 404, "message": "Not found"}},
        )
        with pytest.raises(UpstreamError) as exc_info:
            catalog.fetch_track("missing")
        assert exc_info.value.status_code == 404

    @responses.activate
    def test_unauthorized_not_retried(self, catalog):
        """A 401 should raise AuthenticationFailed after a single request."""
        responses.add(responses.GET, f"{API}/tracks/x", status=401)
        with pytest.raises(AuthenticationFailed):
            catalog.fetch_track("x")
        assert len(responses.calls) == 1

    @responses.activate
    def test_unparseable_body(self, catalog):
        """A non-JSON body should surface as UpstreamError."""
        responses.add(responses.GET, f"{API}/tracks/x", body="<html>oops</html>")
        with pytest.raises(UpstreamError):
            catalog.fetch_track("x")

    @responses.activate
    def test_timeout(self, catalog):
        """A timed out request should surface as UpstreamTimeout."""
        responses.add(
            responses.GET,
            f"{API}/tracks/x",
            body=requests.exceptions.ConnectTimeout("slow"),
        )
        with pytest.raises(UpstreamTimeout):
            catalog.fetch_track("x")

    def test_credential_errors_propagate(self):
        """Credential errors should reach the caller untouched."""
        catalog = CatalogClient(StubCredentials(error=CredentialUnavailable("not yet")))
        with pytest.raises(CredentialUnavailable):
            catalog.fetch_track("x")


class TestFetchAlbumTracks:
    """Tests for fetch_album_tracks()."""

    @responses.activate
    def test_album_order(self, catalog):
        """Album tracks should come back in album order."""
        responses.add(
            responses.GET,
            f"{API}/albums/alb/tracks",
            json={
                "items": [spotify_track("One", "A"), spotify_track("Two", "A", "B")],
                "next": None,
            },
        )
        tracks = catalog.fetch_album_tracks("alb")
        assert [t.display_title for t in tracks] == ["A - One", "A, B - Two"]

    @responses.activate
    def test_empty_album(self, catalog):
        """An album with no tracks yields an empty list."""
        responses.add(responses.GET, f"{API}/albums/alb/tracks", json={"items": [], "next": None})
        assert catalog.fetch_album_tracks("alb") == []

    @responses.activate
    def test_follows_pagination(self, catalog):
        """Every page should be fetched by following next links."""
        page_two = f"{API}/albums/alb/tracks?offset=50&limit=50"
        responses.add(
            responses.GET,
            f"{API}/albums/alb/tracks",
            match=[matchers.query_param_matcher({"limit": "50"})],
            json={"items": [spotify_track("One", "A")], "next": page_two},
        )
        responses.add(
            responses.GET,
            f"{API}/albums/alb/tracks",
            match=[matchers.query_param_matcher({"offset": "50", "limit": "50"})],
            json={"items": [spotify_track("Two", "A")], "next": None},
        )
        tracks = catalog.fetch_album_tracks("alb")
        assert [t.title for t in tracks] == ["One", "Two"]

    @responses.activate
    def test_repeated_next_link(self, catalog):
        """A next link pointing back at a visited page is malformed."""
        page_two = f"{API}/albums/alb/tracks?offset=50&limit=50"
        responses.add(
            responses.GET,
            f"{API}/albums/alb/tracks",
            match=[matchers.query_param_matcher({"limit": "50"})],
            json={"items": [spotify_track("One", "A")], "next": page_two},
        )
        responses.add(
            responses.GET,
            f"{API}/albums/alb/tracks",
            match=[matchers.query_param_matcher({"offset": "50", "limit": "50"})],
            json={"items": [spotify_track("Two", "A")], "next": page_two},
        )
        with pytest.raises(MalformedResponse, match="repeats"):
            catalog.fetch_album_tracks("alb")
        assert len(responses.calls) == 2

    @responses.activate
    def test_missing_items(self, catalog):
        """A body without an items list is malformed."""
        responses.add(responses.GET, f"{API}/albums/alb/tracks", json={"tracks": []})
        with pytest.raises(MalformedResponse):
            catalog.fetch_album_tracks("alb")

    def test_invalid_id(self, catalog):
        """An empty album ID should be rejected."""
        with pytest.raises(InvalidArgument):
            catalog.fetch_album_tracks("")


class TestFetchPlaylistTracks:
    """Tests for fetch_playlist_tracks()."""

    @responses.activate
    def test_flattens_item_wrappers(self, catalog):
        """Playlist items should be unwrapped in playlist order."""
        responses.add(
            responses.GET,
            f"{API}/playlists/pl/tracks",
            json={
                "items": [
                    {"added_at": "2021-01-01T00:00:00Z", "track": spotify_track("B", "Y")},
                    {"added_at": "2021-01-02T00:00:00Z", "track": spotify_track("A", "X")},
                ],
                "next": None,
            },
        )
        tracks = catalog.fetch_playlist_tracks("pl")
        assert [t.display_title for t in tracks] == ["Y - B", "X - A"]

    @responses.activate
    def test_skips_removed_tracks(self, catalog):
        """Items whose track is null should be skipped."""
        responses.add(
            responses.GET,
            f"{API}/playlists/pl/tracks",
            json={"items": [{"track": None}, {"track": spotify_track("A", "X")}], "next": None},
        )
        assert [t.title for t in catalog.fetch_playlist_tracks("pl")] == ["A"]

    @responses.activate
    def test_item_without_wrapper(self, catalog):
        """Items with no track key are malformed."""
        responses.add(
            responses.GET,
            f"{API}/playlists/pl/tracks",
            json={"items": [{"added_at": "2021-01-01"}], "next": None},
        )
        with pytest.raises(MalformedResponse):
            catalog.fetch_playlist_tracks("pl")

    @responses.activate
    def test_malformed_track(self, catalog):
        """A wrapped track missing its artists is malformed."""
        responses.add(
            responses.GET,
            f"{API}/playlists/pl/tracks",
            json={"items": [{"track": {"name": "T"}}], "next": None},
        )
        with pytest.raises(MalformedResponse):
            catalog.fetch_playlist_tracks("pl")

    @responses.activate
    def test_server_error(self, catalog):
        """A 5xx should surface as UpstreamError."""
        responses.add(responses.GET, f"{API}/playlists/pl/tracks", status=502)
        with pytest.raises(UpstreamError):
            catalog.fetch_playlist_tracks("pl")
