"""Unit tests for the spotlink command line."""

import json
import sys
from pathlib import Path

import pytest

# Add parent dir to path so spotlink is importable as a package
sys.path.insert(0, str(Path(__file__).parent.parent))

from spotlink import main as cli
from spotlink.config import BatchMode, Config, SearchNodeConfig, SpotifyConfig
from spotlink.errors import UpstreamError
from spotlink.models import CandidateInfo, SearchCandidate, Track
from spotlink.processors.resolver import ResolutionResult


class FakeParser:
    """Stands in for SpotifyParser and records how it was used."""

    instances = []

    def __init__(self, config: Config, fail: Exception | None = None) -> None:
        self.config = config
        self.fail = fail
        self.calls = []
        self.closed = False
        FakeParser.instances.append(self)

    @classmethod
    def from_config(cls, config: Config) -> "FakeParser":
        return cls(config)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def get_track(self, track_id, convert=False):
        self.calls.append(("track", track_id, convert))
        if self.fail:
            raise self.fail
        if convert:
            return SearchCandidate(track="ref", info=CandidateInfo(author="A", title="T"))
        return "A - T"

    def get_album_tracks(self, album_id, convert=False, show_progress=False):
        self.calls.append(("album", album_id, convert))
        return ["A - One", "A - Two"]

    def get_playlist_tracks(self, playlist_id, convert=False, show_progress=False):
        self.calls.append(("playlist", playlist_id, convert))
        track = Track.create(["A"], "T")
        return [
            ResolutionResult(track=track, candidate=SearchCandidate("ref", CandidateInfo("A", "T"))),
            ResolutionResult(track=track, error=UpstreamError("node down")),
        ]


@pytest.fixture
def config():
    return Config(
        spotify=SpotifyConfig(client_id="id", client_secret="secret"),
        search_node=SearchNodeConfig(host="localhost", port=2333, password="pw"),
    )


@pytest.fixture(autouse=True)
def fake_environment(monkeypatch, config):
    FakeParser.instances = []
    monkeypatch.setattr(cli.Config, "from_environment", classmethod(lambda cls, env_path=None: config))
    monkeypatch.setattr(cli, "SpotifyParser", FakeParser)
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: None)


class TestMain:
    """Tests for main()."""

    def test_track_title(self, capsys):
        """A track URL prints its display title."""
        assert cli.main(["https://open.spotify.com/track/abc123"]) == 0
        assert capsys.readouterr().out.strip() == "A - T"
        assert FakeParser.instances[0].calls == [("track", "abc123", False)]
        assert FakeParser.instances[0].closed

    def test_album_titles(self, capsys):
        """An album prints one title per line."""
        assert cli.main(["spotify:album:xyz"]) == 0
        assert capsys.readouterr().out.splitlines() == ["A - One", "A - Two"]

    def test_bare_id_with_kind(self):
        """--kind lets a bare ID through."""
        assert cli.main(["abc", "--kind", "album"]) == 0
        assert FakeParser.instances[0].calls == [("album", "abc", False)]

    def test_resolve_track_json(self, capsys):
        """--resolve prints the chosen candidate as JSON."""
        assert cli.main(["spotify:track:abc", "--resolve"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["track"] == "ref"
        assert output["info"]["title"] == "T"

    def test_resolve_playlist_reports_failures(self, capsys):
        """Failed items are counted on stderr."""
        assert cli.main(["spotify:playlist:pl", "--resolve", "--partial"]) == 0
        captured = capsys.readouterr()
        output = json.loads(captured.out)
        assert output[1]["error"] == "node down"
        assert "1 of 2 tracks could not be resolved" in captured.err

    def test_overrides_applied(self, config):
        """Command line flags override the loaded configuration."""
        cli.main(["spotify:track:abc", "--partial", "--workers", "8", "--timeout", "3"])
        assert config.batch_mode is BatchMode.PARTIAL
        assert config.max_workers == 8
        assert config.timeout == 3.0

    def test_bad_reference(self, capsys):
        """An unparseable reference exits with status 2."""
        assert cli.main(["abc"]) == 2
        assert capsys.readouterr().out.startswith("Error:")
        assert FakeParser.instances == []

    def test_invalid_config(self, capsys):
        """Invalid settings exit with status 2."""
        assert cli.main(["spotify:track:abc", "--workers", "0"]) == 2
        assert "SPOTLINK_WORKERS" in capsys.readouterr().out

    def test_resolution_error(self, capsys, monkeypatch):
        """Errors while resolving exit with status 1."""
        monkeypatch.setattr(
            FakeParser, "from_config", classmethod(lambda cls, config: cls(config, UpstreamError("down")))
        )
        assert cli.main(["spotify:track:abc"]) == 1
        assert capsys.readouterr().out.strip() == "Error: down"
