"""Configuration management for spotlink."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv


SPOTIFY_API_URL = "https://api.spotify.com/v1"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"


class BatchMode(str, Enum):
    """How album/playlist resolution reacts to a single item failing."""

    FAIL_FAST = "fail-fast"  # raise the first item error, drop the rest
    PARTIAL = "partial"  # record per-item errors and keep going


@dataclass
class SpotifyConfig:
    """Spotify Web API configuration (client-credentials flow)."""

    client_id: str
    client_secret: str
    api_url: str = SPOTIFY_API_URL
    token_url: str = SPOTIFY_TOKEN_URL
    refresh_margin: float = 60.0  # seconds before expiry to renew
    retry_interval: float = 30.0  # seconds between failed renewals

    @property
    def is_configured(self) -> bool:
        """Check if both client credentials are set."""
        return bool(self.client_id) and bool(self.client_secret)


@dataclass
class SearchNodeConfig:
    """Lavalink search node configuration."""

    host: str
    port: int
    password: str
    secure: bool = False

    def __post_init__(self) -> None:
        self.port = int(self.port)

    @property
    def base_url(self) -> str:
        """Root URL of the node's REST API."""
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}"

    @classmethod
    def from_mapping(cls, node: "SearchNodeConfig | dict") -> "SearchNodeConfig":
        """Accept either a config instance or a ``{host, port, password}`` mapping."""
        if isinstance(node, cls):
            return node
        try:
            return cls(
                host=node["host"],
                port=node["port"],
                password=node["password"],
                secure=bool(node.get("secure", False)),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid search node configuration: {e}") from e


@dataclass
class Config:
    """Main configuration container."""

    spotify: SpotifyConfig
    search_node: SearchNodeConfig
    timeout: float = 10.0  # per outbound HTTP call, seconds
    batch_mode: BatchMode = BatchMode.FAIL_FAST
    max_workers: int = 4

    @classmethod
    def from_environment(cls, env_path: Path | None = None) -> "Config":
        """Load configuration from environment variables."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        client_id = os.getenv("SPOTIFY_CLIENT_ID")
        client_secret = os.getenv("SPOTIFY_CLIENT_SECRET")
        node_password = os.getenv("LAVALINK_PASSWORD")

        if not all([client_id, client_secret, node_password]):
            raise ValueError(
                "Missing required environment variables. "
                "Please set SPOTIFY_CLIENT_ID, SPOTIFY_CLIENT_SECRET, and LAVALINK_PASSWORD"
            )

        try:
            batch_mode = BatchMode(os.getenv("SPOTLINK_BATCH_MODE", "fail-fast").lower())
        except ValueError:
            raise ValueError(
                "SPOTLINK_BATCH_MODE must be one of: "
                + ", ".join(mode.value for mode in BatchMode)
            ) from None

        try:
            return cls(
                spotify=SpotifyConfig(
                    client_id=client_id,
                    client_secret=client_secret,
                    api_url=os.getenv("SPOTIFY_API_URL", SPOTIFY_API_URL),
                ),
                search_node=SearchNodeConfig(
                    host=os.getenv("LAVALINK_HOST", "localhost"),
                    port=os.getenv("LAVALINK_PORT", "2333"),
                    password=node_password,
                    secure=os.getenv("LAVALINK_SECURE", "false").lower() == "true",
                ),
                timeout=float(os.getenv("SPOTLINK_TIMEOUT", "10")),
                batch_mode=batch_mode,
                max_workers=int(os.getenv("SPOTLINK_WORKERS", "4")),
            )
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e

    def validate(self) -> None:
        """Validate the configuration."""
        logger = logging.getLogger(__name__)

        if not self.spotify.is_configured:
            raise ValueError("SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET are required")
        if not self.search_node.host:
            raise ValueError("LAVALINK_HOST is required")
        if not 0 < self.search_node.port < 65536:
            raise ValueError(f"LAVALINK_PORT out of range: {self.search_node.port}")
        if self.timeout <= 0:
            raise ValueError("SPOTLINK_TIMEOUT must be positive")
        if self.max_workers < 1:
            raise ValueError("SPOTLINK_WORKERS must be at least 1")

        if self.spotify.refresh_margin >= 3600:
            logger.warning(
                f"Refresh margin of {self.spotify.refresh_margin}s is longer than "
                "a Spotify token lifetime; tokens will renew at half-life instead"
            )


def configure_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
