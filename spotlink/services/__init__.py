"""Service modules for external integrations."""

from .credentials import CredentialManager
from .catalog import CatalogClient
from .lavalink import LavalinkClient

__all__ = ["CredentialManager", "CatalogClient", "LavalinkClient"]
