"""Module: registry_router.py

Author: Michael Economou
Date: 2026-02-13

RegistryRouter - presents several per-platform clients as one registry.

The core talks to a single RegistryClientProtocol/MetadataServiceProtocol
and passes the platform with each call; the router forwards to the client
registered for that platform.

Usage:
    router = RegistryRouter({Platform.MODRINTH: ModrinthClient()})
    versions = await router.list_versions(Platform.MODRINTH, "AANobbMI")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modkeep.core.errors import RegistryError
from modkeep.models.content_item import Platform
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.content_item import ContentItem, CurseForgeInfo, ModrinthInfo
    from modkeep.models.remote_version import RemoteVersion
    from modkeep.services.interfaces import PlatformRegistryClientProtocol

logger = get_cached_logger(__name__)


class RegistryRouter:
    """Dispatches registry calls to the client of each platform."""

    def __init__(
        self, clients: dict[Platform, PlatformRegistryClientProtocol] | None = None
    ) -> None:
        self._clients: dict[Platform, PlatformRegistryClientProtocol] = dict(clients or {})

    def register(self, platform: Platform, client: PlatformRegistryClientProtocol) -> None:
        if platform is Platform.LOCAL:
            raise ValueError("Local content has no registry")
        self._clients[platform] = client
        logger.debug("[RegistryRouter] Registered %s client", platform.value)

    def has_client(self, platform: Platform) -> bool:
        return platform in self._clients

    def client_for(self, platform: Platform) -> PlatformRegistryClientProtocol:
        """Client registered for ``platform``.

        Raises:
            RegistryError: If no client is registered for it.
        """
        client = self._clients.get(platform)
        if client is None:
            raise RegistryError(f"No registry client configured for {platform.value}", platform)
        return client

    async def list_versions(
        self,
        platform: Platform,
        project_id: str,
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> list[RemoteVersion]:
        return await self.client_for(platform).list_versions(project_id, loaders, game_versions)

    async def latest_versions_by_hash(
        self,
        platform: Platform,
        hashes: list[str],
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> dict[str, RemoteVersion]:
        return await self.client_for(platform).latest_versions_by_hash(
            hashes, loaders, game_versions
        )

    async def fetch_project_metadata(
        self, platform: Platform, item: ContentItem
    ) -> ModrinthInfo | CurseForgeInfo | None:
        if not item.sha1_hash:
            return None
        return await self.client_for(platform).metadata_for_hash(item.sha1_hash)
