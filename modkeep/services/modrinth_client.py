"""Module: modrinth_client.py

Author: Michael Economou
Date: 2026-02-13

Modrinth v2 API client built on httpx.AsyncClient.

Endpoints used:
    GET  /project/{id}/version     versions of a project, newest first
    GET  /project/{id}             project title and icon
    GET  /version_file/{sha1}      identify an installed file
    POST /version_files/update     latest compatible version per file hash

Every transport failure, HTTP error status or malformed payload is raised as
RegistryError(platform=Platform.MODRINTH).
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from modkeep.config import (
    HASH_ALGORITHM,
    MODRINTH_API_URL,
    REGISTRY_TIMEOUT_SECONDS,
    USER_AGENT,
)
from modkeep.core.errors import RegistryError
from modkeep.models.content_item import ModrinthInfo, Platform
from modkeep.models.remote_version import RemoteVersion
from modkeep.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)


class ModrinthClient:
    """PlatformRegistryClientProtocol implementation for Modrinth."""

    platform = Platform.MODRINTH

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        base_url: str = MODRINTH_API_URL,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            headers={"User-Agent": USER_AGENT},
            timeout=httpx.Timeout(REGISTRY_TIMEOUT_SECONDS),
        )

    async def __aenter__(self) -> ModrinthClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # =====================================
    # Registry operations
    # =====================================

    async def list_versions(
        self,
        project_id: str,
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> list[RemoteVersion]:
        params = {}
        if loaders:
            params["loaders"] = json.dumps(loaders)
        if game_versions:
            params["game_versions"] = json.dumps(game_versions)

        data = await self._request("GET", f"/project/{project_id}/version", params=params)
        if data is None:
            raise RegistryError(f"Modrinth project {project_id} not found", self.platform)
        if not isinstance(data, list):
            raise RegistryError("Unexpected version list payload from Modrinth", self.platform)

        versions = [self._parse_version(entry) for entry in data]
        logger.debug(
            "[ModrinthClient] %d versions for %s (loaders=%s, game_versions=%s)",
            len(versions),
            project_id,
            loaders,
            game_versions,
            extra={"dev_only": True},
        )
        return versions

    async def get_project(self, project_id: str) -> dict[str, Any] | None:
        """Raw project record, or None if Modrinth does not know the project."""
        data = await self._request("GET", f"/project/{project_id}")
        if data is not None and not isinstance(data, dict):
            raise RegistryError("Unexpected project payload from Modrinth", self.platform)
        return data

    async def latest_versions_by_hash(
        self,
        hashes: list[str],
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> dict[str, RemoteVersion]:
        """One bulk request; hashes Modrinth does not know are absent from the result."""
        if not hashes:
            return {}
        body: dict[str, Any] = {"hashes": list(hashes), "algorithm": HASH_ALGORITHM}
        if loaders:
            body["loaders"] = loaders
        if game_versions:
            body["game_versions"] = game_versions

        data = await self._request("POST", "/version_files/update", json=body)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise RegistryError("Unexpected hash update payload from Modrinth", self.platform)

        result = {sha1: self._parse_version(entry) for sha1, entry in data.items()}
        logger.info(
            "[ModrinthClient] Bulk hash lookup: %d of %d hashes matched", len(result), len(hashes)
        )
        return result

    async def metadata_for_hash(self, sha1: str) -> ModrinthInfo | None:
        """Identify an installed file by its sha1."""
        data = await self._request(
            "GET", f"/version_file/{sha1}", params={"algorithm": HASH_ALGORITHM}
        )
        if data is None:
            return None
        version = self._parse_version(data)

        project = None
        if version.project_id:
            project = await self.get_project(version.project_id)

        return ModrinthInfo(
            project_id=version.project_id,
            version_id=version.id,
            version_number=version.version_number,
            name=project.get("title") if project else None,
            icon_url=project.get("icon_url") if project else None,
        )

    # =====================================
    # Helpers
    # =====================================

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request; returns decoded JSON, or None on 404."""
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("[ModrinthClient] %s %s failed: %s", method, path, e)
            raise RegistryError(f"Modrinth request failed: {e}", self.platform) from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise RegistryError(
                f"Modrinth returned HTTP {response.status_code} for {path}", self.platform
            )
        try:
            return response.json()
        except ValueError as e:
            raise RegistryError(
                f"Malformed response from Modrinth for {path}", self.platform
            ) from e

    def _parse_version(self, data: Any) -> RemoteVersion:
        try:
            return RemoteVersion.from_dict(data, platform=self.platform)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RegistryError(
                f"Malformed version record from Modrinth: {e}", self.platform
            ) from e
