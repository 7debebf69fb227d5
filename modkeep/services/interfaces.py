"""Collaborator protocol definitions for modkeep.

Author: Michael Economou
Date: 2026-02-11

This module defines Protocol classes for every capability the core consumes.
The core never touches the filesystem or the network itself; it awaits these
collaborators. Using Protocols allows structural subtyping, so test doubles
and alternative backends need no common base class.

All protocols are runtime-checkable, meaning isinstance() works with them.

Usage:
    from modkeep.services.interfaces import HashServiceProtocol

    class FixedHasher:
        async def compute_hash(self, item: ContentItem) -> str | None:
            return "abc123"

    hasher: HashServiceProtocol = FixedHasher()
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from modkeep.models.content_item import (
        ContentItem,
        ContentType,
        CurseForgeInfo,
        ModrinthInfo,
        Platform,
        Profile,
    )
    from modkeep.models.remote_version import RemoteVersion

__all__ = [
    "ContentStoreProtocol",
    "FolderOpenerProtocol",
    "HashServiceProtocol",
    "InventoryScannerProtocol",
    "MetadataServiceProtocol",
    "PlatformRegistryClientProtocol",
    "RegistryClientProtocol",
]


@runtime_checkable
class InventoryScannerProtocol(Protocol):
    """Yields the current on-disk content of a profile."""

    async def scan_inventory(
        self, profile: Profile, content_type: ContentType, force_refresh: bool = False
    ) -> list[ContentItem]:
        """Scan the profile's folder for ``content_type``.

        Args:
            profile: Profile whose content is scanned.
            content_type: Which content folder to scan.
            force_refresh: Bypass any scan cache the implementation keeps.

        Raises:
            InventoryError: If the folder cannot be read.
        """
        ...


@runtime_checkable
class HashServiceProtocol(Protocol):
    """Computes content hashes for items created without one."""

    async def compute_hash(self, item: ContentItem) -> str | None:
        """Return the SHA-1 hex digest of the item, or None if not hashable."""
        ...


@runtime_checkable
class MetadataServiceProtocol(Protocol):
    """Enriches items with registry metadata."""

    async def fetch_project_metadata(
        self, platform: Platform, item: ContentItem
    ) -> ModrinthInfo | CurseForgeInfo | None:
        """Look up project/version metadata for ``item`` on ``platform``.

        Returns None when the registry does not know the item.

        Raises:
            RegistryError: If the lookup failed.
        """
        ...


@runtime_checkable
class RegistryClientProtocol(Protocol):
    """Remote registry access, normalized to RemoteVersion."""

    async def list_versions(
        self,
        platform: Platform,
        project_id: str,
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> list[RemoteVersion]:
        """List versions of a project, newest first.

        Raises:
            RegistryError: If the request failed.
        """
        ...

    async def latest_versions_by_hash(
        self,
        platform: Platform,
        hashes: list[str],
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> dict[str, RemoteVersion]:
        """Map each known file hash to the latest compatible version.

        Unknown hashes are absent from the result.

        Raises:
            RegistryError: If the request failed.
        """
        ...


@runtime_checkable
class PlatformRegistryClientProtocol(Protocol):
    """One registry backend (Modrinth, CurseForge), plugged into a RegistryRouter."""

    async def list_versions(
        self,
        project_id: str,
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> list[RemoteVersion]:
        ...

    async def latest_versions_by_hash(
        self,
        hashes: list[str],
        loaders: list[str] | None = None,
        game_versions: list[str] | None = None,
    ) -> dict[str, RemoteVersion]:
        ...

    async def metadata_for_hash(self, sha1: str) -> ModrinthInfo | CurseForgeInfo | None:
        """Identify a file by its hash; None when the registry does not know it."""
        ...


@runtime_checkable
class ContentStoreProtocol(Protocol):
    """Mutating file primitives."""

    async def install_version(
        self, profile: Profile, content_type: ContentType, version: RemoteVersion
    ) -> str:
        """Download and install the version's primary file. Returns the new filename.

        Raises:
            ContentOperationError: If download or write failed.
        """
        ...

    async def install_file(
        self, profile: Profile, content_type: ContentType, file_path: str
    ) -> str:
        """Copy a local file into the profile. Returns the new filename."""
        ...

    async def delete_file(self, item: ContentItem) -> None:
        """Remove the item's file or directory.

        Raises:
            ContentOperationError: If the file could not be removed.
        """
        ...

    async def rename_toggle_disabled(self, item: ContentItem) -> str:
        """Add or remove the disabled marker. Returns the new filename.

        Raises:
            ContentOperationError: If the rename failed (e.g. file locked).
        """
        ...


@runtime_checkable
class FolderOpenerProtocol(Protocol):
    """Presentation convenience: reveal an item in the system file manager."""

    def open_containing_folder(self, item: ContentItem) -> None:
        ...
