"""Module: local_content_store.py

Author: Michael Economou
Date: 2026-02-13

LocalContentStore - filesystem collaborator for a profile's content folders.

Implements the scanner, hash and content-store protocols:
- scan_inventory: list the per-type folder under the profile's content root
- compute_hash: chunked SHA-1 via aiofiles
- rename_toggle_disabled / delete_file: mutation primitives
- install_version / install_file: download or copy new files in place

Every scan lists the folder again. An entry whose file keeps its mtime and
size (and was not touched through the store) reuses the item from the
previous scan, so hashes and registry identity found for it carry over.

Usage:
    store = LocalContentStore()
    items = await store.scan_inventory(profile, ContentType.MOD)
    new_name = await store.rename_toggle_disabled(items[0])
"""

from __future__ import annotations

import asyncio
import hashlib
import os
import shutil
from typing import TYPE_CHECKING

import aiofiles
import aiofiles.os
import httpx

from modkeep.config import (
    CONTENT_DIRECTORIES,
    CONTENT_EXTENSIONS,
    DISABLED_SUFFIX,
    DOWNLOAD_CHUNK_SIZE,
    HASH_ALGORITHM,
    HASH_CHUNK_SIZE,
    REGISTRY_TIMEOUT_SECONDS,
    USER_AGENT,
)
from modkeep.core.errors import ContentOperationError, InventoryError
from modkeep.models.content_item import ContentItem, ContentType
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.content_item import Profile
    from modkeep.models.remote_version import RemoteVersion

logger = get_cached_logger(__name__)

PARTIAL_SUFFIX = ".part"

FileStamp = tuple[int, int]  # (st_mtime_ns, st_size)


def toggled_filename(filename: str) -> str:
    """Filename with the disabled marker added or removed."""
    if filename.endswith(DISABLED_SUFFIX):
        return filename[: -len(DISABLED_SUFFIX)]
    return filename + DISABLED_SUFFIX


def _target_path(folder: str, filename: str) -> str:
    """Path of ``filename`` inside ``folder``; names that leave the folder are rejected."""
    if (
        filename in ("", ".", "..")
        or "/" in filename
        or "\\" in filename
        or os.path.basename(filename) != filename
    ):
        raise ContentOperationError(filename or "<empty>", "install", "unsafe filename")
    return os.path.join(folder, filename)


class LocalContentStore:
    """Filesystem-backed inventory scanner, hasher and content store."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        chunk_size: int = HASH_CHUNK_SIZE,
    ) -> None:
        self._http_client = http_client
        self._owns_client = http_client is None
        self._chunk_size = chunk_size
        self._scan_cache: dict[str, dict[str, tuple[FileStamp, ContentItem]]] = {}

    async def aclose(self) -> None:
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    # =====================================
    # Scanning
    # =====================================

    @staticmethod
    def content_dir(profile: Profile, content_type: ContentType) -> str:
        return os.path.join(profile.content_root, CONTENT_DIRECTORIES[content_type.value])

    async def scan_inventory(
        self, profile: Profile, content_type: ContentType, force_refresh: bool = False
    ) -> list[ContentItem]:
        folder = self.content_dir(profile, content_type)
        if not os.path.isdir(folder):
            logger.info("[LocalContentStore] %s does not exist yet, nothing to scan", folder)
            return []

        try:
            scanned = await asyncio.to_thread(self._scan_folder, folder, content_type)
        except OSError as e:
            raise InventoryError(f"Cannot read {folder}: {e}") from e

        cached = {} if force_refresh else self._scan_cache.get(folder, {})
        entries: dict[str, tuple[FileStamp, ContentItem]] = {}
        reused = 0
        for stamp, item in scanned:
            previous = cached.get(item.filename)
            if previous is not None and previous[0] == stamp:
                item = previous[1]
                reused += 1
            entries[item.filename] = (stamp, item)
        self._scan_cache[folder] = entries

        logger.info(
            "[LocalContentStore] Scanned %d items in %s (%d unchanged)",
            len(entries),
            folder,
            reused,
        )
        return [item for _, item in entries.values()]

    def _scan_folder(
        self, folder: str, content_type: ContentType
    ) -> list[tuple[FileStamp, ContentItem]]:
        extensions = CONTENT_EXTENSIONS.get(content_type.value, set())
        allow_dirs = content_type not in (ContentType.MOD, ContentType.NORISK_MOD)
        scanned = []
        with os.scandir(folder) as entries:
            for entry in entries:
                if entry.name.endswith(PARTIAL_SUFFIX) or entry.name.startswith("."):
                    continue
                is_disabled = entry.name.endswith(DISABLED_SUFFIX)
                base_name = entry.name[: -len(DISABLED_SUFFIX)] if is_disabled else entry.name
                is_directory = entry.is_dir()
                if is_directory and not allow_dirs:
                    continue
                if not is_directory and os.path.splitext(base_name)[1].lower() not in extensions:
                    continue
                stat = entry.stat()
                item = ContentItem(
                    filename=entry.name,
                    path=entry.path,
                    content_type=content_type,
                    is_directory=is_directory,
                    file_size=0 if is_directory else stat.st_size,
                    is_disabled=is_disabled,
                    source_type="local",
                )
                scanned.append(((stat.st_mtime_ns, stat.st_size), item))
        scanned.sort(key=lambda pair: pair[1].display_name.lower())
        return scanned

    # =====================================
    # Hashing
    # =====================================

    async def compute_hash(self, item: ContentItem) -> str | None:
        """SHA-1 of the item's file; None for directories."""
        if item.is_directory:
            return None
        hash_obj = hashlib.new(HASH_ALGORITHM)
        try:
            async with aiofiles.open(item.path, "rb") as file:
                while True:
                    chunk = await file.read(self._chunk_size)
                    if not chunk:
                        break
                    hash_obj.update(chunk)
        except OSError as e:
            raise ContentOperationError(item.filename, "hash", str(e)) from e
        return hash_obj.hexdigest()

    # =====================================
    # Mutations
    # =====================================

    async def rename_toggle_disabled(self, item: ContentItem) -> str:
        new_filename = toggled_filename(item.filename)
        target = os.path.join(os.path.dirname(item.path), new_filename)
        if await aiofiles.os.path.exists(target):
            raise ContentOperationError(item.filename, "toggle", f"{new_filename} already exists")
        try:
            await aiofiles.os.rename(item.path, target)
        except OSError as e:
            raise ContentOperationError(item.filename, "toggle", str(e)) from e
        self._invalidate(target)
        logger.info("[LocalContentStore] Renamed %s -> %s", item.filename, new_filename)
        return new_filename

    async def delete_file(self, item: ContentItem) -> None:
        try:
            if item.is_directory:
                await asyncio.to_thread(shutil.rmtree, item.path)
            else:
                await aiofiles.os.remove(item.path)
        except OSError as e:
            raise ContentOperationError(item.filename, "delete", str(e)) from e
        self._invalidate(item.path)
        logger.info("[LocalContentStore] Deleted %s", item.filename)

    async def install_version(
        self, profile: Profile, content_type: ContentType, version: RemoteVersion
    ) -> str:
        """Download the version's primary file into the profile folder.

        The file is written to a ``.part`` file first and moved into place once
        complete; a sha1 published by the registry is verified before the move.
        """
        remote_file = version.primary_file
        if remote_file is None:
            raise ContentOperationError(version.name, "install", "version has no files")

        folder = self.content_dir(profile, content_type)
        target = _target_path(folder, remote_file.filename)
        partial = target + PARTIAL_SUFFIX
        hash_obj = hashlib.new(HASH_ALGORITHM)

        try:
            await aiofiles.os.makedirs(folder, exist_ok=True)
            client = self._client()
            async with client.stream("GET", remote_file.url) as response:
                response.raise_for_status()
                async with aiofiles.open(partial, "wb") as dst:
                    async for chunk in response.aiter_bytes(DOWNLOAD_CHUNK_SIZE):
                        hash_obj.update(chunk)
                        await dst.write(chunk)
        except (httpx.HTTPError, OSError) as e:
            await self._discard(partial)
            raise ContentOperationError(remote_file.filename, "install", str(e)) from e

        expected = remote_file.sha1
        if expected and expected.lower() != hash_obj.hexdigest():
            await self._discard(partial)
            raise ContentOperationError(remote_file.filename, "install", "sha1 mismatch")

        try:
            await aiofiles.os.replace(partial, target)
        except OSError as e:
            await self._discard(partial)
            raise ContentOperationError(remote_file.filename, "install", str(e)) from e

        self._invalidate(target)
        logger.info(
            "[LocalContentStore] Installed %s (%s)", remote_file.filename, version.version_number
        )
        return remote_file.filename

    async def install_file(
        self, profile: Profile, content_type: ContentType, file_path: str
    ) -> str:
        """Copy a local file into the profile folder in chunks."""
        filename = os.path.basename(file_path)
        folder = self.content_dir(profile, content_type)
        target = _target_path(folder, filename)
        try:
            await aiofiles.os.makedirs(folder, exist_ok=True)
            async with aiofiles.open(file_path, "rb") as src:
                async with aiofiles.open(target, "wb") as dst:
                    while True:
                        chunk = await src.read(self._chunk_size)
                        if not chunk:
                            break
                        await dst.write(chunk)
        except OSError as e:
            raise ContentOperationError(filename, "install", str(e)) from e
        self._invalidate(target)
        logger.info("[LocalContentStore] Copied %s into %s", filename, folder)
        return filename

    # =====================================
    # Helpers
    # =====================================

    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                headers={"User-Agent": USER_AGENT},
                timeout=httpx.Timeout(REGISTRY_TIMEOUT_SECONDS),
                follow_redirects=True,
            )
        return self._http_client

    def _invalidate(self, path: str) -> None:
        entries = self._scan_cache.get(os.path.dirname(path))
        if entries is not None:
            entries.pop(os.path.basename(path), None)

    @staticmethod
    async def _discard(path: str) -> None:
        if await aiofiles.os.path.exists(path):
            await aiofiles.os.remove(path)
