"""
Module: mocks.py

Author: Michael Economou
Date: 2026-02-15

In-memory collaborators and builders for tests.

The fakes implement the service protocols without touching disk or network.
Each one records its calls and can be told to fail or to wait on an
asyncio.Event so tests can interleave concurrent operations.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

from modkeep.config import DISABLED_SUFFIX
from modkeep.core.errors import ContentOperationError, RegistryError
from modkeep.models.content_item import (
    ContentItem,
    CurseForgeInfo,
    ModrinthInfo,
    Platform,
)
from modkeep.models.remote_version import RemoteVersion, RemoteVersionFile


def make_item(filename: str = "sodium.jar", **kwargs) -> ContentItem:
    """ContentItem with path == filename and the disabled flag derived from the name."""
    kwargs.setdefault("path", filename)
    kwargs.setdefault("is_disabled", filename.endswith(DISABLED_SUFFIX))
    return ContentItem(filename=filename, **kwargs)


def modrinth_item(filename: str, project_id: str, version_id: str, **kwargs) -> ContentItem:
    return make_item(
        filename,
        modrinth_info=ModrinthInfo(project_id=project_id, version_id=version_id),
        **kwargs,
    )


def curseforge_item(filename: str, project_id: str, file_id: str, **kwargs) -> ContentItem:
    return make_item(
        filename,
        curseforge_info=CurseForgeInfo(project_id=project_id, file_id=file_id),
        **kwargs,
    )


def make_version(
    version_id: str,
    filename: str | None = None,
    *,
    project_id: str | None = "P1",
    version_number: str | None = None,
    platform: Platform = Platform.MODRINTH,
    files: tuple[RemoteVersionFile, ...] | None = None,
) -> RemoteVersion:
    if files is None:
        name = filename or f"{version_id}.jar"
        files = (RemoteVersionFile(filename=name, url=f"https://cdn.test/{name}", primary=True),)
    return RemoteVersion(
        id=version_id,
        name=version_number or version_id,
        version_number=version_number or version_id,
        files=files,
        project_id=project_id,
        platform=platform,
    )


class FakeRegistry:
    """RegistryClientProtocol backed by dictionaries."""

    def __init__(self) -> None:
        self.versions: dict[tuple[Platform, str], list[RemoteVersion]] = {}
        self.by_hash: dict[str, RemoteVersion] = {}
        self.errors: dict[tuple[Platform, str], RegistryError] = {}
        self.hash_error: RegistryError | None = None
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[tuple] = []

    def add_versions(
        self, project_id: str, *versions: RemoteVersion, platform: Platform = Platform.MODRINTH
    ) -> None:
        self.versions[(platform, project_id)] = list(versions)

    def fail(
        self, project_id: str, message: str = "boom", platform: Platform = Platform.MODRINTH
    ) -> None:
        self.errors[(platform, project_id)] = RegistryError(message, platform)

    async def list_versions(self, platform, project_id, loaders=None, game_versions=None):
        self.calls.append(("list_versions", platform, project_id, loaders, game_versions))
        gate = self.gates.get(project_id)
        if gate is not None:
            await gate.wait()
        error = self.errors.get((platform, project_id))
        if error is not None:
            raise error
        return list(self.versions.get((platform, project_id), []))

    async def latest_versions_by_hash(self, platform, hashes, loaders=None, game_versions=None):
        self.calls.append(
            ("latest_versions_by_hash", platform, list(hashes), loaders, game_versions)
        )
        if self.hash_error is not None:
            raise self.hash_error
        return {sha1: self.by_hash[sha1] for sha1 in hashes if sha1 in self.by_hash}

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]


class FakeContentStore:
    """Scanner + ContentStoreProtocol over a dict of filename -> ContentItem."""

    def __init__(self, items=()) -> None:
        self.files: dict[str, ContentItem] = {item.filename: item for item in items}
        self.fail_on: dict[str, str] = {}
        self.gate: asyncio.Event | None = None
        self.scan_gate: asyncio.Event | None = None
        self.scan_error: Exception | None = None
        self.calls: list[tuple] = []

    def add(self, *items: ContentItem) -> None:
        for item in items:
            self.files[item.filename] = item

    async def scan_inventory(self, profile, content_type, force_refresh=False):
        self.calls.append(("scan", force_refresh))
        if self.scan_error is not None:
            raise self.scan_error
        # Listing is taken before the gate, like a slow scan that already read the folder
        listing = [replace(item) for item in self.files.values()]
        if self.scan_gate is not None:
            await self.scan_gate.wait()
        return listing

    async def rename_toggle_disabled(self, item):
        self.calls.append(("toggle", item.filename))
        await self._wait()
        self._check("toggle", item.filename)
        if item.filename.endswith(DISABLED_SUFFIX):
            new_filename = item.filename[: -len(DISABLED_SUFFIX)]
        else:
            new_filename = item.filename + DISABLED_SUFFIX
        stored = self.files.pop(item.filename, item)
        self.files[new_filename] = replace(
            stored,
            filename=new_filename,
            path=new_filename,
            is_disabled=new_filename.endswith(DISABLED_SUFFIX),
        )
        return new_filename

    async def delete_file(self, item):
        self.calls.append(("delete", item.filename))
        await self._wait()
        self._check("delete", item.filename)
        self.files.pop(item.filename, None)

    async def install_version(self, profile, content_type, version):
        remote_file = version.primary_file
        self.calls.append(("install", remote_file.filename))
        await self._wait()
        self._check("install", remote_file.filename)
        self.files[remote_file.filename] = ContentItem(
            filename=remote_file.filename,
            path=remote_file.filename,
            content_type=content_type,
            modrinth_info=ModrinthInfo(
                project_id=version.project_id,
                version_id=version.id,
                version_number=version.version_number,
            ),
        )
        return remote_file.filename

    async def install_file(self, profile, content_type, file_path):
        self.calls.append(("install_file", file_path))
        filename = file_path.rsplit("/", 1)[-1]
        self._check("install", filename)
        self.files[filename] = make_item(filename, content_type=content_type)
        return filename

    def calls_named(self, name: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == name]

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    def _check(self, operation: str, filename: str) -> None:
        message = self.fail_on.get(filename)
        if message is not None:
            raise ContentOperationError(filename, operation, message)


class FakeHasher:
    """HashServiceProtocol returning a deterministic fake digest per filename."""

    def __init__(self, hashes: dict[str, str] | None = None) -> None:
        self.hashes = hashes
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    async def compute_hash(self, item):
        self.calls.append(item.filename)
        if item.filename in self.fail_on:
            raise ContentOperationError(item.filename, "hash", "unreadable")
        if self.hashes is not None:
            return self.hashes.get(item.filename)
        return f"sha1-{item.display_name}"


class FakeMetadataService:
    """MetadataServiceProtocol resolving hashes from a dict."""

    def __init__(self) -> None:
        self.by_hash: dict[str, ModrinthInfo | CurseForgeInfo] = {}
        self.fail_on: set[str] = set()
        self.calls: list[tuple] = []

    async def fetch_project_metadata(self, platform, item):
        self.calls.append((platform, item.filename))
        if item.sha1_hash in self.fail_on:
            raise RegistryError("lookup failed", platform)
        return self.by_hash.get(item.sha1_hash)


class RecordingOpener:
    def __init__(self) -> None:
        self.opened: list[str] = []

    def open_containing_folder(self, item):
        self.opened.append(item.filename)


class SignalRecorder:
    """Collects every emission of an Observable signal."""

    def __init__(self, signal) -> None:
        self.calls: list[tuple] = []
        signal.connect(self)

    def __call__(self, *args) -> None:
        self.calls.append(args)

    @property
    def count(self) -> int:
        return len(self.calls)

    @property
    def last(self):
        return self.calls[-1] if self.calls else None

    @property
    def values(self) -> list:
        return [args[0] if len(args) == 1 else args for args in self.calls]


async def settle(rounds: int = 5) -> None:
    """Let pending tasks run until they block on their next await."""
    for _ in range(rounds):
        await asyncio.sleep(0)
