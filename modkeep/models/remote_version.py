"""Module: remote_version.py

Author: Michael Economou
Date: 2026-02-10

Normalized version record shared by both registries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from modkeep.models.content_item import Platform


@dataclass(frozen=True)
class RemoteVersionFile:
    """One downloadable file of a remote version."""

    filename: str
    url: str
    primary: bool = False
    size: int = 0
    hashes: dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    fingerprint: int | None = None

    @property
    def sha1(self) -> str | None:
        return self.hashes.get("sha1")


@dataclass(frozen=True)
class RemoteVersion:
    """A version record from either registry."""

    id: str
    name: str
    version_number: str
    files: tuple[RemoteVersionFile, ...] = ()
    project_id: str | None = None
    platform: Platform | None = None
    game_versions: tuple[str, ...] = ()
    loaders: tuple[str, ...] = ()
    date_published: str | None = None

    @property
    def primary_file(self) -> RemoteVersionFile | None:
        """The file flagged primary, else the first file."""
        for version_file in self.files:
            if version_file.primary:
                return version_file
        return self.files[0] if self.files else None

    @classmethod
    def from_dict(cls, data: dict[str, Any], platform: Platform | None = None) -> RemoteVersion:
        """Build from the unified version mapping (``UnifiedVersion`` shape)."""
        files = tuple(
            RemoteVersionFile(
                filename=f.get("filename", ""),
                url=f.get("url", ""),
                primary=bool(f.get("primary", False)),
                size=int(f.get("size") or 0),
                hashes=dict(f.get("hashes") or {}),
                fingerprint=f.get("fingerprint"),
            )
            for f in data.get("files") or ()
        )
        return cls(
            id=str(data["id"]),
            name=data.get("name") or data.get("version_number") or str(data["id"]),
            version_number=data.get("version_number") or "",
            files=files,
            project_id=data.get("project_id"),
            platform=Platform.from_value(data.get("source")) or platform,
            game_versions=tuple(data.get("game_versions") or ()),
            loaders=tuple(data.get("loaders") or ()),
            date_published=data.get("date_published"),
        )
