"""Module: content_item.py

Author: Michael Economou
Date: 2026-02-10

This module defines ContentItem, which represents one locally installed
add-on file (mod, resource pack, shader pack, data pack) together with
whatever registry metadata has been attached to it, and the small value
types around it.

The sha1 hash and the platform info blocks are filled in after the item is
created; an item without them is still usable (it just cannot be matched
against a registry yet).

Classes:
    Platform: Originating registry of an item.
    ContentType: Kind of content stored in a profile.
    ModrinthInfo / CurseForgeInfo: Registry metadata blocks.
    Profile: Game profile the inventory belongs to.
    ContentItem: One on-disk unit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from modkeep.config import DISABLED_SUFFIX


class Platform(Enum):
    """Originating registry of a content item."""

    MODRINTH = "Modrinth"
    CURSEFORGE = "CurseForge"
    LOCAL = "Local"

    @classmethod
    def from_value(cls, value: Platform | str | None) -> Platform | None:
        """Parse a platform tag as sent by collaborators ("Modrinth", "curseforge", ...)."""
        if value is None or isinstance(value, Platform):
            return value
        lowered = str(value).strip().lower()
        for platform in cls:
            if platform.value.lower() == lowered:
                return platform
        return None


class ContentType(Enum):
    """Kind of content stored in a profile."""

    MOD = "Mod"
    RESOURCE_PACK = "ResourcePack"
    SHADER_PACK = "ShaderPack"
    DATA_PACK = "DataPack"
    NORISK_MOD = "NoRiskMod"

    @property
    def uses_loader_filter(self) -> bool:
        """Only mods are bound to a mod loader; packs are loader independent."""
        return self is ContentType.MOD


@dataclass
class ModrinthInfo:
    """Modrinth metadata attached to an item.

    ``version_id`` is set for the compact info block the backend stores;
    ``id`` is set when a full Modrinth version object was attached instead.
    """

    project_id: str | None = None
    version_id: str | None = None
    id: str | None = None
    version_number: str | None = None
    name: str | None = None
    icon_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ModrinthInfo:
        return cls(
            project_id=_str_or_none(data.get("project_id")),
            version_id=_str_or_none(data.get("version_id")),
            id=_str_or_none(data.get("id")),
            version_number=_str_or_none(data.get("version_number")),
            name=data.get("name") or data.get("title"),
            icon_url=data.get("icon_url"),
        )


@dataclass
class CurseForgeInfo:
    """CurseForge metadata attached to an item."""

    project_id: str | None = None
    file_id: str | None = None
    fingerprint: int | None = None
    version_number: str | None = None
    name: str | None = None
    icon_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CurseForgeInfo:
        fingerprint = data.get("fingerprint")
        return cls(
            project_id=_str_or_none(data.get("project_id")),
            file_id=_str_or_none(data.get("file_id")),
            fingerprint=int(fingerprint) if fingerprint is not None else None,
            version_number=_str_or_none(data.get("version_number")),
            name=data.get("name"),
            icon_url=data.get("icon_url"),
        )


# Tagged union of the two metadata shapes; None means "no registry identity"
PlatformInfo = Union[ModrinthInfo, CurseForgeInfo, None]


@dataclass(frozen=True)
class Profile:
    """Game profile whose content is managed."""

    id: str
    name: str
    loader: str
    game_version: str
    content_root: str = ""


@dataclass
class ContentItem:
    """Represents one installed content file in a profile.

    ``filename`` is the unique key within a profile and content type; it
    includes the disabled marker when the file is disabled.
    """

    filename: str
    path: str
    content_type: ContentType = ContentType.MOD
    is_directory: bool = False
    file_size: int = 0
    is_disabled: bool = False
    sha1_hash: str | None = None
    modrinth_info: ModrinthInfo | None = None
    curseforge_info: CurseForgeInfo | None = None
    platform: Platform | None = None
    source_type: str | None = None
    norisk_info: dict[str, Any] | None = None
    fallback_version: str | None = None
    id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    def __str__(self) -> str:
        return f"ContentItem({self.filename})"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ContentItem:
        """Build an item from the mapping shape returned by the profile backend."""
        filename = data["filename"]
        modrinth = data.get("modrinth_info")
        curseforge = data.get("curseforge_info")
        content_type = data.get("content_type") or ContentType.MOD.value
        return cls(
            filename=filename,
            path=data.get("path") or filename,
            content_type=ContentType(content_type),
            is_directory=bool(data.get("is_directory", False)),
            file_size=int(data.get("file_size") or 0),
            is_disabled=bool(data.get("is_disabled", filename.endswith(DISABLED_SUFFIX))),
            sha1_hash=data.get("sha1_hash"),
            modrinth_info=ModrinthInfo.from_dict(modrinth) if modrinth else None,
            curseforge_info=CurseForgeInfo.from_dict(curseforge) if curseforge else None,
            platform=Platform.from_value(data.get("platform")),
            source_type=data.get("source_type"),
            norisk_info=data.get("norisk_info"),
            fallback_version=data.get("fallback_version"),
            id=_str_or_none(data.get("id")),
        )

    @property
    def platform_info(self) -> PlatformInfo:
        """The metadata block that carries the item's identity.

        Modrinth wins when both blocks are populated.
        """
        if self.modrinth_info is not None:
            return self.modrinth_info
        if self.curseforge_info is not None:
            return self.curseforge_info
        return None

    @property
    def resolved_platform(self) -> Platform:
        """Explicit platform tag, else the platform of the populated info block."""
        if self.platform is not None:
            return self.platform
        info = self.platform_info
        if isinstance(info, ModrinthInfo):
            return Platform.MODRINTH
        if isinstance(info, CurseForgeInfo):
            return Platform.CURSEFORGE
        return Platform.LOCAL

    @property
    def platform_display_name(self) -> str:
        return self.resolved_platform.value

    @property
    def display_name(self) -> str:
        """Filename without the disabled marker."""
        if self.filename.endswith(DISABLED_SUFFIX):
            return self.filename[: -len(DISABLED_SUFFIX)]
        return self.filename

    @property
    def display_version(self) -> str | None:
        if self.fallback_version:
            return self.fallback_version
        if self.modrinth_info is not None and self.modrinth_info.version_number:
            return self.modrinth_info.version_number
        if self.curseforge_info is not None and self.curseforge_info.version_number:
            return self.curseforge_info.version_number
        return None

    @property
    def is_centrally_managed(self) -> bool:
        """Centrally managed content is never updated or deleted by the user."""
        return self.norisk_info is not None

    @property
    def is_identified(self) -> bool:
        return self.platform_info is not None


def _str_or_none(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)
