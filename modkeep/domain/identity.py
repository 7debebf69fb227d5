"""Module: identity.py

Author: Michael Economou
Date: 2026-02-11

Identity resolution for installed content.

An item's *update identifier* is the join key between the inventory and the
Update Index. It is recomputed on demand and never persisted:

    1. "modrinth:<project_id>"   when Modrinth metadata carries a project id
    2. "curseforge:<project_id>" when CurseForge metadata carries a project id
    3. "hash:<sha1>"             when only the content hash is known
    4. None                      otherwise (item is excluded from update checks)

All functions here are pure and never raise for incomplete items.
"""

from __future__ import annotations

from typing import NamedTuple

from modkeep.models.content_item import (
    ContentItem,
    CurseForgeInfo,
    ModrinthInfo,
    Platform,
)
from modkeep.models.remote_version import RemoteVersion
from modkeep.utils.logging.logger_factory import get_cached_logger

logger = get_cached_logger(__name__)

MODRINTH_PREFIX = "modrinth"
CURSEFORGE_PREFIX = "curseforge"
HASH_PREFIX = "hash"

_PREFIX_PLATFORMS = {
    MODRINTH_PREFIX: Platform.MODRINTH,
    CURSEFORGE_PREFIX: Platform.CURSEFORGE,
}


class ProjectRef(NamedTuple):
    """Registry project an item belongs to."""

    platform: Platform
    project_id: str


def get_update_identifier(item: ContentItem) -> str | None:
    """Return the update identifier for ``item``, or None when unresolvable."""
    if item.modrinth_info is not None and item.modrinth_info.project_id:
        return f"{MODRINTH_PREFIX}:{item.modrinth_info.project_id}"
    if item.curseforge_info is not None and item.curseforge_info.project_id:
        return f"{CURSEFORGE_PREFIX}:{item.curseforge_info.project_id}"
    if item.sha1_hash:
        return f"{HASH_PREFIX}:{item.sha1_hash}"
    return None


def parse_update_identifier(identifier: str) -> tuple[str, str]:
    """Split an identifier into its kind and value.

    Raises:
        ValueError: If the identifier has no known prefix.
    """
    kind, sep, value = identifier.partition(":")
    if not sep or not value or kind not in (MODRINTH_PREFIX, CURSEFORGE_PREFIX, HASH_PREFIX):
        raise ValueError(f"Not an update identifier: {identifier!r}")
    return kind, value


def project_ref_from_identifier(identifier: str) -> ProjectRef | None:
    """ProjectRef for a project identifier, None for hash identifiers."""
    kind, value = parse_update_identifier(identifier)
    platform = _PREFIX_PLATFORMS.get(kind)
    if platform is None:
        return None
    return ProjectRef(platform, value)


def resolve_platform_project(item: ContentItem) -> ProjectRef | None:
    """Resolve the platform and project id used to list an item's versions.

    An explicit ``item.platform`` selects the matching metadata block. Without
    one, the populated block decides, Modrinth first.
    """
    if item.platform is Platform.MODRINTH:
        info = item.modrinth_info
        if info is None or not info.project_id:
            return None
        return ProjectRef(Platform.MODRINTH, info.project_id)
    if item.platform is Platform.CURSEFORGE:
        info = item.curseforge_info
        if info is None or not info.project_id:
            return None
        return ProjectRef(Platform.CURSEFORGE, info.project_id)

    if item.modrinth_info is not None and item.modrinth_info.project_id:
        return ProjectRef(Platform.MODRINTH, item.modrinth_info.project_id)
    if item.curseforge_info is not None and item.curseforge_info.project_id:
        return ProjectRef(Platform.CURSEFORGE, item.curseforge_info.project_id)
    return None


def installed_version_id(item: ContentItem) -> str | None:
    """Id of the installed version: Modrinth version id, CurseForge file id, item id."""
    if item.modrinth_info is not None and item.modrinth_info.version_id:
        return item.modrinth_info.version_id
    if item.curseforge_info is not None and item.curseforge_info.file_id:
        return item.curseforge_info.file_id
    return item.id


def is_newer_than_installed(item: ContentItem, candidate: RemoteVersion) -> bool:
    """Whether ``candidate`` differs from the installed version.

    Only ids are compared. A registry re-publishing identical content under a
    new id therefore shows up as an update.
    """
    return candidate.id != installed_version_id(item)


def is_current_installed_version(version: RemoteVersion, item: ContentItem) -> bool:
    """Whether ``version`` is the one installed for ``item``.

    Precedence: Modrinth ``version_id``, then Modrinth ``id``, then CurseForge
    ``file_id``. A miss on one block falls through to the next.
    """
    modrinth = item.modrinth_info
    if isinstance(modrinth, ModrinthInfo):
        if modrinth.version_id is not None and modrinth.version_id == version.id:
            return True
        if modrinth.id is not None and modrinth.id == version.id:
            return True

    curseforge = item.curseforge_info
    if isinstance(curseforge, CurseForgeInfo):
        if curseforge.file_id is not None and curseforge.file_id == version.id:
            return True

    logger.debug(
        "[Identity] %s: %s (%s) is not the installed version (%s)",
        item.filename,
        version.version_number,
        version.id,
        installed_version_id(item),
        extra={"dev_only": True},
    )
    return False
