"""Module: update_index.py

Author: Michael Economou
Date: 2026-02-12

Update Index Builder.

Asks the registries, in one batched pass, for the latest version of every
installed item that is compatible with the profile's loader and game version,
and keeps only the entries whose version id differs from the installed one.

Features:
- Items sharing an identifier are looked up once
- Project lookups run concurrently, bounded by a semaphore
- Hash-only items go through a single bulk request per platform
- A failed lookup only drops that item's entry; platform-wide failures are
  reported once through UpdateCheckResult.error
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from modkeep.config import REGISTRY_MAX_CONCURRENT_REQUESTS
from modkeep.core.errors import RegistryError
from modkeep.domain.identity import (
    ProjectRef,
    get_update_identifier,
    is_newer_than_installed,
    parse_update_identifier,
    project_ref_from_identifier,
)
from modkeep.models.content_item import ContentItem, ContentType, Platform, Profile
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.remote_version import RemoteVersion
    from modkeep.services.interfaces import RegistryClientProtocol

logger = get_cached_logger(__name__)


@dataclass
class UpdateCheckResult:
    """Outcome of one update check cycle."""

    updates: dict[str, RemoteVersion] = field(default_factory=dict)
    error: str | None = None
    checked: int = 0
    failed: list[str] = field(default_factory=list)

    @property
    def update_count(self) -> int:
        return len(self.updates)


class UpdateIndexBuilder:
    """Builds the identifier -> RemoteVersion map for an inventory."""

    def __init__(
        self,
        registry: RegistryClientProtocol,
        max_concurrent: int = REGISTRY_MAX_CONCURRENT_REQUESTS,
    ) -> None:
        self._registry = registry
        self._max_concurrent = max(1, max_concurrent)

    async def build(self, items: Iterable[ContentItem], profile: Profile) -> UpdateCheckResult:
        """Check ``items`` for updates against the registries.

        Args:
            items: Current inventory.
            profile: Supplies the loader and game version filters.

        Returns:
            A fresh UpdateCheckResult; callers replace their index with it.
        """
        if not profile.loader or not profile.game_version:
            logger.warning(
                "[UpdateIndexBuilder] Profile %s has no loader/game version, skipping check",
                profile.id,
            )
            return UpdateCheckResult(
                error="Profile has no loader or game version; cannot check for updates."
            )

        groups = self._group_by_identifier(items)
        if not groups:
            return UpdateCheckResult()

        project_groups: dict[str, ProjectRef] = {}
        hash_groups: dict[Platform, dict[str, str]] = defaultdict(dict)
        for identifier, group in groups.items():
            ref = project_ref_from_identifier(identifier)
            if ref is not None:
                project_groups[identifier] = ref
            else:
                _, sha1 = parse_update_identifier(identifier)
                hash_platform = (
                    Platform.CURSEFORGE
                    if group[0].platform is Platform.CURSEFORGE
                    else Platform.MODRINTH
                )
                hash_groups[hash_platform][identifier] = sha1

        content_type = next(iter(groups.values()))[0].content_type
        loaders = [profile.loader] if content_type.uses_loader_filter else None
        game_versions = [profile.game_version]

        candidates: dict[str, RemoteVersion] = {}
        failed: list[str] = []
        platform_errors: list[str] = []

        project_results = await self._check_projects(project_groups, loaders, game_versions)
        attempts: dict[Platform, int] = defaultdict(int)
        failures: dict[Platform, list[RegistryError]] = defaultdict(list)
        for identifier, (ref, outcome) in project_results.items():
            attempts[ref.platform] += 1
            if isinstance(outcome, RegistryError):
                failed.append(identifier)
                failures[ref.platform].append(outcome)
            elif outcome is not None:
                candidates[identifier] = outcome

        for platform, errors in failures.items():
            if len(errors) == attempts[platform]:
                platform_errors.append(f"{platform.value}: {errors[0].message}")

        for platform, by_identifier in hash_groups.items():
            try:
                found = await self._registry.latest_versions_by_hash(
                    platform, list(by_identifier.values()), loaders, game_versions
                )
            except RegistryError as e:
                logger.error(
                    "[UpdateIndexBuilder] Bulk hash lookup on %s failed: %s", platform.value, e
                )
                failed.extend(by_identifier)
                platform_errors.append(f"{platform.value}: {e.message}")
                continue
            for identifier, sha1 in by_identifier.items():
                if sha1 in found:
                    candidates[identifier] = found[sha1]

        updates = {
            identifier: version
            for identifier, version in candidates.items()
            if any(is_newer_than_installed(item, version) for item in groups[identifier])
        }

        logger.info(
            "[UpdateIndexBuilder] Checked %d identifiers: %d updates, %d failed",
            len(groups),
            len(updates),
            len(failed),
        )
        return UpdateCheckResult(
            updates=updates,
            error="; ".join(platform_errors) or None,
            checked=len(groups),
            failed=failed,
        )

    @staticmethod
    def _group_by_identifier(items: Iterable[ContentItem]) -> dict[str, list[ContentItem]]:
        groups: dict[str, list[ContentItem]] = {}
        for item in items:
            if item.is_centrally_managed or item.content_type is ContentType.NORISK_MOD:
                continue
            identifier = get_update_identifier(item)
            if identifier is None:
                continue
            groups.setdefault(identifier, []).append(item)
        return groups

    async def _check_projects(
        self,
        project_groups: dict[str, ProjectRef],
        loaders: list[str] | None,
        game_versions: list[str],
    ) -> dict[str, tuple[ProjectRef, RemoteVersion | RegistryError | None]]:
        semaphore = asyncio.Semaphore(self._max_concurrent)

        async def latest_for(ref: ProjectRef) -> RemoteVersion | RegistryError | None:
            async with semaphore:
                try:
                    versions = await self._registry.list_versions(
                        ref.platform, ref.project_id, loaders, game_versions
                    )
                except RegistryError as e:
                    logger.warning(
                        "[UpdateIndexBuilder] Version lookup failed for %s:%s: %s",
                        ref.platform.value,
                        ref.project_id,
                        e,
                    )
                    return e
            return versions[0] if versions else None

        identifiers = list(project_groups)
        outcomes = await asyncio.gather(*(latest_for(project_groups[i]) for i in identifiers))
        return {
            identifier: (project_groups[identifier], outcome)
            for identifier, outcome in zip(identifiers, outcomes)
        }
