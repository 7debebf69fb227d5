"""Module: version_switch.py

Author: Michael Economou
Date: 2026-02-12

Version-Switch Protocol.

Owns the single system-wide version dropdown and performs version switches.

Dropdown lifecycle (per item, keyed by filename):

    CLOSED -> OPENING -> LOADING -> LOADED | ERRORED
                      \\-> UNAVAILABLE (no platform/project id, not an error)
    any state -> CLOSED (version selected, close requested, other item opened)

Opening a second item's dropdown closes the first. Every fetch result is
checked against the dropdown's current key and open generation before it is
applied; results for a closed or replaced dropdown are dropped.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING

from modkeep.config import DISABLED_SUFFIX
from modkeep.core.errors import ModkeepError, RegistryError, VersionSwitchError
from modkeep.domain.identity import is_current_installed_version, resolve_platform_project
from modkeep.models.content_item import ContentItem
from modkeep.utils.events import Observable, Signal
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.content_item import Profile
    from modkeep.models.remote_version import RemoteVersion
    from modkeep.services.interfaces import ContentStoreProtocol, RegistryClientProtocol

logger = get_cached_logger(__name__)

MSG_UNAVAILABLE = "Version history not available for this item."
MSG_NO_VERSIONS = "No other compatible versions found."
MSG_FETCH_FAILED = "Failed to load versions."


class DropdownState(Enum):
    CLOSED = "closed"
    OPENING = "opening"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class VersionDropdown:
    """Snapshot of the version dropdown. Rows compare their filename with ``key``."""

    key: str | None = None
    state: DropdownState = DropdownState.CLOSED
    versions: tuple[RemoteVersion, ...] = ()
    current_ids: frozenset[str] = frozenset()
    message: str | None = None
    generation: int = 0

    @property
    def is_open(self) -> bool:
        return self.state is not DropdownState.CLOSED

    @property
    def is_loading(self) -> bool:
        return self.state in (DropdownState.OPENING, DropdownState.LOADING)

    def is_open_for(self, key: str) -> bool:
        return self.is_open and self.key == key

    def is_current(self, version: RemoteVersion) -> bool:
        """Whether ``version`` is the installed one (classified at load time)."""
        return version.id in self.current_ids


CLOSED_DROPDOWN = VersionDropdown()


class VersionSwitcher(Observable):
    """Version dropdown owner and switch executor."""

    dropdown_changed = Signal(object)  # VersionDropdown

    def __init__(self, registry: RegistryClientProtocol, store: ContentStoreProtocol) -> None:
        super().__init__()
        self._registry = registry
        self._store = store
        self._dropdown = CLOSED_DROPDOWN
        self._generation = 0

    @property
    def dropdown(self) -> VersionDropdown:
        return self._dropdown

    @property
    def open_key(self) -> str | None:
        return self._dropdown.key if self._dropdown.is_open else None

    # =====================================
    # Dropdown state machine
    # =====================================

    async def open(self, item: ContentItem, profile: Profile) -> VersionDropdown:
        """Open the dropdown for ``item`` and load its version list.

        Any other open dropdown is closed first.
        """
        self._generation += 1
        generation = self._generation
        key = item.filename
        self._set(VersionDropdown(key=key, state=DropdownState.OPENING, generation=generation))

        ref = resolve_platform_project(item)
        if ref is None:
            logger.debug("[VersionSwitcher] %s has no registry project", key)
            self._set(
                replace(self._dropdown, state=DropdownState.UNAVAILABLE, message=MSG_UNAVAILABLE)
            )
            return self._dropdown

        loaders = None
        if item.content_type.uses_loader_filter and profile.loader:
            loaders = [profile.loader]
        game_versions = [profile.game_version] if profile.game_version else None
        self._set(replace(self._dropdown, state=DropdownState.LOADING))

        try:
            versions = await self._registry.list_versions(
                ref.platform, ref.project_id, loaders, game_versions
            )
        except RegistryError as e:
            if not self._is_active(key, generation):
                logger.debug("[VersionSwitcher] Dropping stale fetch error for %s", key)
                return self._dropdown
            logger.error(
                "[VersionSwitcher] Failed to fetch %s versions for %s: %s",
                ref.platform.value,
                key,
                e,
            )
            self._set(
                replace(
                    self._dropdown,
                    state=DropdownState.ERRORED,
                    message=e.message or MSG_FETCH_FAILED,
                )
            )
            return self._dropdown
        except Exception:
            if not self._is_active(key, generation):
                logger.debug("[VersionSwitcher] Dropping stale fetch error for %s", key)
                return self._dropdown
            logger.exception("[VersionSwitcher] Unexpected error fetching versions for %s", key)
            self._set(
                replace(self._dropdown, state=DropdownState.ERRORED, message=MSG_FETCH_FAILED)
            )
            return self._dropdown

        if not self._is_active(key, generation):
            logger.debug(
                "[VersionSwitcher] Discarding %d versions for %s (dropdown moved on)",
                len(versions),
                key,
            )
            return self._dropdown

        current_ids = frozenset(v.id for v in versions if is_current_installed_version(v, item))
        self._set(
            replace(
                self._dropdown,
                state=DropdownState.LOADED,
                versions=tuple(versions),
                current_ids=current_ids,
                message=None if versions else MSG_NO_VERSIONS,
            )
        )
        return self._dropdown

    def close(self) -> None:
        """Close the dropdown; any fetch in flight becomes stale."""
        if not self._dropdown.is_open:
            return
        self._generation += 1
        self._set(CLOSED_DROPDOWN)

    async def toggle(self, item: ContentItem, profile: Profile) -> VersionDropdown:
        """Open for ``item``, or close if its dropdown is already open."""
        if self._dropdown.is_open_for(item.filename):
            self.close()
            return self._dropdown
        return await self.open(item, profile)

    def forget(self, key: str) -> None:
        """Close the dropdown if it belongs to an item that no longer exists."""
        if self._dropdown.is_open_for(key):
            self.close()

    def _is_active(self, key: str, generation: int) -> bool:
        return self._dropdown.is_open_for(key) and self._dropdown.generation == generation

    def _set(self, dropdown: VersionDropdown) -> None:
        self._dropdown = dropdown
        self.dropdown_changed.emit(dropdown)

    # =====================================
    # Switch execution
    # =====================================

    async def switch(self, item: ContentItem, version: RemoteVersion, profile: Profile) -> str:
        """Replace the installed file of ``item`` with ``version``.

        Installs the new primary file, removes the old file and re-applies the
        disabled marker when the old file was disabled. If the old file cannot
        be removed, the new file is removed again so only one copy stays installed.

        Returns:
            Filename of the installed replacement.

        Raises:
            VersionSwitchError: If the version has no downloadable file.
            ContentOperationError: If installing, deleting or renaming failed.
        """
        if self._dropdown.is_open_for(item.filename):
            self.close()

        if version.primary_file is None:
            raise VersionSwitchError(
                item.filename, f"version {version.version_number} has no files"
            )

        logger.info(
            "[VersionSwitcher] Switching %s to %s (%s)",
            item.filename,
            version.version_number,
            version.id,
        )
        new_filename = await self._store.install_version(profile, item.content_type, version)
        installed = ContentItem(
            filename=new_filename,
            path=os.path.join(os.path.dirname(item.path), new_filename),
            content_type=item.content_type,
            is_disabled=new_filename.endswith(DISABLED_SUFFIX),
        )

        if new_filename != item.filename:
            try:
                await self._store.delete_file(item)
            except Exception:
                await self._discard_installed(installed)
                raise
        else:
            logger.debug("[VersionSwitcher] %s was replaced in place", new_filename)

        # The old file is gone from here on; a failed rename leaves the new one enabled
        if item.is_disabled and not installed.is_disabled:
            new_filename = await self._store.rename_toggle_disabled(installed)

        logger.info("[VersionSwitcher] %s -> %s", item.filename, new_filename)
        return new_filename

    async def _discard_installed(self, installed: ContentItem) -> None:
        """Remove a freshly installed file after the old one could not be removed."""
        logger.warning(
            "[VersionSwitcher] Rolling back %s, the previous file is still installed",
            installed.filename,
        )
        try:
            await self._store.delete_file(installed)
        except ModkeepError as e:
            logger.error("[VersionSwitcher] Could not remove %s: %s", installed.filename, e)
