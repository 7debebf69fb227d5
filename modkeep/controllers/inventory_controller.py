"""Module: inventory_controller.py

Author: Michael Economou
Date: 2026-02-14

Content Inventory Controller.

Single writer of the inventory state for one profile and content type:
the item list, the search-filtered view, the selection set, the Update Index
and the version dropdown. Presentation layers read the views and call the
action entry points; every state change is announced through signals.

Reads flow scan -> hash -> metadata -> update check -> views. Writes go
through the BatchOperationCoordinator (toggle/delete/update/install) or the
VersionSwitcher (switch) and end with a local state update or a refresh.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

from modkeep.config import DISABLED_SUFFIX
from modkeep.core.batch_coordinator import BatchOperationCoordinator, BatchResult
from modkeep.core.errors import ModkeepError
from modkeep.core.update_index import UpdateCheckResult, UpdateIndexBuilder
from modkeep.core.version_switch import VersionDropdown, VersionSwitcher
from modkeep.domain.identity import get_update_identifier, is_newer_than_installed
from modkeep.models.content_item import (
    ContentItem,
    ContentType,
    CurseForgeInfo,
    ModrinthInfo,
    Platform,
    Profile,
)
from modkeep.utils.events import Observable, Signal
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.remote_version import RemoteVersion
    from modkeep.services.interfaces import (
        ContentStoreProtocol,
        FolderOpenerProtocol,
        HashServiceProtocol,
        InventoryScannerProtocol,
        MetadataServiceProtocol,
        RegistryClientProtocol,
    )

logger = get_cached_logger(__name__)


@dataclass(frozen=True)
class Notification:
    """User-facing message produced by an action."""

    level: str  # "success" | "info" | "error"
    message: str
    filename: str | None = None


class ContentInventoryController(Observable):
    """Orchestrates the content inventory of one profile and content type.

    Signals:
        items_changed: Item list or an item's fields changed (list[ContentItem])
        view_changed: Filtered view changed (list[ContentItem])
        selection_changed: Selection set changed (frozenset[str])
        updates_changed: Update Index replaced (dict[str, RemoteVersion])
        busy_changed: Any loading/busy flag changed
        dropdown_changed: Version dropdown snapshot changed (VersionDropdown)
        notification: User notification (Notification)
    """

    items_changed = Signal(list)
    view_changed = Signal(list)
    selection_changed = Signal(frozenset)
    updates_changed = Signal(dict)
    busy_changed = Signal()
    dropdown_changed = Signal(object)
    notification = Signal(object)

    def __init__(
        self,
        profile: Profile,
        content_type: ContentType,
        *,
        scanner: InventoryScannerProtocol,
        registry: RegistryClientProtocol,
        store: ContentStoreProtocol,
        hasher: HashServiceProtocol | None = None,
        metadata: MetadataServiceProtocol | None = None,
        opener: FolderOpenerProtocol | None = None,
    ) -> None:
        super().__init__()
        self._profile = profile
        self._content_type = content_type
        self._scanner = scanner
        self._hasher = hasher
        self._metadata = metadata
        self._opener = opener

        self._coordinator = BatchOperationCoordinator(store)
        self._switcher = VersionSwitcher(registry, store)
        self._update_builder = UpdateIndexBuilder(registry)
        self._coordinator.busy_changed.connect(self.busy_changed.emit)
        self._switcher.dropdown_changed.connect(self.dropdown_changed.emit)

        self._items: list[ContentItem] = []
        self._search_query = ""
        self._selection: set[str] = set()
        self._updates: dict[str, RemoteVersion] = {}
        self._content_update_error: str | None = None

        self._is_loading = False
        self._pending_reload: tuple[bool, bool] | None = None  # (force, keep_selection)
        self._enrich_count = 0
        self._is_checking_updates = False
        self._scan_generation = 0

        logger.debug(
            "[InventoryController] Created for profile %s (%s)",
            profile.id,
            content_type.value,
            extra={"dev_only": True},
        )

    # =====================================
    # Views
    # =====================================

    @property
    def profile(self) -> Profile:
        return self._profile

    @property
    def content_type(self) -> ContentType:
        return self._content_type

    @property
    def items(self) -> list[ContentItem]:
        return list(self._items)

    @property
    def filtered_items(self) -> list[ContentItem]:
        """Items whose display name contains the search query (case-insensitive)."""
        query = self._search_query.strip().lower()
        if not query:
            return list(self._items)
        return [item for item in self._items if query in item.display_name.lower()]

    @property
    def search_query(self) -> str:
        return self._search_query

    def set_search_query(self, query: str) -> None:
        if query == self._search_query:
            return
        self._search_query = query
        self.view_changed.emit(self.filtered_items)

    def get_item(self, filename: str) -> ContentItem | None:
        for item in self._items:
            if item.filename == filename:
                return item
        return None

    # =====================================
    # Selection
    # =====================================

    @property
    def selected_filenames(self) -> frozenset[str]:
        return frozenset(self._selection)

    @property
    def selected_items(self) -> list[ContentItem]:
        return [item for item in self._items if item.filename in self._selection]

    def is_selected(self, filename: str) -> bool:
        return filename in self._selection

    def select(self, filename: str) -> None:
        if filename in self._selection or self.get_item(filename) is None:
            return
        self._selection.add(filename)
        self._emit_selection()

    def deselect(self, filename: str) -> None:
        if filename not in self._selection:
            return
        self._selection.discard(filename)
        self._emit_selection()

    def toggle_selection(self, filename: str) -> None:
        if filename in self._selection:
            self.deselect(filename)
        else:
            self.select(filename)

    def select_all_filtered(self) -> None:
        """Select every item of the filtered view (adds to the current selection)."""
        visible = {item.filename for item in self.filtered_items}
        if visible <= self._selection:
            return
        self._selection |= visible
        self._emit_selection()

    def clear_selection(self) -> None:
        if not self._selection:
            return
        self._selection.clear()
        self._emit_selection()

    def _emit_selection(self) -> None:
        self.selection_changed.emit(frozenset(self._selection))

    # =====================================
    # Busy state
    # =====================================

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def is_enriching(self) -> bool:
        return self._enrich_count > 0

    @property
    def is_checking_updates(self) -> bool:
        return self._is_checking_updates

    @property
    def is_any_task_running(self) -> bool:
        """True while any toggle, delete, batch action or update is in flight."""
        return self._coordinator.is_any_task_running

    @property
    def is_batch_toggling(self) -> bool:
        return self._coordinator.is_batch_toggling

    @property
    def is_batch_deleting(self) -> bool:
        return self._coordinator.is_batch_deleting

    @property
    def is_updating_all(self) -> bool:
        return self._coordinator.is_updating_all

    @property
    def is_installing(self) -> bool:
        return self._coordinator.is_installing

    @property
    def items_being_toggled(self) -> frozenset[str]:
        return self._coordinator.items_being_toggled

    @property
    def items_being_deleted(self) -> frozenset[str]:
        return self._coordinator.items_being_deleted

    @property
    def items_being_updated(self) -> frozenset[str]:
        return self._coordinator.items_being_updated

    def is_item_busy(self, filename: str) -> bool:
        return self._coordinator.is_item_busy(filename)

    # =====================================
    # Update Index
    # =====================================

    @property
    def updates(self) -> dict[str, RemoteVersion]:
        return dict(self._updates)

    @property
    def content_update_error(self) -> str | None:
        return self._content_update_error

    def update_for(self, item: ContentItem) -> RemoteVersion | None:
        """Pending update for ``item``, if the index holds a newer version for it."""
        if item.is_centrally_managed:
            return None
        identifier = get_update_identifier(item)
        if identifier is None:
            return None
        version = self._updates.get(identifier)
        if version is None or not is_newer_than_installed(item, version):
            return None
        return version

    def _set_updates(self, updates: dict[str, RemoteVersion]) -> None:
        live = {get_update_identifier(item) for item in self._items}
        self._updates = {key: version for key, version in updates.items() if key in live}
        self.updates_changed.emit(dict(self._updates))

    # =====================================
    # Version dropdown
    # =====================================

    @property
    def version_dropdown(self) -> VersionDropdown:
        return self._switcher.dropdown

    async def open_version_dropdown(self, item_key: str) -> VersionDropdown | None:
        """Open the version dropdown for an item; closes any other dropdown."""
        item = self.get_item(item_key)
        if item is None:
            logger.warning("[InventoryController] No item %s to open versions for", item_key)
            return None
        return await self._switcher.open(item, self._profile)

    async def toggle_version_dropdown(self, item_key: str) -> VersionDropdown | None:
        item = self.get_item(item_key)
        if item is None:
            return None
        return await self._switcher.toggle(item, self._profile)

    def close_version_dropdown(self) -> None:
        self._switcher.close()

    # =====================================
    # Inventory loading
    # =====================================

    async def refresh(self, force: bool = False) -> bool:
        """Rescan the inventory, then hash and enrich new items.

        Clears the selection. If a scan is already running, a rescan is queued
        behind it and False is returned. Returns False if the scan failed.
        """
        return await self._reload(force=force, keep_selection=False)

    async def _reload(self, *, force: bool, keep_selection: bool) -> bool:
        if self._is_loading:
            # The running reload scans again once its current scan returns
            if self._pending_reload is None:
                self._pending_reload = (force, keep_selection)
            else:
                pending_force, pending_keep = self._pending_reload
                self._pending_reload = (pending_force or force, pending_keep and keep_selection)
            logger.debug("[InventoryController] Refresh already running, rescan queued")
            return False

        self._set_loading(True)
        try:
            while True:
                try:
                    items = await self._scanner.scan_inventory(
                        self._profile, self._content_type, force_refresh=force
                    )
                except ModkeepError as e:
                    logger.error("[InventoryController] Scan failed: %s", e)
                    self._notify("error", f"Failed to load content: {e}")
                    return False
                if self._pending_reload is None:
                    break
                pending_force, pending_keep = self._pending_reload
                self._pending_reload = None
                force = force or pending_force
                keep_selection = keep_selection and pending_keep
                logger.debug("[InventoryController] Inventory changed during scan, rescanning")
        finally:
            self._pending_reload = None
            self._set_loading(False)

        self._scan_generation += 1
        generation = self._scan_generation
        self._set_items(items, keep_selection=keep_selection)
        await self._enrich(generation)

        # Identifiers are only final once hashes and metadata are in
        if generation == self._scan_generation and self._updates:
            self._set_updates(self._updates)
        return True

    def _set_loading(self, value: bool) -> None:
        self._is_loading = value
        self.busy_changed.emit()

    def _set_items(self, items: list[ContentItem], *, keep_selection: bool) -> None:
        self._items = list(items)
        present = {item.filename for item in self._items}

        selection = self._selection & present if keep_selection else set()
        if selection != self._selection:
            self._selection = selection
            self._emit_selection()

        open_key = self._switcher.open_key
        if open_key is not None and open_key not in present:
            self._switcher.forget(open_key)

        self._emit_items()

    def _emit_items(self) -> None:
        self.items_changed.emit(list(self._items))
        self.view_changed.emit(self.filtered_items)

    async def _enrich(self, generation: int) -> None:
        """Fill in missing hashes and registry metadata, one item at a time isolated."""
        if self._hasher is None and self._metadata is None:
            return

        self._enrich_count += 1
        self.busy_changed.emit()
        try:
            if self._hasher is not None:
                pending = [i for i in self._items if i.sha1_hash is None and not i.is_directory]
                hashes = await asyncio.gather(*(self._hash_one(i) for i in pending))
                if generation != self._scan_generation:
                    logger.debug("[InventoryController] Dropping hashes from an older scan")
                    return
                for item, sha1 in zip(pending, hashes):
                    if sha1 and self.get_item(item.filename) is item:
                        item.sha1_hash = sha1

            if self._metadata is not None:
                pending = [i for i in self._items if i.sha1_hash and not i.is_identified]
                infos = await asyncio.gather(*(self._metadata_for(i) for i in pending))
                if generation != self._scan_generation:
                    logger.debug("[InventoryController] Dropping metadata from an older scan")
                    return
                for item, info in zip(pending, infos):
                    if self.get_item(item.filename) is not item:
                        continue
                    if isinstance(info, ModrinthInfo):
                        item.modrinth_info = info
                    elif isinstance(info, CurseForgeInfo):
                        item.curseforge_info = info
        finally:
            self._enrich_count -= 1
            self.busy_changed.emit()

        self._emit_items()

    async def _hash_one(self, item: ContentItem) -> str | None:
        try:
            return await self._hasher.compute_hash(item)
        except (ModkeepError, OSError) as e:
            logger.warning("[InventoryController] Could not hash %s: %s", item.filename, e)
            return None

    async def _metadata_for(self, item: ContentItem) -> ModrinthInfo | CurseForgeInfo | None:
        platform = item.platform if item.platform is Platform.CURSEFORGE else Platform.MODRINTH
        try:
            return await self._metadata.fetch_project_metadata(platform, item)
        except ModkeepError as e:
            logger.warning(
                "[InventoryController] Metadata lookup failed for %s: %s", item.filename, e
            )
            return None

    # =====================================
    # Update checks
    # =====================================

    async def check_for_updates(self) -> UpdateCheckResult | None:
        """Rebuild the Update Index for the current inventory.

        Returns None if a check is already running.
        """
        if self._is_checking_updates:
            logger.debug("[InventoryController] Update check already running")
            return None

        self._is_checking_updates = True
        self.busy_changed.emit()
        try:
            result = await self._update_builder.build(list(self._items), self._profile)
        finally:
            self._is_checking_updates = False
            self.busy_changed.emit()

        self._content_update_error = result.error
        self._set_updates(result.updates)
        return result

    # =====================================
    # Single-item actions
    # =====================================

    async def toggle(self, item_key: str) -> str | None:
        """Enable or disable one item.

        Returns:
            The new filename, or None if the item is unknown or busy.

        Raises:
            ModkeepError: If the rename failed (a notification is emitted first).
        """
        item = self.get_item(item_key)
        if item is None:
            return None
        try:
            new_filename = await self._coordinator.toggle_item(item)
        except ModkeepError as e:
            self._notify("error", f"Failed to toggle {item.display_name}: {e}", item.filename)
            raise
        if new_filename is None:
            return None

        self._apply_rename(item, new_filename)
        self._emit_items()
        return new_filename

    async def delete(self, item_key: str) -> bool:
        """Delete one item.

        Raises:
            ModkeepError: If the item is centrally managed or deletion failed.
        """
        item = self.get_item(item_key)
        if item is None:
            return False
        try:
            deleted = await self._coordinator.delete_item(item)
        except ModkeepError as e:
            self._notify("error", f"Failed to delete {item.display_name}: {e}", item.filename)
            raise
        if not deleted:
            return False

        self._remove_items({item.filename})
        self._notify("success", f"Deleted {item.display_name}", item.filename)
        return True

    async def update_one(self, item_key: str, version: RemoteVersion | None = None) -> str | None:
        """Apply the pending update of one item (or ``version`` when given).

        Returns:
            The new filename, or None if there is nothing to update.
        """
        item = self.get_item(item_key)
        if item is None or item.is_centrally_managed:
            return None
        version = version or self.update_for(item)
        if version is None:
            return None
        return await self._switch_and_reload(item, version, verb="Updated")

    async def switch_version(self, item_key: str, version: RemoteVersion) -> str | None:
        """Switch one item to an arbitrary version chosen from its dropdown."""
        item = self.get_item(item_key)
        if item is None:
            return None
        return await self._switch_and_reload(item, version, verb="Switched")

    async def _switch_and_reload(
        self, item: ContentItem, version: RemoteVersion, *, verb: str
    ) -> str | None:
        identifier = get_update_identifier(item)
        try:
            new_filename = await self._coordinator.update_item(item, version, self._switch)
        except ModkeepError as e:
            self._notify("error", f"Failed to update {item.display_name}: {e}", item.filename)
            await self._reload(force=True, keep_selection=True)
            raise
        if new_filename is None:
            return None

        self._applied(identifier, version)
        self._remap_selection({item.filename: new_filename})
        self._notify(
            "success",
            f"{verb} {item.display_name} to {version.version_number or version.name}",
            new_filename,
        )
        await self._reload(force=True, keep_selection=True)
        return new_filename

    async def _switch(self, item: ContentItem, version: RemoteVersion) -> str:
        return await self._switcher.switch(item, version, self._profile)

    def _applied(self, identifier: str | None, version: RemoteVersion) -> None:
        if identifier is None:
            return
        entry = self._updates.get(identifier)
        if entry is not None and entry.id == version.id:
            updates = dict(self._updates)
            del updates[identifier]
            self._set_updates(updates)

    def open_containing_folder(self, item_key: str) -> None:
        item = self.get_item(item_key)
        if item is None:
            return
        if self._opener is None:
            logger.warning("[InventoryController] No folder opener configured")
            return
        self._opener.open_containing_folder(item)

    # =====================================
    # Batch actions
    # =====================================

    async def batch_toggle(self) -> BatchResult | None:
        """Toggle every selected item."""
        targets = self.selected_items
        if not targets:
            return None
        result = await self._coordinator.batch_toggle(targets)
        if result is None:
            return None

        for item in targets:
            if item.filename in result.renamed:
                self._apply_rename(item, result.renamed[item.filename])
        if result.succeeded:
            self.clear_selection()
        self._emit_items()
        self._notify_batch(result, "Toggled")
        return result

    async def batch_delete(self) -> BatchResult | None:
        """Delete every selected item that is not centrally managed."""
        targets = self.selected_items
        if not targets:
            return None
        result = await self._coordinator.batch_delete(targets)
        if result is None:
            return None

        self._remove_items(set(result.succeeded))
        if result.succeeded:
            self.clear_selection()
        self._notify_batch(result, "Deleted")
        return result

    async def update_all(self) -> BatchResult | None:
        """Apply every pending update, then rebuild the Update Index."""
        entries = []
        for item in self._items:
            version = self.update_for(item)
            if version is not None:
                entries.append((item, version))
        if not entries:
            return None

        result = await self._coordinator.update_all(entries, self._switch)
        if result is None:
            return None

        for filename, message in result.failed.items():
            item = next((i for i, _ in entries if i.filename == filename), None)
            name = item.display_name if item is not None else filename
            self._notify("error", f"Failed to update {name}: {message}", filename)
        self._remap_selection(result.renamed)
        self._notify_batch(result, "Updated")

        await self._reload(force=True, keep_selection=True)
        await self.check_for_updates()
        return result

    async def install_files(self, file_paths: list[str]) -> BatchResult | None:
        """Copy local files into this content folder, then refresh.

        Returns:
            BatchResult, or None if nothing was given or an install is running.
        """
        if not file_paths:
            return None
        result = await self._coordinator.install_files(
            self._profile, self._content_type, file_paths
        )
        if result is None:
            return None

        self._notify_batch(result, "Installed")
        if result.succeeded:
            await self._reload(force=True, keep_selection=True)
        return result

    # =====================================
    # Helpers
    # =====================================

    def _apply_rename(self, item: ContentItem, new_filename: str) -> None:
        """Replace ``item`` with a copy carrying its toggled filename."""
        old_filename = item.filename
        if new_filename == old_filename:
            return
        path = item.path
        if path.endswith(old_filename):
            path = path[: -len(old_filename)] + new_filename
        renamed = replace(
            item,
            filename=new_filename,
            path=path,
            is_disabled=new_filename.endswith(DISABLED_SUFFIX),
        )
        self._items = [renamed if i is item else i for i in self._items]
        self._switcher.forget(old_filename)
        self._remap_selection({old_filename: new_filename})

    def _remap_selection(self, renamed: dict[str, str]) -> None:
        moved = {old: new for old, new in renamed.items() if old in self._selection}
        if not moved:
            return
        self._selection = (self._selection - set(moved)) | set(moved.values())
        self._emit_selection()

    def _remove_items(self, filenames: set[str]) -> None:
        if not filenames:
            return
        self._items = [item for item in self._items if item.filename not in filenames]
        if self._selection & filenames:
            self._selection -= filenames
            self._emit_selection()
        for filename in filenames:
            self._switcher.forget(filename)
        self._set_updates(self._updates)
        self._emit_items()

    def _notify(self, level: str, message: str, filename: str | None = None) -> None:
        if level == "error":
            logger.warning("[InventoryController] %s", message)
        else:
            logger.info("[InventoryController] %s", message)
        self.notification.emit(Notification(level, message, filename))

    def _notify_batch(self, result: BatchResult, verb: str) -> None:
        if result.has_failures:
            self._notify(
                "error",
                f"{verb} {result.succeeded_count} item(s), {result.failed_count} failed: "
                f"{', '.join(result.failed)}",
            )
        elif result.succeeded:
            self._notify("success", f"{verb} {result.succeeded_count} item(s)")
