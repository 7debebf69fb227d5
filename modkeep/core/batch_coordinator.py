"""Module: batch_coordinator.py

Author: Michael Economou
Date: 2026-02-13

Batch Operation Coordinator.

Applies toggle/delete/update across items with per-item failure isolation
and tracks which items are busy so presentation layers can disable single
rows instead of the whole list.

Busy states are a small map filename -> ItemBusyState. A request for an
item that is not IDLE is rejected (returns None), never queued.
"""

from __future__ import annotations

import asyncio
import os
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from modkeep.core.errors import ContentOperationError, ModkeepError
from modkeep.utils.events import Observable, Signal
from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.content_item import ContentItem, ContentType, Profile
    from modkeep.models.remote_version import RemoteVersion
    from modkeep.services.interfaces import ContentStoreProtocol

logger = get_cached_logger(__name__)

SwitchCallable = Callable[["ContentItem", "RemoteVersion"], Awaitable[str]]

MSG_CENTRALLY_MANAGED = "centrally managed content cannot be deleted"


class ItemBusyState(Enum):
    IDLE = "idle"
    TOGGLING = "toggling"
    DELETING = "deleting"
    UPDATING = "updating"


@dataclass
class BatchResult:
    """Summary of a batch action."""

    operation: str
    succeeded: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    renamed: dict[str, str] = field(default_factory=dict)  # old filename -> new filename

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def has_failures(self) -> bool:
        return bool(self.failed)

    def summary(self) -> str:
        """One-line user message, e.g. 'toggle: 2 succeeded, 1 failed (b.jar)'."""
        text = f"{self.operation}: {self.succeeded_count} succeeded"
        if self.failed:
            text += f", {self.failed_count} failed ({', '.join(self.failed)})"
        if self.skipped:
            text += f", {len(self.skipped)} skipped"
        return text


class BatchOperationCoordinator(Observable):
    """Runs single and batch mutations over the content store."""

    busy_changed = Signal()

    def __init__(self, store: ContentStoreProtocol) -> None:
        super().__init__()
        self._store = store
        self._busy: dict[str, ItemBusyState] = {}
        self._batch_toggling = False
        self._batch_deleting = False
        self._updating_all = False
        self._installing = False

    # =====================================
    # Busy state
    # =====================================

    def state_of(self, filename: str) -> ItemBusyState:
        return self._busy.get(filename, ItemBusyState.IDLE)

    def is_item_busy(self, filename: str) -> bool:
        return self.state_of(filename) is not ItemBusyState.IDLE

    def _items_in(self, state: ItemBusyState) -> frozenset[str]:
        return frozenset(name for name, s in self._busy.items() if s is state)

    @property
    def items_being_toggled(self) -> frozenset[str]:
        return self._items_in(ItemBusyState.TOGGLING)

    @property
    def items_being_deleted(self) -> frozenset[str]:
        return self._items_in(ItemBusyState.DELETING)

    @property
    def items_being_updated(self) -> frozenset[str]:
        return self._items_in(ItemBusyState.UPDATING)

    @property
    def is_batch_toggling(self) -> bool:
        return self._batch_toggling

    @property
    def is_batch_deleting(self) -> bool:
        return self._batch_deleting

    @property
    def is_updating_all(self) -> bool:
        return self._updating_all

    @property
    def is_installing(self) -> bool:
        return self._installing

    @property
    def is_any_task_running(self) -> bool:
        """Union of item busy flags and batch flags."""
        return (
            bool(self._busy)
            or self._batch_toggling
            or self._batch_deleting
            or self._updating_all
            or self._installing
        )

    def _acquire(self, filename: str, state: ItemBusyState) -> bool:
        if self.is_item_busy(filename):
            logger.debug(
                "[BatchCoordinator] %s is %s, rejecting %s",
                filename,
                self.state_of(filename).value,
                state.value,
            )
            return False
        self._busy[filename] = state
        self.busy_changed.emit()
        return True

    def _release(self, filename: str) -> None:
        if self._busy.pop(filename, None) is not None:
            self.busy_changed.emit()

    # =====================================
    # Single-item operations
    # =====================================

    async def toggle_item(self, item: ContentItem) -> str | None:
        """Flip the disabled marker of one item.

        Returns:
            The new filename, or None if the item was busy.

        Raises:
            ContentOperationError: If the rename failed.
        """
        if not self._acquire(item.filename, ItemBusyState.TOGGLING):
            return None
        try:
            return await self._store.rename_toggle_disabled(item)
        finally:
            self._release(item.filename)

    async def delete_item(self, item: ContentItem) -> bool | None:
        """Delete one item.

        Returns:
            True on success, None if the item was busy.

        Raises:
            ContentOperationError: If the item is centrally managed or deletion failed.
        """
        if item.is_centrally_managed:
            raise ContentOperationError(item.filename, "delete", MSG_CENTRALLY_MANAGED)
        if not self._acquire(item.filename, ItemBusyState.DELETING):
            return None
        try:
            await self._store.delete_file(item)
            return True
        finally:
            self._release(item.filename)

    async def update_item(
        self, item: ContentItem, version: RemoteVersion, switch: SwitchCallable
    ) -> str | None:
        """Switch one item to ``version`` through ``switch``.

        Returns:
            The new filename, or None if the item was busy.
        """
        if not self._acquire(item.filename, ItemBusyState.UPDATING):
            return None
        try:
            return await switch(item, version)
        finally:
            self._release(item.filename)

    # =====================================
    # Batch operations
    # =====================================

    async def batch_toggle(self, items: Iterable[ContentItem]) -> BatchResult | None:
        """Toggle every item; failures are recorded per item.

        Returns:
            BatchResult, or None if a batch toggle is already running.
        """
        if self._batch_toggling:
            logger.debug("[BatchCoordinator] Batch toggle already running")
            return None
        self._set_flag("_batch_toggling", True)
        result = BatchResult("toggle")
        try:
            for item in items:
                if not self._acquire(item.filename, ItemBusyState.TOGGLING):
                    result.skipped.append(item.filename)
                    continue
                try:
                    new_filename = await self._store.rename_toggle_disabled(item)
                except Exception as e:
                    self._record_failure(result, item.filename, e)
                else:
                    result.succeeded.append(item.filename)
                    result.renamed[item.filename] = new_filename
                finally:
                    self._release(item.filename)
        finally:
            self._set_flag("_batch_toggling", False)

        self._log_result(result)
        return result

    async def batch_delete(self, items: Iterable[ContentItem]) -> BatchResult | None:
        """Delete every item except centrally managed ones.

        Returns:
            BatchResult, or None if a batch delete is already running.
        """
        if self._batch_deleting:
            logger.debug("[BatchCoordinator] Batch delete already running")
            return None
        self._set_flag("_batch_deleting", True)
        result = BatchResult("delete")
        try:
            for item in items:
                if item.is_centrally_managed:
                    result.skipped.append(item.filename)
                    continue
                if not self._acquire(item.filename, ItemBusyState.DELETING):
                    result.skipped.append(item.filename)
                    continue
                try:
                    await self._store.delete_file(item)
                except Exception as e:
                    self._record_failure(result, item.filename, e)
                else:
                    result.succeeded.append(item.filename)
                finally:
                    self._release(item.filename)
        finally:
            self._set_flag("_batch_deleting", False)

        self._log_result(result)
        return result

    async def update_all(
        self,
        entries: Iterable[tuple[ContentItem, RemoteVersion]],
        switch: SwitchCallable,
    ) -> BatchResult | None:
        """Run ``switch`` for every (item, version) pair concurrently.

        Returns:
            BatchResult, or None if an update-all is already running.
        """
        if self._updating_all:
            logger.debug("[BatchCoordinator] Update all already running")
            return None
        self._set_flag("_updating_all", True)
        result = BatchResult("update")

        async def run_one(item: ContentItem, version: RemoteVersion) -> None:
            if not self._acquire(item.filename, ItemBusyState.UPDATING):
                result.skipped.append(item.filename)
                return
            try:
                new_filename = await switch(item, version)
            except Exception as e:
                self._record_failure(result, item.filename, e)
            else:
                result.succeeded.append(item.filename)
                result.renamed[item.filename] = new_filename
            finally:
                self._release(item.filename)

        try:
            await asyncio.gather(*(run_one(item, version) for item, version in entries))
        finally:
            self._set_flag("_updating_all", False)

        self._log_result(result)
        return result

    async def install_files(
        self, profile: Profile, content_type: ContentType, file_paths: Iterable[str]
    ) -> BatchResult | None:
        """Copy local files into the profile folder one by one.

        ``succeeded`` and ``failed`` are keyed by source file name;
        ``renamed`` maps each source file name to the installed filename.

        Returns:
            BatchResult, or None if an install is already running.
        """
        if self._installing:
            logger.debug("[BatchCoordinator] Install already running")
            return None
        self._set_flag("_installing", True)
        result = BatchResult("install")
        try:
            for file_path in file_paths:
                name = os.path.basename(file_path) or file_path
                try:
                    filename = await self._store.install_file(profile, content_type, file_path)
                except Exception as e:
                    self._record_failure(result, name, e)
                else:
                    result.succeeded.append(name)
                    result.renamed[name] = filename
        finally:
            self._set_flag("_installing", False)

        self._log_result(result)
        return result

    # =====================================
    # Helpers
    # =====================================

    def _set_flag(self, name: str, value: bool) -> None:
        setattr(self, name, value)
        self.busy_changed.emit()

    @staticmethod
    def _record_failure(result: BatchResult, filename: str, error: Exception) -> None:
        if isinstance(error, ModkeepError):
            message = getattr(error, "message", None) or str(error)
            logger.warning(
                "[BatchCoordinator] %s failed for %s: %s",
                result.operation,
                filename,
                message,
            )
        else:
            message = str(error) or error.__class__.__name__
            logger.exception(
                "[BatchCoordinator] Unexpected error during %s of %s",
                result.operation,
                filename,
            )
        result.failed[filename] = message

    @staticmethod
    def _log_result(result: BatchResult) -> None:
        logger.info("[BatchCoordinator] %s", result.summary())
