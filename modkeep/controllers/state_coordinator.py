"""Module: state_coordinator.py

Author: Michael Economou
Date: 2026-02-14

Qt bridge for the inventory controller.

The controller is pure Python and announces changes through Observable
signals. PyQt5 views connect to this QObject instead, so they get queued
pyqtSignal delivery and automatic disconnection on widget destruction.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from PyQt5.QtCore import QObject, pyqtSignal

from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.controllers.inventory_controller import (
        ContentInventoryController,
        Notification,
    )
    from modkeep.core.version_switch import VersionDropdown
    from modkeep.models.content_item import ContentItem

logger = get_cached_logger(__name__)


class StateCoordinator(QObject):
    """
    Re-emits ContentInventoryController state changes as pyqtSignals.

    Signals:
        items_changed: Item list changed (list[ContentItem])
        view_changed: Filtered view changed (list[ContentItem])
        selection_changed: Selection changed (frozenset of filenames)
        updates_changed: Update Index replaced (dict identifier -> RemoteVersion)
        busy_changed: A loading or busy flag changed
        dropdown_changed: Version dropdown changed (VersionDropdown)
        notification: User notification (Notification)
    """

    items_changed = pyqtSignal(list)
    view_changed = pyqtSignal(list)
    selection_changed = pyqtSignal(object)
    updates_changed = pyqtSignal(object)
    busy_changed = pyqtSignal()
    dropdown_changed = pyqtSignal(object)
    notification = pyqtSignal(object)

    def __init__(
        self, controller: ContentInventoryController, parent: QObject | None = None
    ) -> None:
        """
        Initialize StateCoordinator.

        Args:
            controller: The controller whose signals are forwarded
            parent: Optional Qt parent
        """
        super().__init__(parent)
        self._controller = controller
        self._connections = [
            (controller.items_changed, self.notify_items_changed),
            (controller.view_changed, self.notify_view_changed),
            (controller.selection_changed, self.notify_selection_changed),
            (controller.updates_changed, self.notify_updates_changed),
            (controller.busy_changed, self.notify_busy_changed),
            (controller.dropdown_changed, self.notify_dropdown_changed),
            (controller.notification, self.notify_notification),
        ]
        for signal, slot in self._connections:
            signal.connect(slot)
        logger.debug("[StateCoordinator] Bridging controller signals", extra={"dev_only": True})

    def notify_items_changed(self, items: list[ContentItem]) -> None:
        self.items_changed.emit(items)

    def notify_view_changed(self, items: list[ContentItem]) -> None:
        self.view_changed.emit(items)

    def notify_selection_changed(self, selected: frozenset[str]) -> None:
        self.selection_changed.emit(selected)

    def notify_updates_changed(self, updates: dict) -> None:
        self.updates_changed.emit(updates)

    def notify_busy_changed(self) -> None:
        self.busy_changed.emit()

    def notify_dropdown_changed(self, dropdown: VersionDropdown) -> None:
        self.dropdown_changed.emit(dropdown)

    def notify_notification(self, notification: Notification) -> None:
        self.notification.emit(notification)

    def detach(self) -> None:
        """Stop forwarding; call before dropping the coordinator."""
        for signal, slot in self._connections:
            signal.disconnect(slot)
        self._connections = []

    def get_controller(self) -> ContentInventoryController:
        """Get the bridged controller."""
        return self._controller
