"""Module: folder_opener.py

Author: Michael Economou
Date: 2026-02-13

Reveal content items in the system file manager through QDesktopServices.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

from PyQt5.QtCore import QUrl
from PyQt5.QtGui import QDesktopServices

from modkeep.utils.logging.logger_factory import get_cached_logger

if TYPE_CHECKING:
    from modkeep.models.content_item import ContentItem

logger = get_cached_logger(__name__)


class QtFolderOpener:
    """FolderOpenerProtocol implementation for PyQt5 front ends."""

    def open_containing_folder(self, item: ContentItem) -> None:
        folder = os.path.dirname(os.path.abspath(item.path))
        if not os.path.isdir(folder):
            logger.warning("[FolderOpener] Folder does not exist: %s", folder)
            return
        if not QDesktopServices.openUrl(QUrl.fromLocalFile(folder)):
            logger.warning("[FolderOpener] System refused to open %s", folder)
        else:
            logger.debug("[FolderOpener] Opened %s", folder, extra={"dev_only": True})
