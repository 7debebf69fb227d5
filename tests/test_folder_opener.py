"""
Tests for QtFolderOpener.

Author: Michael Economou
Date: 2026-02-16
"""

from unittest.mock import patch

import pytest

from modkeep.services.folder_opener import QtFolderOpener
from modkeep.services.interfaces import FolderOpenerProtocol
from tests.mocks import make_item


@pytest.mark.gui
class TestQtFolderOpener:
    def test_implements_protocol(self):
        assert isinstance(QtFolderOpener(), FolderOpenerProtocol)

    def test_opens_parent_folder(self, qtbot, tmp_path):
        assert qtbot is not None
        item = make_item("a.jar", path=str(tmp_path / "a.jar"))

        with patch(
            "modkeep.services.folder_opener.QDesktopServices.openUrl", return_value=True
        ) as open_url:
            QtFolderOpener().open_containing_folder(item)

        [url] = open_url.call_args.args
        assert url.toLocalFile().rstrip("/") == str(tmp_path)

    def test_missing_folder_is_not_opened(self, qtbot, tmp_path):
        assert qtbot is not None
        item = make_item("a.jar", path=str(tmp_path / "gone" / "a.jar"))

        with patch("modkeep.services.folder_opener.QDesktopServices.openUrl") as open_url:
            QtFolderOpener().open_containing_folder(item)

        open_url.assert_not_called()
