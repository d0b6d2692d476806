"""Tests for the window's keyboard bindings, run on the offscreen Qt platform."""

import os
from unittest.mock import MagicMock

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6")

from PySide6.QtCore import Qt  # noqa: E402
from PySide6.QtGui import QKeySequence  # noqa: E402
from PySide6.QtTest import QTest  # noqa: E402
from PySide6.QtWidgets import QApplication  # noqa: E402

from core.channel import Channel  # noqa: E402
from core.models import PlayerPreference  # noqa: E402
from ui.main_window import MainWindow  # noqa: E402


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def client():
    stub = MagicMock()
    stub.preference = PlayerPreference()
    stub.list_identities.return_value = []
    stub.start_monitoring.return_value = Channel()
    return stub


@pytest.fixture
def window(qapp, client):
    win = MainWindow(client)
    win.show()
    win.activateWindow()
    yield win
    win.close()


class TestShortcuts:
    """Tests for the window-scoped key bindings."""

    def test_bindings(self, window):
        """Should bind the arrows and Ctrl+Q at window scope."""
        keys = {
            label: [s.toString() for s in act.shortcuts()]
            for label, act in window.shortcut_actions.items()
        }

        assert keys == {
            "Play/Pause": ["Up", "Down"],
            "Previous": ["Left"],
            "Next": ["Right"],
            "Quit": [QKeySequence("Ctrl+Q").toString()],
        }
        for act in window.shortcut_actions.values():
            assert act.shortcutContext() == Qt.WindowShortcut

    def test_actions_reach_client(self, window, client):
        """Should forward each action to the matching client command."""
        window.shortcut_actions["Play/Pause"].trigger()
        window.shortcut_actions["Previous"].trigger()
        window.shortcut_actions["Next"].trigger()

        client.play_pause.assert_called_once_with()
        client.previous.assert_called_once_with()
        client.next.assert_called_once_with()

    def test_arrows_with_focused_button(self, window, client):
        """Should act on arrow keys even while the play button has focus."""
        if not QTest.qWaitForWindowActive(window):
            pytest.skip("window could not be activated on this platform")
        window.play_btn.setFocus()

        QTest.keyClick(window.play_btn, Qt.Key_Right)
        QTest.keyClick(window.play_btn, Qt.Key_Left)
        QTest.keyClick(window.play_btn, Qt.Key_Down)

        client.next.assert_called_once_with()
        client.previous.assert_called_once_with()
        client.play_pause.assert_called_once_with()
