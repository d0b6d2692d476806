# ui/main_window.py
import time
from typing import List, Optional

from PySide6.QtCore import QEvent, Qt, QTimer
from PySide6.QtGui import QAction, QImage, QKeySequence, QPainter, QPainterPath, QPixmap
from PySide6.QtWidgets import (
    QComboBox, QFrame, QHBoxLayout, QLabel, QListWidget, QListWidgetItem,
    QMainWindow, QProgressBar, QPushButton, QVBoxLayout, QWidget,
)

from core.client import SEEK_STEP_US, MediaClient
from core.models import HistoryEntry, PlaybackState
from core.reconcile import PlayerView, ReconciliationEngine

PRIMARY = "#3584e4"
BG = "#242424"

RECONCILE_MS = 500
ART_RETRY_MS = 3000
PLAYER_REFRESH_MS = 5000
AUTO_LABEL = "Auto"
SIDEBAR_RATIO = 1.3

_STATE_ICONS = {
    PlaybackState.PLAYING: "▶",
    PlaybackState.PAUSED: "⏸",
    PlaybackState.STOPPED: "⏹",
}


def decode_image(data: bytes) -> Optional[QImage]:
    image = QImage()
    if not image.loadFromData(data):
        return None
    return image


class MainWindow(QMainWindow, PlayerView):
    def __init__(self, client: MediaClient):
        super().__init__()

        self.setWindowTitle("Empress")
        self.resize(320, 400)
        self.setMinimumSize(150, 150)

        self.client = client
        self._art_pixmap = None

        root = QWidget()
        root.setObjectName("Root")
        root_layout = QHBoxLayout(root)
        root_layout.setContentsMargins(0, 0, 0, 0)
        root_layout.setSpacing(0)

        self.sidebar = self._build_sidebar()
        self.content = self._build_content()

        root_layout.addWidget(self.sidebar)
        root_layout.addWidget(self.content, 1)
        self.setCentralWidget(root)

        self.sidebar.setVisible(False)
        self._apply_styles()
        self._build_shortcuts()

        self._timers = []
        self._start_client()

    # ==================================================
    # SIDEBAR (SESSION HISTORY)
    # ==================================================

    def _build_sidebar(self):
        panel = QFrame()
        panel.setObjectName("Sidebar")
        panel.setFixedWidth(200)
        v = QVBoxLayout(panel)
        v.setContentsMargins(6, 6, 6, 6)
        v.setSpacing(6)

        heading = QLabel("Session History")
        heading.setObjectName("Heading")

        self.history_list = QListWidget()
        self.history_list.setObjectName("HistoryList")
        self.history_list.setSelectionMode(QListWidget.NoSelection)
        self.history_list.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)

        v.addWidget(heading)
        v.addWidget(self.history_list, 1)
        return panel

    # ==================================================
    # NOW PLAYING
    # ==================================================

    def _build_content(self):
        page = QWidget()
        page.setObjectName("Content")
        layout = QVBoxLayout(page)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(12)

        header = QHBoxLayout()
        header.addStretch()
        self.player_combo = QComboBox()
        self.player_combo.setObjectName("PlayerCombo")
        self.player_combo.setToolTip("Select MPRIS player")
        self.player_combo.addItem(AUTO_LABEL)
        self.player_combo.currentIndexChanged.connect(self._on_player_selected)
        header.addWidget(self.player_combo)

        self.art_container = QFrame()
        self.art_container.setObjectName("ArtContainer")
        art_layout = QVBoxLayout(self.art_container)
        art_layout.setContentsMargins(0, 0, 0, 0)
        self.d_art = QLabel()
        self.d_art.setObjectName("AlbumArt")
        self.d_art.setFixedSize(200, 200)
        self.d_art.setAlignment(Qt.AlignCenter)
        art_layout.addWidget(self.d_art, 0, Qt.AlignHCenter)
        self.art_container.setVisible(False)

        self.d_song = QLabel("No media playing")
        self.d_song.setObjectName("SongTitle")
        self.d_song.setWordWrap(True)
        self.d_song.setAlignment(Qt.AlignCenter)

        self.d_artist = QLabel("")
        self.d_artist.setObjectName("ArtistName")
        self.d_artist.setAlignment(Qt.AlignCenter)

        self.d_album = QLabel("")
        self.d_album.setObjectName("AlbumName")
        self.d_album.setAlignment(Qt.AlignCenter)

        controls = QHBoxLayout()
        controls.setSpacing(12)
        controls.addStretch()

        self.prev_btn = QPushButton("⏮")
        self.prev_btn.setObjectName("Flat")
        self.prev_btn.setToolTip("Previous")
        self.prev_btn.clicked.connect(self.client.previous)

        self.play_btn = QPushButton("▶")
        self.play_btn.setObjectName("PlayPause")
        self.play_btn.setToolTip("Play/Pause")
        self.play_btn.setProperty("paused", True)
        self.play_btn.clicked.connect(self.client.play_pause)
        self.play_btn.installEventFilter(self)

        self.next_btn = QPushButton("⏭")
        self.next_btn.setObjectName("Flat")
        self.next_btn.setToolTip("Next")
        self.next_btn.clicked.connect(self.client.next)

        controls.addWidget(self.prev_btn)
        controls.addWidget(self.play_btn)
        controls.addWidget(self.next_btn)
        controls.addStretch()

        self.d_progress = QProgressBar()
        self.d_progress.setObjectName("TrackProgress")
        self.d_progress.setRange(0, 1000)
        self.d_progress.setValue(0)
        self.d_progress.setTextVisible(False)
        self.d_progress.setFixedHeight(6)

        layout.addLayout(header)
        layout.addStretch()
        layout.addWidget(self.art_container, 0, Qt.AlignHCenter)
        layout.addWidget(self.d_song)
        layout.addWidget(self.d_artist)
        layout.addWidget(self.d_album)
        layout.addLayout(controls)
        layout.addWidget(self.d_progress)
        layout.addStretch()
        return page

    # ==================================================
    # CLIENT HOOKUP
    # ==================================================

    def _start_client(self):
        snapshots = self.client.start_monitoring()
        self.client.start()
        self.engine = ReconciliationEngine(snapshots, self, decode=decode_image)

        self._add_timer(RECONCILE_MS, self.engine.drain)
        self._add_timer(ART_RETRY_MS, self.engine.retry_art)
        self._add_timer(PLAYER_REFRESH_MS, self._refresh_players)
        self._refresh_players()
        self.play_btn.setFocus()

    def _add_timer(self, interval_ms: int, callback):
        timer = QTimer(self)
        timer.setInterval(interval_ms)
        timer.timeout.connect(callback)
        timer.start()
        self._timers.append(timer)

    def _refresh_players(self):
        self.set_player_choices(self.client.list_identities())

    def _on_player_selected(self, index: int):
        if index <= 0:
            self.client.set_preference(None)
        else:
            self.client.set_preference(self.player_combo.itemText(index))

    # ==================================================
    # VIEW HOOKS
    # ==================================================

    def set_text(self, title: str, artist: str, album: str) -> None:
        self.d_song.setText(title)
        self.d_artist.setText(artist)
        self.d_album.setText(album)
        self.d_artist.setVisible(bool(artist))
        self.d_album.setVisible(bool(album))

    def set_art(self, image) -> None:
        if image is None or image.isNull():
            self.d_art.setPixmap(QPixmap())
            self._art_pixmap = None
            self.art_container.setVisible(False)
            return

        pix = QPixmap.fromImage(image)
        self._art_pixmap = pix
        scaled = pix.scaled(
            self.d_art.size(),
            Qt.KeepAspectRatioByExpanding,
            Qt.SmoothTransformation,
        )
        self.d_art.setPixmap(self._rounded_pixmap(scaled, radius=12))
        self.art_container.setVisible(True)

    def set_playback_icon(self, playing: bool) -> None:
        self.play_btn.setText("⏸" if playing else "▶")
        paused = not playing
        if self.play_btn.property("paused") != paused:
            self.play_btn.setProperty("paused", paused)
            # Re-evaluate the [paused="true"] stylesheet selector.
            self.play_btn.style().unpolish(self.play_btn)
            self.play_btn.style().polish(self.play_btn)

    def set_progress(self, ratio: float) -> None:
        self.d_progress.setValue(int(max(0.0, min(1.0, ratio)) * 1000))

    def show_history(self, entries: List[HistoryEntry]) -> None:
        self.history_list.clear()
        for entry in entries:
            icon = _STATE_ICONS.get(entry.state, "")
            text = f"{icon} {entry.title}"
            if entry.artist:
                text += f"\n{entry.artist}"
            item = QListWidgetItem(text)
            item.setToolTip(time.strftime("%H:%M:%S", time.localtime(entry.observed_at)))
            self.history_list.addItem(item)

    def set_player_choices(self, identities: List[str]) -> None:
        pinned = self.client.preference.get()
        names = list(identities)
        # A pinned player that quit stays listed; playback falls back to the
        # active player until it returns.
        if pinned and pinned not in names:
            names.append(pinned)

        self.player_combo.blockSignals(True)
        try:
            while self.player_combo.count() > 1:
                self.player_combo.removeItem(1)
            for name in names:
                self.player_combo.addItem(name)
            index = self.player_combo.findText(pinned) if pinned else 0
            self.player_combo.setCurrentIndex(max(index, 0))
        finally:
            self.player_combo.blockSignals(False)

    # ==================================================
    # INPUT
    # ==================================================

    def eventFilter(self, obj, event):
        if obj is self.play_btn and event.type() == QEvent.Wheel:
            step = SEEK_STEP_US if event.angleDelta().y() > 0 else -SEEK_STEP_US
            self.client.seek(step)
            return True
        return super().eventFilter(obj, event)

    def _build_shortcuts(self):
        # Window-scoped so focused buttons don't swallow the arrow keys.
        bindings = [
            ("Play/Pause", ["Up", "Down"], self.client.play_pause),
            ("Previous", ["Left"], self.client.previous),
            ("Next", ["Right"], self.client.next),
            ("Quit", ["Ctrl+Q"], self.close),
        ]
        self.shortcut_actions = {}
        for label, keys, slot in bindings:
            act = QAction(label, self)
            act.setShortcuts([QKeySequence(k) for k in keys])
            act.setShortcutContext(Qt.WindowShortcut)
            act.triggered.connect(lambda checked=False, slot=slot: slot())
            self.addAction(act)
            self.shortcut_actions[label] = act

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.sidebar.setVisible(self.width() > SIDEBAR_RATIO * self.height())

    def _rounded_pixmap(self, pixmap: QPixmap, radius: int) -> QPixmap:
        size = self.d_art.size()
        rounded = QPixmap(size)
        rounded.fill(Qt.transparent)

        painter = QPainter(rounded)
        painter.setRenderHints(QPainter.Antialiasing | QPainter.SmoothPixmapTransform)

        path = QPainterPath()
        path.addRoundedRect(0, 0, size.width(), size.height(), radius, radius)
        painter.setClipPath(path)
        painter.drawPixmap(0, 0, pixmap)
        painter.end()

        return rounded

    # ==================================================
    # CLEAN SHUTDOWN
    # ==================================================

    def closeEvent(self, event):
        self._stop_client()
        event.accept()

    def _stop_client(self):
        for timer in self._timers:
            timer.stop()
        self._timers = []
        self.client.close()

    # ==================================================
    # STYLES
    # ==================================================

    def _apply_styles(self):
        self.setStyleSheet(f"""
            QWidget {{
                color: white;
                font-family: Cantarell, Inter, "Segoe UI", Arial;
            }}

            QWidget#Root, QMainWindow {{
                background-color: {BG};
            }}

            QFrame#Sidebar {{
                background-color: rgba(255,255,255,0.06);
                border-right: 1px solid rgba(255,255,255,0.10);
            }}

            QLabel#Heading {{
                font-size: 13px;
                font-weight: 700;
            }}

            QListWidget#HistoryList {{
                background: transparent;
                border: 0px;
                font-size: 12px;
            }}

            QListWidget#HistoryList::item {{
                padding: 6px 8px;
                border-bottom: 1px solid rgba(255,255,255,0.08);
            }}

            QLabel#SongTitle {{
                font-size: 20px;
                font-weight: 800;
            }}

            QLabel#ArtistName {{
                font-size: 14px;
                color: rgba(255,255,255,0.70);
            }}

            QLabel#AlbumName {{
                font-size: 11px;
                color: rgba(255,255,255,0.55);
            }}

            QLabel#AlbumArt {{
                border-radius: 12px;
            }}

            QPushButton#Flat {{
                background: transparent;
                border: 0px;
                font-size: 18px;
                padding: 8px;
            }}

            QPushButton#PlayPause {{
                background-color: {PRIMARY};
                border-radius: 24px;
                min-width: 48px;
                min-height: 48px;
                font-size: 18px;
            }}

            QPushButton#PlayPause[paused="true"] {{
                background-color: rgba(255,255,255,0.15);
            }}

            QProgressBar#TrackProgress {{
                background-color: rgba(255,255,255,0.15);
                border: 0px;
                border-radius: 3px;
            }}

            QProgressBar#TrackProgress::chunk {{
                background-color: {PRIMARY};
                border-radius: 3px;
            }}
        """)
