"""Shared fakes for the core tests. No Qt and no D-Bus needed."""

import pytest

from core.reconcile import PlayerView
from core.sessions import PlayerSession, SessionBackend


class FakeSession(PlayerSession):
    def __init__(self, identity, status="Playing", metadata=None, position=10.0):
        self.identity = identity
        self.status = status
        self._metadata = metadata if metadata is not None else {
            "title": f"{identity} song",
            "artists": [f"{identity} artist"],
            "album": "Album",
            "art_url": None,
            "length": 200.0,
        }
        self._position = position
        self.calls = []

    def metadata(self):
        if isinstance(self._metadata, Exception):
            raise self._metadata
        return self._metadata

    def playback_status(self):
        if isinstance(self.status, Exception):
            raise self.status
        return self.status

    def position(self):
        if isinstance(self._position, Exception):
            raise self._position
        return self._position

    def play_pause(self):
        self.calls.append(("play_pause",))

    def next(self):
        self.calls.append(("next",))

    def previous(self):
        self.calls.append(("previous",))

    def seek(self, offset_us):
        self.calls.append(("seek", offset_us))


class FakeBackend(SessionBackend):
    def __init__(self, sessions=None, active=None):
        self.sessions = list(sessions or [])
        self.active = active
        self.find_active_calls = 0

    def list(self):
        return [(s.identity, s) for s in self.sessions]

    def find_active(self):
        self.find_active_calls += 1
        return self.active


class RecordingView(PlayerView):
    def __init__(self):
        self.texts = []
        self.art = []
        self.icons = []
        self.progress = []
        self.histories = []
        self.choices = []

    def set_text(self, title, artist, album):
        self.texts.append((title, artist, album))

    def set_art(self, image):
        self.art.append(image)

    def set_playback_icon(self, playing):
        self.icons.append(playing)

    def set_progress(self, ratio):
        self.progress.append(ratio)

    def show_history(self, entries):
        self.histories.append(entries)

    def set_player_choices(self, identities):
        self.choices.append(identities)


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def view():
    return RecordingView()


@pytest.fixture
def clock():
    return FakeClock()
