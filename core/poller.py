# core/poller.py
import threading
import time
from typing import Optional

from .channel import Channel, ChannelClosed
from .debug import debug_log
from .models import (
    EMPTY_SNAPSHOT,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
    PlaybackState,
    PlayerPreference,
    SessionSnapshot,
)
from .sessions import PlayerSession, SessionResolver

POLL_INTERVAL = 0.5  # seconds
SNAPSHOT_BUFFER = 8


def _text(value) -> Optional[str]:
    if value is None:
        return None
    try:
        value = str(value)
    except Exception:
        return None
    return value


def _first_artist(artists) -> Optional[str]:
    if isinstance(artists, str):
        return artists or None
    try:
        return _text(list(artists)[0])
    except Exception:
        return None


def _duration(value) -> Optional[float]:
    if value is None:
        return None
    try:
        seconds = float(value)
    except Exception:
        return None
    return seconds if seconds >= 0 else None


def read_snapshot(session: PlayerSession) -> SessionSnapshot:
    """
    Read one snapshot from a player. Each field falls back to its own default,
    so a broken field never costs the rest of the snapshot.
    """
    try:
        meta = session.metadata() or {}
    except Exception as e:
        debug_log(f"Metadata read failed for '{session.identity}': {e}")
        meta = {}

    try:
        title = _text(meta.get("title")) or UNKNOWN_TITLE
    except Exception:
        title = UNKNOWN_TITLE

    try:
        artist = _first_artist(meta.get("artists")) or UNKNOWN_ARTIST
    except Exception:
        artist = UNKNOWN_ARTIST

    try:
        album = _text(meta.get("album")) or ""
    except Exception:
        album = ""

    try:
        art_url = (_text(meta.get("art_url")) or "").strip() or None
    except Exception:
        art_url = None

    try:
        length = _duration(meta.get("length"))
    except Exception:
        length = None

    try:
        state = PlaybackState.parse(session.playback_status())
    except Exception:
        state = PlaybackState.STOPPED

    try:
        position = _duration(session.position())
    except Exception:
        position = None

    return SessionSnapshot(
        title=title,
        artist=artist,
        album=album,
        art_url=art_url,
        state=state,
        position=position,
        length=length,
    )


class StatePoller(threading.Thread):
    """
    Emits a snapshot of the current player every ``interval`` seconds.

    Runs until the output channel is closed by its reader; a full channel only
    delays the next tick.
    """

    def __init__(
        self,
        resolver: SessionResolver,
        preference: PlayerPreference,
        output: Channel,
        interval: float = POLL_INTERVAL,
    ):
        super().__init__(name="state-poller", daemon=True)
        self.resolver = resolver
        self.preference = preference
        self.output = output
        self.interval = interval

    def poll_once(self) -> SessionSnapshot:
        session = self.resolver.resolve(self.preference.get())
        if session is None:
            return EMPTY_SNAPSHOT
        return read_snapshot(session)

    def run(self):
        while True:
            snapshot = self.poll_once()
            try:
                self.output.send(snapshot, timeout=self.interval)
            except ChannelClosed:
                debug_log("Snapshot reader gone; poller stopped")
                return
            time.sleep(self.interval)
