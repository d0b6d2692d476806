# core/music_linux.py
from typing import List, Optional, Tuple

from .debug import debug_log
from .sessions import PlayerSession, SessionBackend

try:
    from pydbus import SessionBus
except Exception:  # pydbus/PyGObject not installed or no session bus support
    SessionBus = None

MPRIS_PREFIX = "org.mpris.MediaPlayer2."
MPRIS_PATH = "/org/mpris/MediaPlayer2"


def _seconds(micros) -> Optional[float]:
    if micros is None:
        return None
    try:
        return float(micros) / 1_000_000.0
    except Exception:
        return None


class MprisSession(PlayerSession):
    def __init__(self, bus_name: str, proxy):
        self.bus_name = bus_name
        self.identity = bus_name[len(MPRIS_PREFIX):]
        self._proxy = proxy

    def metadata(self) -> dict:
        m = self._proxy.Metadata or {}
        artists = m.get("xesam:artist")
        if isinstance(artists, str):
            artists = [artists]
        return {
            "title": m.get("xesam:title"),
            "artists": list(artists or []),
            "album": m.get("xesam:album"),
            "art_url": m.get("mpris:artUrl"),
            "length": _seconds(m.get("mpris:length")),
        }

    def playback_status(self) -> str:
        return self._proxy.PlaybackStatus

    def position(self) -> Optional[float]:
        return _seconds(self._proxy.Position)

    def display_name(self) -> str:
        try:
            return self._proxy.Identity or self.identity
        except Exception:
            return self.identity

    def play_pause(self) -> None:
        self._proxy.PlayPause()

    def next(self) -> None:
        self._proxy.Next()

    def previous(self) -> None:
        self._proxy.Previous()

    def seek(self, offset_us: int) -> None:
        self._proxy.Seek(int(offset_us))


class MprisBackend(SessionBackend):
    """MPRIS players on the D-Bus session bus."""

    def __init__(self, bus=None):
        self._bus = bus

    def _get_bus(self):
        # The bus connection is long-lived; player proxies are not.
        if self._bus is None:
            self._bus = SessionBus()
        return self._bus

    def _bus_names(self) -> List[str]:
        dbus = self._get_bus().get(".DBus")
        return sorted(n for n in dbus.ListNames() if n.startswith(MPRIS_PREFIX))

    def list(self) -> List[Tuple[str, PlayerSession]]:
        bus = self._get_bus()
        sessions = []
        for name in self._bus_names():
            try:
                session = MprisSession(name, bus.get(name, MPRIS_PATH))
            except Exception as e:
                debug_log(f"Skipping MPRIS service {name}: {e}")
                continue
            sessions.append((session.identity, session))
        return sessions

    def find_active(self) -> Optional[PlayerSession]:
        sessions = [s for _, s in self.list()]
        paused = None
        for session in sessions:
            try:
                status = session.playback_status()
            except Exception:
                continue
            if status == "Playing":
                return session
            if status == "Paused" and paused is None:
                paused = session
        if paused is not None:
            return paused
        return sessions[0] if sessions else None

    def find_by_name(self, identity: str) -> Optional[PlayerSession]:
        wanted = identity.lower()
        for name, session in self.list():
            if name.lower() == wanted or session.display_name().lower() == wanted:
                return session
        return None
