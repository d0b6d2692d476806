# core/sessions.py
"""
Player session capability and the resolver that re-acquires it.

A session is a handle on one media player's control surface. Players come and
go at any time, so nothing here keeps a session around: every ``resolve`` call
asks the backend again.
"""
import sys
from typing import List, Optional, Tuple

from .debug import debug_log


class PlayerSession:
    """One bound player. Every call may raise; callers treat that as "absent"."""

    identity: str = ""

    def metadata(self) -> dict:
        """Keys: title, artists (list), album, art_url, length (seconds)."""
        raise NotImplementedError

    def playback_status(self) -> str:
        raise NotImplementedError

    def position(self) -> Optional[float]:
        raise NotImplementedError

    def play_pause(self) -> None:
        raise NotImplementedError

    def next(self) -> None:
        raise NotImplementedError

    def previous(self) -> None:
        raise NotImplementedError

    def seek(self, offset_us: int) -> None:
        raise NotImplementedError


class SessionBackend:
    def list(self) -> List[Tuple[str, PlayerSession]]:
        raise NotImplementedError

    def find_active(self) -> Optional[PlayerSession]:
        raise NotImplementedError

    def find_by_name(self, identity: str) -> Optional[PlayerSession]:
        for name, session in self.list():
            if name == identity:
                return session
        return None


def default_backend() -> Optional[SessionBackend]:
    if sys.platform.startswith("linux"):
        from .music_linux import MprisBackend, SessionBus
        return MprisBackend() if SessionBus is not None else None
    if sys.platform == "win32":
        from .music_windows import WindowsMediaBackend, MediaManager
        return WindowsMediaBackend() if MediaManager is not None else None
    if sys.platform == "darwin":
        from .music_macos import AppleMusicBackend
        return AppleMusicBackend()
    return None


class SessionResolver:
    def __init__(self, backend: Optional[SessionBackend]):
        self.backend = backend
        if backend is None:
            debug_log("No player backend available on this platform")

    def resolve(self, preference: Optional[str]) -> Optional[PlayerSession]:
        if self.backend is None:
            return None

        if preference:
            try:
                session = self.backend.find_by_name(preference)
            except Exception as e:
                debug_log(f"Lookup of player '{preference}' failed: {e}")
                session = None
            if session is not None:
                return session

        try:
            return self.backend.find_active()
        except Exception as e:
            debug_log(f"Active player lookup failed: {e}")
            return None

    def list_identities(self) -> List[str]:
        if self.backend is None:
            return []
        try:
            return [name for name, _ in self.backend.list()]
        except Exception as e:
            debug_log(f"Listing players failed: {e}")
            return []
