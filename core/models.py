# core/models.py
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Optional

NO_MEDIA_TITLE = "No media playing"
UNKNOWN_TITLE = "Unknown"
UNKNOWN_ARTIST = "Unknown Artist"


class PlaybackState(Enum):
    STOPPED = "Stopped"
    PLAYING = "Playing"
    PAUSED = "Paused"

    @classmethod
    def parse(cls, value) -> "PlaybackState":
        try:
            return cls(str(value).strip().capitalize())
        except Exception:
            return cls.STOPPED


@dataclass(frozen=True)
class SessionSnapshot:
    title: str = NO_MEDIA_TITLE
    artist: str = ""
    album: str = ""
    art_url: Optional[str] = None
    state: PlaybackState = PlaybackState.STOPPED
    position: Optional[float] = None  # seconds
    length: Optional[float] = None  # seconds

    @property
    def playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    def progress(self) -> float:
        if self.position is None or self.length is None or self.length <= 0:
            return 0.0
        return max(0.0, min(1.0, self.position / self.length))


EMPTY_SNAPSHOT = SessionSnapshot()


@dataclass(frozen=True)
class HistoryEntry:
    state: PlaybackState
    title: str
    artist: str
    observed_at: float


class CommandKind(Enum):
    PLAY_PAUSE = "play_pause"
    NEXT = "next"
    PREVIOUS = "previous"
    SEEK = "seek"


@dataclass(frozen=True)
class Command:
    kind: CommandKind
    offset_us: int = 0  # signed, only meaningful for SEEK

    @classmethod
    def seek(cls, offset_us: int) -> "Command":
        return cls(CommandKind.SEEK, int(offset_us))


PLAY_PAUSE = Command(CommandKind.PLAY_PAUSE)
NEXT = Command(CommandKind.NEXT)
PREVIOUS = Command(CommandKind.PREVIOUS)


class PlayerPreference:
    """
    Which player to follow. ``None`` means "Auto": whatever player is active.

    Shared between the UI and the dispatcher/poller threads. Readers get a copy
    and must not hold the lock while talking to a player.
    """

    def __init__(self, name: Optional[str] = None):
        self._lock = threading.Lock()
        self._name = None
        self.set(name)

    def get(self) -> Optional[str]:
        with self._lock:
            return self._name

    def set(self, name: Optional[str]) -> None:
        name = (name or "").strip() or None
        with self._lock:
            self._name = name
