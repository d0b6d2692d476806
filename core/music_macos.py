#core/music_macos.py
import subprocess
from typing import List, Optional, Tuple

from .sessions import PlayerSession, SessionBackend

APP_NAME = "Music"

_STATUS_SCRIPT = r'''
tell application "Music"
    if it is not running then
        return "OK=0"
    end if
    return "OK=1|" & (player state as string)
end tell
'''

_METADATA_SCRIPT = r'''
tell application "Music"
    set tName to (name of current track as string)
    set tArtist to (artist of current track as string)
    set tAlbum to (album of current track as string)
    set tDur to (duration of current track)
    return "OK=1|" & tName & "|" & tArtist & "|" & tAlbum & "|" & (tDur as string)
end tell
'''


def _osascript(script: str) -> str:
    return subprocess.check_output(["osascript", "-e", script], text=True).strip()


def to_float(v: str) -> Optional[float]:
    try:
        return float(v.replace(",", "."))
    except Exception:
        return None


class AppleMusicSession(PlayerSession):
    identity = APP_NAME

    def metadata(self) -> dict:
        out = _osascript(_METADATA_SCRIPT)
        if not out.startswith("OK=1|"):
            return {}
        parts = out.split("|")
        return {
            "title": parts[1] if len(parts) > 1 else None,
            "artists": [parts[2]] if len(parts) > 2 and parts[2] else [],
            "album": parts[3] if len(parts) > 3 else None,
            "art_url": None,
            "length": to_float(parts[4]) if len(parts) > 4 else None,
        }

    def playback_status(self) -> str:
        out = _osascript(_STATUS_SCRIPT)
        if not out.startswith("OK=1|"):
            return "Stopped"
        return out.split("|", 1)[1].strip().capitalize()

    def position(self) -> Optional[float]:
        return to_float(_osascript(f'tell application "{APP_NAME}" to get player position'))

    def play_pause(self) -> None:
        _osascript(f'tell application "{APP_NAME}" to playpause')

    def next(self) -> None:
        _osascript(f'tell application "{APP_NAME}" to next track')

    def previous(self) -> None:
        _osascript(f'tell application "{APP_NAME}" to previous track')

    def seek(self, offset_us: int) -> None:
        seconds = offset_us / 1_000_000.0
        _osascript(
            f'tell application "{APP_NAME}" to set player position to '
            f'((player position) + ({seconds}))'
        )


class AppleMusicBackend(SessionBackend):
    """Apple Music only; it is the one player AppleScript can reach reliably."""

    def _running(self) -> bool:
        try:
            return _osascript(_STATUS_SCRIPT).startswith("OK=1|")
        except Exception:
            return False

    def list(self) -> List[Tuple[str, PlayerSession]]:
        if not self._running():
            return []
        return [(APP_NAME, AppleMusicSession())]

    def find_active(self) -> Optional[PlayerSession]:
        if not self._running():
            return None
        return AppleMusicSession()
