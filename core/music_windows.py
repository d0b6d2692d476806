# core/music_windows.py
import asyncio
from typing import List, Optional, Tuple

from .debug import debug_log
from .sessions import PlayerSession, SessionBackend

try:
    from winsdk.windows.media.control import (
        GlobalSystemMediaTransportControlsSessionManager as MediaManager,
        GlobalSystemMediaTransportControlsSessionPlaybackStatus as PlaybackStatus,
    )
except Exception:  # winsdk not installed or not on Windows
    MediaManager = None
    PlaybackStatus = None

_TICKS_PER_SECOND = 10_000_000


def _timespan_seconds(value) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value.total_seconds())
    except Exception:
        pass
    try:
        # Some WinRT bindings expose a "duration" in 100ns ticks.
        return float(value.duration) / _TICKS_PER_SECOND
    except Exception:
        return None


def _run(coro):
    try:
        return asyncio.run(coro)
    except RuntimeError:
        # If an event loop is already running (unlikely here), fall back.
        loop = asyncio.new_event_loop()
        try:
            return loop.run_until_complete(coro)
        finally:
            loop.close()


async def _await(op):
    # WinRT operations are awaitable but not coroutines.
    return await op


class WindowsMediaSession(PlayerSession):
    def __init__(self, session):
        self._session = session
        try:
            self.identity = session.source_app_user_model_id or ""
        except Exception:
            self.identity = ""

    def metadata(self) -> dict:
        info = _run(_await(self._session.try_get_media_properties_async()))
        artist = getattr(info, "artist", "") or ""
        try:
            timeline = self._session.get_timeline_properties()
            length = _timespan_seconds(timeline.end_time)
        except Exception:
            length = None
        return {
            "title": getattr(info, "title", None),
            "artists": [artist] if artist else [],
            "album": getattr(info, "album_title", None),
            # Thumbnails are streams, not locators.
            "art_url": None,
            "length": length,
        }

    def playback_status(self) -> str:
        status = self._session.get_playback_info().playback_status
        if status == PlaybackStatus.PLAYING:
            return "Playing"
        if status == PlaybackStatus.PAUSED:
            return "Paused"
        return "Stopped"

    def position(self) -> Optional[float]:
        return _timespan_seconds(self._session.get_timeline_properties().position)

    def play_pause(self) -> None:
        _run(_await(self._session.try_toggle_play_pause_async()))

    def next(self) -> None:
        _run(_await(self._session.try_skip_next_async()))

    def previous(self) -> None:
        _run(_await(self._session.try_skip_previous_async()))

    def seek(self, offset_us: int) -> None:
        current = self.position() or 0.0
        target = max(0.0, current + offset_us / 1_000_000.0)
        _run(_await(self._session.try_change_playback_position_async(int(target * _TICKS_PER_SECOND))))


class WindowsMediaBackend(SessionBackend):
    """System Media Transport Controls sessions (Windows 10+)."""

    def list(self) -> List[Tuple[str, PlayerSession]]:
        manager = _run(_await(MediaManager.request_async()))
        try:
            sessions = manager.get_sessions()
        except Exception as e:
            debug_log(f"GSMTC get_sessions failed: {e}")
            sessions = []
        wrapped = [WindowsMediaSession(s) for s in sessions]
        return [(s.identity, s) for s in wrapped if s.identity]

    def find_active(self) -> Optional[PlayerSession]:
        manager = _run(_await(MediaManager.request_async()))
        current = manager.get_current_session()
        if current is None:
            return None
        return WindowsMediaSession(current)
