# core/reconcile.py
"""
Turns the poller's snapshot stream into view updates.

Everything here runs on the UI thread: the engine owns the last observed
state, the art fetch state and the session history, and nothing else reads
them. Only snapshots cross threads, through the channel.
"""
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .artwork import ArtOutcome, ArtScheduler, fetch_art_bytes
from .channel import Channel
from .debug import debug_log
from .models import HistoryEntry, PlaybackState, SessionSnapshot

HISTORY_LIMIT = 50


class PlayerView:
    """
    Presentation hooks called by the engine. The default implementations do
    nothing; a view overrides what it renders.
    """

    def set_text(self, title: str, artist: str, album: str) -> None:
        """Empty artist or album labels are expected to be hidden."""

    def set_art(self, image: Any) -> None:
        """``None`` clears the art and hides its container."""

    def set_playback_icon(self, playing: bool) -> None:
        pass

    def set_progress(self, ratio: float) -> None:
        pass

    def show_history(self, entries: List[HistoryEntry]) -> None:
        pass

    def set_player_choices(self, identities: List[str]) -> None:
        pass


@dataclass
class ObservedState:
    title: str = ""
    artist: str = ""
    state: PlaybackState = PlaybackState.STOPPED
    initial_load_done: bool = False


@dataclass(frozen=True)
class Changes:
    title_changed: bool
    artist_changed: bool
    url_changed: bool
    status_changed: bool
    forced_art_update: bool
    history_appended: bool


class ReconciliationEngine:
    def __init__(
        self,
        snapshots: Channel,
        view: PlayerView,
        decode: Callable[[bytes], Any],
        fetch: Callable[[str], bytes] = fetch_art_bytes,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        history_limit: int = HISTORY_LIMIT,
    ):
        self.snapshots = snapshots
        self.view = view
        self.art = ArtScheduler(decode, view.set_art, fetch=fetch, clock=clock)
        self.observed = ObservedState()
        self._history: "deque[HistoryEntry]" = deque(maxlen=history_limit)
        self._wall_clock = wall_clock

    @property
    def history(self) -> List[HistoryEntry]:
        """Newest first."""
        return list(self._history)

    @property
    def art_reference(self) -> Optional[str]:
        return self.art.reference

    @property
    def art_outcome(self) -> ArtOutcome:
        return self.art.outcome

    def drain(self) -> List[Changes]:
        """Apply every snapshot that is waiting, oldest first."""
        backlog = len(self.snapshots)
        if backlog > 1:
            debug_log(f"Catching up on {backlog} snapshots")
        return [self.apply(snapshot) for snapshot in self.snapshots.drain()]

    def apply(self, snapshot: SessionSnapshot) -> Changes:
        observed = self.observed

        title_changed = observed.title != snapshot.title
        artist_changed = observed.artist != snapshot.artist
        url_changed = self.art.reference != snapshot.art_url
        status_changed = observed.state is not snapshot.state
        is_initial = not observed.initial_load_done

        # Some players keep one static art URL for every track, so a new
        # title or artist also re-fetches.
        force_art_update = is_initial or url_changed or title_changed or artist_changed

        self.view.set_text(snapshot.title, snapshot.artist, snapshot.album)
        self.view.set_playback_icon(snapshot.playing)
        self.view.set_progress(snapshot.progress())

        if force_art_update:
            self.art.load(snapshot.art_url)
            observed.initial_load_done = True

        history_appended = False
        if status_changed or title_changed or artist_changed:
            observed.title = snapshot.title
            observed.artist = snapshot.artist
            observed.state = snapshot.state
            self._history.appendleft(
                HistoryEntry(
                    state=snapshot.state,
                    title=snapshot.title,
                    artist=snapshot.artist,
                    observed_at=self._wall_clock(),
                )
            )
            history_appended = True
            self.view.show_history(self.history)

        return Changes(
            title_changed=title_changed,
            artist_changed=artist_changed,
            url_changed=url_changed,
            status_changed=status_changed,
            forced_art_update=force_art_update,
            history_appended=history_appended,
        )

    def retry_art(self) -> bool:
        return self.art.retry()
