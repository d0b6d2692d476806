"""Tests for snapshot reading and the poller thread."""

import time

from core.channel import Channel
from core.client import MediaClient
from core.models import (
    EMPTY_SNAPSHOT,
    UNKNOWN_ARTIST,
    UNKNOWN_TITLE,
    PlaybackState,
    PlayerPreference,
)
from core.poller import StatePoller, read_snapshot
from core.sessions import SessionResolver

from conftest import FakeBackend, FakeSession


class TestReadSnapshot:
    """Tests for read_snapshot."""

    def test_maps_all_fields(self):
        """Should copy metadata, status and position into the snapshot."""
        session = FakeSession(
            "vlc",
            status="Paused",
            metadata={
                "title": "Song",
                "artists": ["First", "Second"],
                "album": "Record",
                "art_url": "file:///tmp/cover.png",
                "length": 180.0,
            },
            position=42.0,
        )
        snap = read_snapshot(session)

        assert snap.title == "Song"
        assert snap.artist == "First"
        assert snap.album == "Record"
        assert snap.art_url == "file:///tmp/cover.png"
        assert snap.state is PlaybackState.PAUSED
        assert snap.position == 42.0
        assert snap.length == 180.0

    def test_missing_fields_get_defaults(self):
        """Should substitute per-field defaults for absent metadata."""
        snap = read_snapshot(FakeSession("vlc", metadata={}, position=None))

        assert snap.title == UNKNOWN_TITLE
        assert snap.artist == UNKNOWN_ARTIST
        assert snap.album == ""
        assert snap.art_url is None
        assert snap.position is None
        assert snap.length is None

    def test_metadata_failure_is_not_fatal(self):
        """Should still read status and position when metadata raises."""
        session = FakeSession("vlc", metadata=RuntimeError("no metadata"), position=3.0)
        snap = read_snapshot(session)

        assert snap.title == UNKNOWN_TITLE
        assert snap.state is PlaybackState.PLAYING
        assert snap.position == 3.0

    def test_status_and_position_failures(self):
        """Should fall back to Stopped and no position when those calls fail."""
        session = FakeSession(
            "vlc", status=RuntimeError("gone"), position=RuntimeError("gone")
        )
        snap = read_snapshot(session)

        assert snap.state is PlaybackState.STOPPED
        assert snap.position is None
        assert snap.title == "vlc song"

    def test_blank_art_and_bad_length(self):
        """Should treat a blank art URL as absent and ignore unparsable lengths."""
        session = FakeSession(
            "vlc", metadata={"title": "T", "art_url": "  ", "length": "n/a"}
        )
        snap = read_snapshot(session)

        assert snap.art_url is None
        assert snap.length is None

    def test_single_artist_string(self):
        """Should accept an artist given as a plain string."""
        snap = read_snapshot(FakeSession("vlc", metadata={"artists": "Solo"}))
        assert snap.artist == "Solo"


class TestStatePoller:
    """Tests for StatePoller."""

    def test_empty_snapshot_without_player(self):
        """Should emit the empty snapshot when nothing can be resolved."""
        poller = StatePoller(SessionResolver(FakeBackend()), PlayerPreference(), Channel())
        assert poller.poll_once() is EMPTY_SNAPSHOT

    def test_follows_preference(self):
        """Should read from the pinned player when it exists."""
        vlc = FakeSession("vlc")
        spotify = FakeSession("spotify")
        poller = StatePoller(
            SessionResolver(FakeBackend([vlc, spotify], active=vlc)),
            PlayerPreference("spotify"),
            Channel(),
        )
        assert poller.poll_once().title == "spotify song"

    def test_stops_when_reader_closes(self):
        """Should emit snapshots in order and exit once the channel is closed."""
        vlc = FakeSession("vlc")
        output = Channel(maxsize=2)
        poller = StatePoller(
            SessionResolver(FakeBackend([vlc], active=vlc)),
            PlayerPreference(),
            output,
            interval=0.01,
        )
        poller.start()

        deadline = time.monotonic() + 2
        while len(output) < 2 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert [s.title for s in output.drain()][:1] == ["vlc song"]

        output.close()
        poller.join(timeout=2)
        assert not poller.is_alive()

    def test_client_monitoring_closes_on_close(self):
        """Should stop the client's pollers when the client is closed."""
        client = MediaClient(backend=FakeBackend(), poll_interval=0.01)
        output = client.start_monitoring()

        deadline = time.monotonic() + 2
        while len(output) == 0 and time.monotonic() < deadline:
            time.sleep(0.01)
        assert output.try_recv() == EMPTY_SNAPSHOT

        client.close()
        for poller in client._pollers:
            poller.join(timeout=2)
            assert not poller.is_alive()
