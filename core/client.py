# core/client.py
from typing import List, Optional

from .channel import Channel, ChannelClosed
from .debug import debug_log
from .dispatcher import DISPATCH_INTERVAL, CommandDispatcher
from .models import NEXT, PLAY_PAUSE, PREVIOUS, Command, PlayerPreference
from .poller import POLL_INTERVAL, SNAPSHOT_BUFFER, StatePoller
from .sessions import SessionBackend, SessionResolver, default_backend

SEEK_STEP_US = 5_000_000


class MediaClient:
    """
    What the UI talks to: commands go in through ``submit_command``, snapshots
    come out of the channel returned by ``start_monitoring``.

    The dispatcher and the poller each resolve the player on their own, from
    the same preference cell.
    """

    def __init__(
        self,
        backend: Optional[SessionBackend] = None,
        preference: Optional[PlayerPreference] = None,
        dispatch_interval: float = DISPATCH_INTERVAL,
        poll_interval: float = POLL_INTERVAL,
    ):
        if backend is None:
            backend = default_backend()
        self.preference = preference or PlayerPreference()
        self.resolver = SessionResolver(backend)
        self.poll_interval = poll_interval

        self._commands = Channel()
        self.dispatcher = CommandDispatcher(
            self.resolver, self.preference, self._commands, interval=dispatch_interval
        )
        self._pollers: List[StatePoller] = []
        self._outputs: List[Channel] = []

    def start(self) -> None:
        if not self.dispatcher.is_alive():
            self.dispatcher.start()

    def start_monitoring(self) -> Channel:
        output = Channel(maxsize=SNAPSHOT_BUFFER)
        poller = StatePoller(
            self.resolver, self.preference, output, interval=self.poll_interval
        )
        poller.start()
        self._pollers.append(poller)
        self._outputs.append(output)
        return output

    def submit_command(self, command: Command) -> bool:
        """
        Queue a command. ``True`` only means it was queued; the effect shows up
        in a later snapshot. ``False`` means the dispatcher is gone.
        """
        try:
            self._commands.send(command)
        except ChannelClosed:
            debug_log(f"Dispatcher gone; {command.kind.value} not delivered")
            return False
        return True

    def play_pause(self) -> bool:
        return self.submit_command(PLAY_PAUSE)

    def next(self) -> bool:
        return self.submit_command(NEXT)

    def previous(self) -> bool:
        return self.submit_command(PREVIOUS)

    def seek(self, offset_us: int) -> bool:
        return self.submit_command(Command.seek(offset_us))

    def set_preference(self, identity: Optional[str]) -> None:
        self.preference.set(identity)
        debug_log(f"Preferred player: {self.preference.get() or 'Auto'}")

    def list_identities(self) -> List[str]:
        return self.resolver.list_identities()

    def close(self) -> None:
        self._commands.close()
        for output in self._outputs:
            output.close()
