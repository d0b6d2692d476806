# core/dispatcher.py
import threading
import time
from typing import Optional

from .channel import Channel
from .debug import debug_log
from .models import Command, CommandKind, PlayerPreference
from .sessions import PlayerSession, SessionResolver

DISPATCH_INTERVAL = 0.1  # seconds


def apply_command(session: PlayerSession, command: Command) -> None:
    if command.kind is CommandKind.PLAY_PAUSE:
        session.play_pause()
    elif command.kind is CommandKind.NEXT:
        session.next()
    elif command.kind is CommandKind.PREVIOUS:
        session.previous()
    elif command.kind is CommandKind.SEEK:
        session.seek(command.offset_us)
    else:
        raise ValueError(f"unknown command: {command!r}")


class CommandDispatcher(threading.Thread):
    """
    Applies queued commands to whichever player is current.

    The player is re-resolved on every tick, so a command always lands on the
    player that is active (or pinned) at the moment it is taken off the queue.
    Commands are fire-and-forget: with no player around they are dropped.
    """

    def __init__(
        self,
        resolver: SessionResolver,
        preference: PlayerPreference,
        commands: Channel,
        interval: float = DISPATCH_INTERVAL,
    ):
        super().__init__(name="command-dispatcher", daemon=True)
        self.resolver = resolver
        self.preference = preference
        self.commands = commands
        self.interval = interval

    def run(self):
        while not self.commands.closed:
            self.tick()
            time.sleep(self.interval)
        debug_log("Command dispatcher stopped")

    def tick(self) -> Optional[Command]:
        """One pass of the loop. Returns the command that was applied, if any."""
        session = self.resolver.resolve(self.preference.get())

        command = self.commands.try_recv()
        if command is None:
            return None

        if session is None:
            debug_log(f"No player for {command.kind.value}; dropped")
            return None

        try:
            apply_command(session, command)
        except Exception as e:
            debug_log(f"{command.kind.value} on '{session.identity}' failed: {e}")
            return None
        return command
