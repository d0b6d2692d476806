# core/channel.py
import queue
import threading
from typing import Any, List, Optional


class ChannelClosed(Exception):
    """Raised when sending on a channel whose reader has gone away."""


class Channel:
    """
    Closable FIFO between one producer thread and one consumer.

    ``maxsize=0`` means unbounded. Closing is one-way; senders see
    ``ChannelClosed`` afterwards while already buffered items can still be read.
    """

    def __init__(self, maxsize: int = 0):
        self._queue: "queue.Queue[Any]" = queue.Queue(maxsize=maxsize)
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        self._closed.set()

    def send(self, item: Any, timeout: Optional[float] = None) -> None:
        """
        Queue an item. With a timeout, waits for room and keeps re-checking
        for closure so a full buffer never outlives its reader.
        """
        if self.closed:
            raise ChannelClosed("channel closed")
        if timeout is None:
            self._queue.put_nowait(item)
            return

        while True:
            try:
                self._queue.put(item, timeout=timeout)
                return
            except queue.Full:
                if self.closed:
                    raise ChannelClosed("channel closed while full")

    def try_recv(self) -> Optional[Any]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> List[Any]:
        items = []
        while True:
            try:
                items.append(self._queue.get_nowait())
            except queue.Empty:
                return items

    def __len__(self) -> int:
        return self._queue.qsize()
