# core/artwork.py
import os
import time
import urllib.parse
from enum import Enum
from typing import Any, Callable, Optional

import requests

from .debug import debug_log

RETRY_INTERVAL = 3.0  # seconds between attempts for a failing reference
FETCH_TIMEOUT = 4  # seconds
REMOTE_SCHEMES = ("http", "https")

_HTTP = requests.Session()


class ArtFetchError(Exception):
    pass


class ArtOutcome(Enum):
    NOT_ATTEMPTED = "not_attempted"
    LOADED = "loaded"
    FAILED = "failed"
    ABSENT = "absent"  # nothing to fetch


def is_remote(reference: str) -> bool:
    return urllib.parse.urlsplit(reference).scheme.lower() in REMOTE_SCHEMES


def local_path(reference: str) -> str:
    """``file://`` locators are percent-decoded; anything else is a plain path."""
    if reference.startswith("file://"):
        reference = reference[len("file://"):]
        # file://localhost/... is the same file
        if reference.startswith("localhost/"):
            reference = reference[len("localhost"):]
        return urllib.parse.unquote(reference)
    return reference


def fetch_art_bytes(reference: str, http=None, timeout: float = FETCH_TIMEOUT) -> bytes:
    if is_remote(reference):
        try:
            r = (http or _HTTP).get(reference, timeout=timeout)
            r.raise_for_status()
            return r.content
        except requests.RequestException as e:
            raise ArtFetchError(f"download of {reference} failed: {e}") from e

    path = local_path(reference)
    if not os.path.exists(path):
        raise ArtFetchError(f"art file does not exist: {path}")
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise ArtFetchError(f"reading {path} failed: {e}") from e


class ArtScheduler:
    """
    Fetch state for the art reference currently on screen.

    ``load`` starts over for a new reference and makes one attempt right away.
    ``retry`` is called on a slow periodic tick and only tries again when the
    last attempt failed and ``retry_interval`` has passed since it.
    """

    def __init__(
        self,
        decode: Callable[[bytes], Any],
        show: Callable[[Any], None],
        fetch: Callable[[str], bytes] = fetch_art_bytes,
        clock: Callable[[], float] = time.monotonic,
        retry_interval: float = RETRY_INTERVAL,
    ):
        self._decode = decode
        self._show = show
        self._fetch = fetch
        self._clock = clock
        self.retry_interval = retry_interval

        self.reference: Optional[str] = None
        self.outcome = ArtOutcome.NOT_ATTEMPTED
        self.attempted_at: Optional[float] = None
        self.attempts = 0

    def load(self, reference: Optional[str]) -> ArtOutcome:
        self.reference = reference
        self.outcome = ArtOutcome.NOT_ATTEMPTED
        self.attempted_at = None
        return self._attempt()

    def retry_due(self, now: Optional[float] = None) -> bool:
        if not self.reference or self.outcome in (ArtOutcome.LOADED, ArtOutcome.ABSENT):
            return False
        if self.attempted_at is None:
            return True
        now = self._clock() if now is None else now
        return now - self.attempted_at >= self.retry_interval

    def retry(self) -> bool:
        if not self.retry_due():
            return False
        debug_log(f"Retrying art {self.reference}")
        self._attempt()
        return True

    def _attempt(self) -> ArtOutcome:
        if not self.reference:
            self._show(None)
            self.outcome = ArtOutcome.ABSENT
            return self.outcome

        self.attempted_at = self._clock()
        self.attempts += 1
        try:
            image = self._decode(self._fetch(self.reference))
            if image is None:
                raise ArtFetchError(f"could not decode art from {self.reference}")
        except Exception as e:
            debug_log(f"Art load failed: {e}")
            self._show(None)
            self.outcome = ArtOutcome.FAILED
            return self.outcome

        self._show(image)
        self.outcome = ArtOutcome.LOADED
        debug_log(f"Loaded art from {self.reference}")
        return self.outcome
