"""Fixed-interval tick source with an explicit cancellation token."""

from __future__ import annotations

import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


class CancellationToken:
    """Signals a ticker to stop. Cancelling more than once is a no-op."""

    def __init__(self) -> None:
        self._event = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def wait(self, timeout: float) -> bool:
        """Sleep up to *timeout* seconds; True if cancelled meanwhile."""
        return self._event.wait(timeout)


class Ticker:
    """Calls *callback* every *interval* seconds on a daemon thread.

    The callback receives the token of the run that fired it, so a tick
    that lost a race with cancel() can still be told apart and dropped.
    """

    def __init__(self, interval: float, callback: Callable[[CancellationToken], None]):
        self.interval = interval
        self.callback = callback
        self._token: CancellationToken | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    def start(self) -> CancellationToken:
        """Begin ticking. Starting a running ticker returns its current token."""
        if self._token is not None and not self._token.cancelled:
            return self._token
        token = CancellationToken()
        self._token = token
        self._thread = threading.Thread(target=self._run, args=(token,), name="lifeos-ticker", daemon=True)
        self._thread.start()
        logger.debug("Ticker started (%.2fs)", self.interval)
        return token

    def cancel(self) -> None:
        """Stop ticking. Safe to call repeatedly or before start()."""
        if self._token is None or self._token.cancelled:
            return
        self._token.cancel()
        logger.debug("Ticker cancelled")

    def join(self, timeout: float | None = None) -> None:
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self, token: CancellationToken) -> None:
        while not token.wait(self.interval):
            try:
                self.callback(token)
            except Exception:
                logger.exception("Tick callback failed; stopping ticker")
                token.cancel()
