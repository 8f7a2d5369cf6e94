"""Process-wide interrupt handling shared by every archive sink."""

import itertools
import os
import signal
import sys
import threading
from typing import Callable, Dict, Iterable, Optional, TextIO

from .logging_config import get_logger
from .protocols import LoggerProtocol

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownCoordinator:
    """
    Cancellation token plus the registry of archives to save on interrupt.

    Create one per process and install it from the main thread. Sinks
    register a finalizer while they own an open archive. When SIGINT or
    SIGTERM arrives, the token is set, every registered archive is
    finalized, a notice is printed and the process exits with status 0.
    Stages that are still running are abandoned.
    """

    def __init__(
        self,
        exit_fn: Callable[[int], None] = os._exit,
        stream: Optional[TextIO] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        self.cancelled = threading.Event()
        self._exit_fn = exit_fn
        self._stream = stream
        self._logger = logger or get_logger("shutdown")
        self._finalizers: Dict[int, Callable[[], None]] = {}
        self._handles = itertools.count(1)
        # Reentrant: the signal handler runs on the main thread, which may
        # already hold the lock when the signal lands.
        self._lock = threading.RLock()
        self._previous_handlers: Dict[int, object] = {}

    @property
    def is_cancelled(self) -> bool:
        return self.cancelled.is_set()

    @property
    def installed(self) -> bool:
        return bool(self._previous_handlers)

    def install(self, signals: Iterable[int] = DEFAULT_SIGNALS) -> bool:
        """Install the signal handlers once. Returns False off the main thread."""
        if self.installed:
            return True
        if threading.current_thread() is not threading.main_thread():
            self._logger.warning(
                "Signal handlers can only be installed from the main thread; "
                "archives will not be finalized on interrupt"
            )
            return False
        for signum in signals:
            self._previous_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self.handle_signal)
        self._logger.debug(f"Installed interrupt handlers for {sorted(self._previous_handlers)}")
        return True

    def uninstall(self) -> None:
        """Restore the handlers that were active before install()."""
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous)  # type: ignore[arg-type]
        self._previous_handlers.clear()

    def register(self, finalizer: Callable[[], None]) -> int:
        """Register an archive finalizer; returns a handle for unregister()."""
        with self._lock:
            handle = next(self._handles)
            self._finalizers[handle] = finalizer
            return handle

    def unregister(self, handle: int) -> None:
        with self._lock:
            self._finalizers.pop(handle, None)

    def active_count(self) -> int:
        with self._lock:
            return len(self._finalizers)

    def handle_signal(self, signum, frame) -> None:  # noqa: ARG002
        self.trigger(signum)

    def trigger(self, signum: Optional[int] = None) -> None:
        """Cancel, finalize every registered archive and exit."""
        self.cancelled.set()
        self._print("\nInterrupt signal received. Closing archives...")
        self._logger.debug(f"Shutdown triggered by signal {signum}")

        with self._lock:
            finalizers = list(self._finalizers.values())
            self._finalizers.clear()

        for finalize in finalizers:
            try:
                finalize()
            except Exception as e:  # noqa: BLE001
                # Exit must not be blocked by a failed close
                self._logger.error(f"Error closing archive during shutdown: {e}", exc_info=True)

        self._print("Archives closed. Exiting...")
        self._exit_fn(0)

    def _print(self, message: str) -> None:
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(message + "\n")
        stream.flush()


_default_coordinator: Optional[ShutdownCoordinator] = None
_default_lock = threading.Lock()


def get_shutdown_coordinator() -> ShutdownCoordinator:
    """The process-wide coordinator, created on first use."""
    global _default_coordinator
    with _default_lock:
        if _default_coordinator is None:
            _default_coordinator = ShutdownCoordinator()
        return _default_coordinator
