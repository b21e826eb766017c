# engine/terminal.py
from __future__ import annotations

import io
import os
import queue
import select
import signal
import sys
import termios
import threading
import tty
from contextlib import contextmanager
from typing import Callable, Optional, Tuple

from ..errors import TERMINAL_IO, DeberError

Size = Tuple[int, int]  # (width, height)


def _in_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


class Terminal:
    """The host terminal behind a file descriptor (normally stdin)."""

    def __init__(self, fd: int):
        self.fd = fd

    @classmethod
    def stdin(cls) -> Terminal:
        try:
            fd = sys.stdin.fileno()
        except (AttributeError, ValueError, io.UnsupportedOperation):
            fd = -1
        return cls(fd)

    def is_tty(self) -> bool:
        return self.fd >= 0 and os.isatty(self.fd)

    def size(self) -> Size:
        try:
            size = os.get_terminal_size(self.fd)
        except OSError as e:
            raise DeberError(
                kind=TERMINAL_IO,
                message="could not query terminal size",
                details={"fd": self.fd, "error": e},
            ) from e
        return size.columns, size.lines

    @contextmanager
    def raw(self):
        """
        Put the terminal into raw mode for the duration of the block.

        The previous mode is restored on every exit path. SIGTERM and SIGHUP
        are turned into SystemExit while raw, so they unwind through here too.
        """
        try:
            previous_mode = termios.tcgetattr(self.fd)
            tty.setraw(self.fd)
        except termios.error as e:
            raise DeberError(
                kind=TERMINAL_IO,
                message="could not switch terminal to raw mode",
                details={"fd": self.fd, "error": e},
            ) from e

        handlers = {}
        if _in_main_thread():
            for sig in (signal.SIGTERM, signal.SIGHUP):
                handlers[sig] = signal.signal(sig, _exit_on_signal)

        try:
            yield self
        finally:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, previous_mode)
            for sig, handler in handlers.items():
                signal.signal(sig, handler)


def _exit_on_signal(signum, frame) -> None:
    raise SystemExit(128 + signum)


class ResizeWatcher:
    """
    Re-applies the host terminal size remotely on every SIGWINCH.

    Scoped to one exec session: notifications are queued by the signal handler
    and handled by a worker thread; stop() handles whatever was queued before
    it, joins the worker and puts the previous handler back.
    """

    def __init__(self, on_resize: Callable[[Size], None], get_size: Callable[[], Size]):
        self.on_resize = on_resize
        self.get_size = get_size
        self.error: Optional[BaseException] = None
        self._queue: queue.SimpleQueue = queue.SimpleQueue()
        self._thread: Optional[threading.Thread] = None
        self._previous_handler = None

    def notify(self, signum=None, frame=None) -> None:
        self._queue.put(True)

    def start(self) -> None:
        if _in_main_thread():
            self._previous_handler = signal.signal(signal.SIGWINCH, self.notify)
        self._thread = threading.Thread(target=self._run, name="deber-resize", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while self._queue.get():
            try:
                self.on_resize(self.get_size())
            except Exception as e:
                if self.error is None:
                    self.error = e

    def stop(self) -> None:
        self._queue.put(False)
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._previous_handler is not None:
            signal.signal(signal.SIGWINCH, self._previous_handler)
            self._previous_handler = None

    def __enter__(self) -> ResizeWatcher:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
        if exc_type is None and self.error is not None:
            raise self.error


class StdinForwarder:
    """Copies host input into the exec stream until stopped or EOF."""

    def __init__(self, fd: int, write: Callable[[bytes], object], poll_interval: float = 0.1):
        self.fd = fd
        self.write = write
        self.poll_interval = poll_interval
        self._stopped = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._run, name="deber-stdin", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.is_set():
            ready, _, _ = select.select([self.fd], [], [], self.poll_interval)
            if not ready:
                continue
            data = os.read(self.fd, 4096)
            if not data:
                return
            try:
                self.write(data)
            except OSError:
                # remote end closed, the session is over
                return

    def stop(self) -> None:
        self._stopped.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None

    def __enter__(self) -> StdinForwarder:
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
