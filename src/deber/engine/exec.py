# engine/exec.py
from __future__ import annotations

import sys
import time
from typing import BinaryIO, Optional

from ..errors import EXEC_INCOMPLETE, CommandFailure, DeberError
from ..model import ExecArgs
from .network import Network
from .terminal import ResizeWatcher, Size, StdinForwarder, Terminal

SHELL = "bash"
CHUNK_SIZE = 4096
INSPECT_ATTEMPTS = 20
INSPECT_INTERVAL = 0.05


def _raw(sock):
    # exec_start(socket=True) hands back a SocketIO wrapper on unix sockets
    return getattr(sock, "_sock", sock)


class Exec:
    """
    Runs commands in a running container.

    A TTY is always allocated, so stdout and stderr arrive merged on one
    stream. Batch runs report failure through the exit code only; interactive
    runs forward the host terminal and never inspect the exit code.
    """

    def __init__(
        self,
        api,
        network: Network,
        terminal: Optional[Terminal] = None,
        stdout: Optional[BinaryIO] = None,
    ):
        self.api = api
        self.network = network
        self.terminal = terminal
        self.stdout = stdout

    def run(self, args: ExecArgs) -> None:
        if args.skip:
            return

        cmd = [SHELL]
        if args.cmd:
            cmd.extend(["-c", args.cmd])

        self.network.set_attached(args.name, args.network)

        response = self.api.exec_create(
            args.name,
            cmd,
            stdout=True,
            stderr=True,
            stdin=args.interactive,
            tty=True,
            user="root" if args.as_root else "",
            workdir=args.workdir or None,
        )
        exec_id = response["Id"]
        sock = self.api.exec_start(exec_id, tty=True, socket=True)
        raw = _raw(sock)

        try:
            if args.interactive:
                self._interactive(exec_id, sock)
            else:
                self._copy_output(sock)
        finally:
            sock.close()
            if raw is not sock:
                raw.close()

        if args.interactive:
            return

        exit_code = self._exit_code(exec_id)
        if exit_code is None:
            raise DeberError(
                kind=EXEC_INCOMPLETE,
                message="command output ended but the daemon reported no exit code",
                details={"container": args.name, "cmd": args.cmd or SHELL, "exec": exec_id},
            )
        if exit_code != 0:
            raise CommandFailure(container=args.name, cmd=args.cmd, exit_code=exit_code)

    def _exit_code(self, exec_id: str) -> Optional[int]:
        # the stream can hit EOF a moment before the daemon marks the exec finished
        for attempt in range(INSPECT_ATTEMPTS):
            inspect = self.api.exec_inspect(exec_id)
            if not inspect.get("Running") and inspect.get("ExitCode") is not None:
                return inspect["ExitCode"]
            if attempt + 1 < INSPECT_ATTEMPTS:
                time.sleep(INSPECT_INTERVAL)
        return None

    def resize(self, exec_id: str, size: Size) -> None:
        width, height = size
        self.api.exec_resize(exec_id, height=height, width=width)

    def _out(self) -> BinaryIO:
        if self.stdout is not None:
            return self.stdout
        return sys.stdout.buffer

    def _copy_output(self, sock) -> None:
        raw = _raw(sock)
        out = self._out()
        while True:
            data = raw.recv(CHUNK_SIZE)
            if not data:
                break
            out.write(data)
            out.flush()

    def _interactive(self, exec_id: str, sock) -> None:
        terminal = self.terminal or Terminal.stdin()
        if not terminal.is_tty():
            self._copy_output(sock)
            return

        with terminal.raw():
            self.resize(exec_id, terminal.size())

            watcher = ResizeWatcher(lambda size: self.resize(exec_id, size), terminal.size)
            forwarder = StdinForwarder(terminal.fd, _raw(sock).sendall)
            with watcher, forwarder:
                self._copy_output(sock)
