# errors.py
from __future__ import annotations

from dataclasses import dataclass, field


DAEMON_UNAVAILABLE = "daemon_unavailable"
TERMINAL_IO = "terminal_io"
IMAGE_BUILD = "image_build"
MISSING_TARBALL = "missing_tarball"
EXEC_INCOMPLETE = "exec_incomplete"


@dataclass
class DeberError(Exception):
    """
    Structured error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class CommandFailure(Exception):
    """A batch command exited with non-zero status inside the container."""
    container: str
    cmd: str
    exit_code: int

    def __str__(self) -> str:
        return f"[{self.container}] command failed (exit={self.exit_code}): {self.cmd or 'bash'}"


@dataclass
class StepFailure(Exception):
    step: str
    cause: BaseException

    def __str__(self) -> str:
        return f"step '{self.step}' failed: {self.cause}"
