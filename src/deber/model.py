# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Optional

from .errors import StepFailure

if TYPE_CHECKING:
    from .debian import Debian
    from .engine.client import Engine
    from .naming import Naming


DONE = "done"
SKIPPED = "skipped"
FAILED = "failed"


@dataclass(frozen=True)
class Mount:
    """A host path bound into the container at creation time."""
    source: str
    target: str
    type: str = "bind"
    read_only: bool = False
    mode: str = ""


@dataclass(frozen=True)
class CreateArgs:
    name: str
    image: str
    mounts: list[Mount] = field(default_factory=list)
    user: str = ""


@dataclass(frozen=True)
class ExecArgs:
    """
    One command execution inside a running container.

    An empty `cmd` runs a bare shell. `network` is the posture the container
    must have while the command runs; it is applied before every exec.
    """
    name: str
    cmd: str = ""
    workdir: str = ""
    as_root: bool = False
    interactive: bool = False
    skip: bool = False
    network: bool = False


@dataclass(frozen=True)
class Outcome:
    status: str
    reason: Optional[str] = None
    error: Optional[BaseException] = None

    @classmethod
    def done(cls) -> Outcome:
        return cls(DONE)

    @classmethod
    def skipped(cls, reason: str | None = None) -> Outcome:
        return cls(SKIPPED, reason=reason)

    @classmethod
    def failed(cls, error: BaseException) -> Outcome:
        return cls(FAILED, error=error)

    @property
    def ok(self) -> bool:
        # skipped and done both let the pipeline continue
        return self.status != FAILED


@dataclass
class BuildContext:
    """Everything a step needs: package metadata, names/paths, engine handle."""
    debian: Debian
    naming: Naming
    engine: Engine


@dataclass(frozen=True)
class Step:
    """A named pipeline unit. `run` returns exactly one Outcome."""
    name: str
    description: list[str]
    run: Callable[[BuildContext], Outcome]

    def execute(self, ctx: BuildContext) -> Outcome:
        # SystemExit passes through: it ends the whole process, not the step
        try:
            return self.run(ctx)
        except Exception as e:
            return Outcome.failed(StepFailure(step=self.name, cause=e))
