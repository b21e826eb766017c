# steps/commands.py
from __future__ import annotations

from .. import settings
from ..engine.container import CONTAINER_ARCHIVE_DIR, CONTAINER_SOURCE_DIR
from ..model import BuildContext, ExecArgs, Outcome, Step
from ..ui.console import get_console

UPDATE_CMD = "dpkg-scanpackages -m . > Packages && apt-get update"
DEPS_CMD = (
    "mk-build-deps -ri -t 'apt-get -y --no-install-recommends' "
    f"{CONTAINER_SOURCE_DIR}/debian/control"
)
TEST_CMD = "debc && debi --with-depends && lintian"


def package_cmd(flags: str = settings.DPKG_BUILDPACKAGE_FLAGS) -> str:
    return f"dpkg-buildpackage {flags}".strip()


def _exec(ctx: BuildContext, message: str, args: ExecArgs) -> Outcome:
    console = get_console()
    console.print_step(message)
    console.print_drop()
    ctx.engine.exec.run(args)
    return Outcome.done()


def update(ctx: BuildContext) -> Outcome:
    return _exec(
        ctx,
        "Updating cache",
        ExecArgs(
            name=ctx.naming.container,
            cmd=UPDATE_CMD,
            workdir=CONTAINER_ARCHIVE_DIR,
            as_root=True,
            network=True,
        ),
    )


def deps(ctx: BuildContext) -> Outcome:
    return _exec(
        ctx,
        "Installing dependencies",
        ExecArgs(
            name=ctx.naming.container,
            cmd=DEPS_CMD,
            workdir="/tmp",
            as_root=True,
            network=True,
        ),
    )


def package(ctx: BuildContext) -> Outcome:
    # no network while the package is being built
    return _exec(
        ctx,
        "Packaging software",
        ExecArgs(
            name=ctx.naming.container,
            cmd=package_cmd(),
            workdir=CONTAINER_SOURCE_DIR,
            network=False,
        ),
    )


def run_tests(ctx: BuildContext) -> Outcome:
    return _exec(
        ctx,
        "Testing package",
        ExecArgs(
            name=ctx.naming.container,
            cmd=TEST_CMD,
            workdir=CONTAINER_SOURCE_DIR,
            as_root=True,
            network=True,
        ),
    )


STEP_UPDATE = Step(
    name="update",
    run=update,
    description=[
        "Indexes the local archive and runs `apt-get update` in container.",
        "Network is enabled for this step.",
    ],
)

STEP_DEPS = Step(
    name="deps",
    run=deps,
    description=[
        "Installs build dependencies in container with `mk-build-deps`.",
        "Network is enabled for this step.",
    ],
)

STEP_PACKAGE = Step(
    name="package",
    run=package,
    description=[
        "Runs `dpkg-buildpackage` in container with network disabled.",
        "Options passed to `dpkg-buildpackage` are taken from environment variable",
        "DEBER_DPKG_BUILDPACKAGE_FLAGS.",
        f"Current `dpkg-buildpackage` options: {settings.DPKG_BUILDPACKAGE_FLAGS}",
    ],
)

STEP_TEST = Step(
    name="test",
    run=run_tests,
    description=[
        "Runs `debc`, `debi` and `lintian` on built package in container.",
        "Network is enabled for this step.",
    ],
)
