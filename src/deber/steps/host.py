# steps/host.py
from __future__ import annotations

import shutil

from ..errors import MISSING_TARBALL, DeberError
from ..model import BuildContext, Outcome, Step
from ..ui.console import get_console


def check(ctx: BuildContext) -> Outcome:
    """Exit the whole process with 0 if this version is already archived."""
    console = get_console()
    console.print_step("Checking archive")

    if ctx.naming.archive_package_dir.exists():
        console.print_skip("already built")
        raise SystemExit(0)

    return Outcome.done()


def tarball(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Moving tarball")

    if ctx.debian.is_native:
        return Outcome.skipped("native package")

    pattern = f"{ctx.debian.source}_{ctx.debian.upstream}.orig.tar.*"
    if any(ctx.naming.build_dir.glob(pattern)):
        return Outcome.skipped("already in build directory")

    found = sorted(ctx.naming.source_parent_dir.glob(pattern))
    if not found:
        raise DeberError(
            kind=MISSING_TARBALL,
            message="upstream tarball not found",
            details={"pattern": pattern, "dir": ctx.naming.source_parent_dir},
        )

    shutil.copy2(found[0], ctx.naming.build_dir / found[0].name)
    return Outcome.done()


def archive(ctx: BuildContext) -> Outcome:
    """Copy built artifacts from the build directory into the archive."""
    console = get_console()
    console.print_step("Archiving build")

    target = ctx.naming.archive_package_dir
    target.mkdir(parents=True, exist_ok=True)

    for path in sorted(ctx.naming.build_dir.iterdir()):
        if path.is_file():
            shutil.copy2(path, target / path.name)

    return Outcome.done()


STEP_CHECK = Step(
    name="check",
    run=check,
    description=[
        "Checks if to-be-built package is already built and in archive.",
        "If package is in archive, then deber will simply exit.",
        "To build package anyway, simply exclude this step.",
    ],
)

STEP_TARBALL = Step(
    name="tarball",
    run=tarball,
    description=[
        "Copies the upstream .orig tarball from the parent directory",
        "into the build directory. Native packages skip this step.",
    ],
)

STEP_ARCHIVE = Step(
    name="archive",
    run=archive,
    description=[
        "Copies build artifacts from the build directory",
        "into the archive directory of this package version.",
    ],
)
