# steps/container.py
from __future__ import annotations

import os

from ..engine.container import (
    CONTAINER_ARCHIVE_DIR,
    CONTAINER_BUILD_DIR,
    CONTAINER_CACHE_DIR,
    CONTAINER_SOURCE_DIR,
    CONTAINER_STOP_TIMEOUT,
)
from ..model import BuildContext, CreateArgs, Mount, Outcome, Step
from ..ui.console import get_console

DOCKERFILE_TEMPLATE = """\
FROM {from_image}
RUN apt-get update && \\
    apt-get install -y --no-install-recommends \\
        build-essential devscripts debhelper dpkg-dev equivs lintian fakeroot && \\
    rm -rf /var/lib/apt/lists/*
RUN echo "deb [trusted=yes] file://{archive} ./" > /etc/apt/sources.list.d/deber.list
CMD ["sleep", "infinity"]
"""


def dockerfile(from_image: str) -> str:
    return DOCKERFILE_TEMPLATE.format(from_image=from_image, archive=CONTAINER_ARCHIVE_DIR)


def build(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Building image")

    if ctx.engine.images.exists(ctx.naming.image):
        return Outcome.skipped("image exists")

    console.print_drop()
    ctx.engine.images.build(
        ctx.naming.image,
        dockerfile(ctx.naming.from_image),
        on_line=lambda line: console.print_info(line.rstrip("\n")),
    )
    return Outcome.done()


def mounts(ctx: BuildContext) -> list[Mount]:
    n = ctx.naming
    return [
        Mount(source=str(n.archive_dir), target=CONTAINER_ARCHIVE_DIR),
        Mount(source=str(n.build_dir), target=CONTAINER_BUILD_DIR),
        Mount(source=str(n.source_dir), target=CONTAINER_SOURCE_DIR),
        Mount(source=str(n.cache_dir), target=CONTAINER_CACHE_DIR),
    ]


def _bind_map(mount_list) -> dict[str, str]:
    return {m.target: os.path.realpath(m.source) for m in mount_list}


def create(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Creating container")

    name = ctx.naming.container
    wanted = mounts(ctx)
    containers = ctx.engine.containers

    if containers.exists(name):
        if _bind_map(containers.mounts_of(name)) == _bind_map(wanted):
            return Outcome.skipped("container exists")

        # same name, built from another checkout
        console.print_drop()
        console.print_info(f"Mounts of {name} changed, recreating")
        if containers.is_running(name):
            containers.stop(name)
        containers.remove(name)

    for d in (ctx.naming.archive_dir, ctx.naming.build_dir, ctx.naming.cache_dir):
        d.mkdir(parents=True, exist_ok=True)

    containers.create(
        CreateArgs(
            name=name,
            image=ctx.naming.image,
            mounts=wanted,
            user=f"{os.getuid()}:{os.getgid()}",
        )
    )
    return Outcome.done()


def start(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Starting container")

    name = ctx.naming.container
    if ctx.engine.containers.is_running(name):
        return Outcome.skipped("container running")

    ctx.engine.containers.start(name)
    return Outcome.done()


def stop(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Stopping container")

    name = ctx.naming.container
    if ctx.engine.containers.is_stopped(name):
        return Outcome.skipped("container stopped")

    ctx.engine.containers.stop(name)
    return Outcome.done()


def remove(ctx: BuildContext) -> Outcome:
    console = get_console()
    console.print_step("Removing container")

    name = ctx.naming.container
    if not ctx.engine.containers.exists(name):
        return Outcome.skipped("container absent")

    ctx.engine.containers.remove(name)
    return Outcome.done()


STEP_BUILD = Step(
    name="build",
    run=build,
    description=[
        "Builds the image the container is created from,",
        "unless an image for the distribution already exists.",
    ],
)

STEP_CREATE = Step(
    name="create",
    run=create,
    description=[
        "Creates host directories and the container.",
        "Archive, build, source and apt cache directories are mounted.",
        "An existing container with other mounts is recreated.",
    ],
)

STEP_START = Step(
    name="start",
    run=start,
    description=["Starts the container, unless it is already running."],
)

STEP_STOP = Step(
    name="stop",
    run=stop,
    description=[
        "Stops container.",
        f"With {CONTAINER_STOP_TIMEOUT}s timeout.",
    ],
)

STEP_REMOVE = Step(
    name="remove",
    run=remove,
    description=["Removes the container, unless it is already gone."],
)
