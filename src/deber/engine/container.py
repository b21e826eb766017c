# engine/container.py
from __future__ import annotations

from typing import List

from docker.types import Mount as DockerMount

from ..model import CreateArgs, Mount

# Seconds the engine waits before killing the container. The container only
# runs `sleep`, so there is nothing to flush.
CONTAINER_STOP_TIMEOUT = 0

CONTAINER_STATE_CREATED = "created"
CONTAINER_STATE_RUNNING = "running"
CONTAINER_STATE_EXITED = "exited"
CONTAINER_STATE_RESTARTING = "restarting"
CONTAINER_STATE_PAUSED = "paused"
CONTAINER_STATE_DEAD = "dead"

# Where host directories land inside the container
CONTAINER_ARCHIVE_DIR = "/archive"
CONTAINER_BUILD_DIR = "/build"
CONTAINER_SOURCE_DIR = "/build/source"
CONTAINER_CACHE_DIR = "/var/cache/apt"


def _normalize(name: str) -> str:
    return name.lstrip("/")


class Containers:
    """
    Lifecycle of named containers.

    Every query lists all containers and matches names client-side; nothing is
    cached, so the answer always reflects what the daemon reports right now.
    """

    def __init__(self, api):
        self.api = api

    def _states(self) -> dict[str, str]:
        states: dict[str, str] = {}
        for c in self.api.containers(all=True):
            for name in c.get("Names") or []:
                states[_normalize(name)] = c.get("State", "")
        return states

    def exists(self, name: str) -> bool:
        return name in self._states()

    def is_running(self, name: str) -> bool:
        return self._states().get(name) == CONTAINER_STATE_RUNNING

    def is_stopped(self, name: str) -> bool:
        # absent counts as stopped
        return not self.is_running(name)

    def create(self, args: CreateArgs) -> None:
        """
        Create a container. The caller checks `exists` first and makes the
        to-be-mounted directories on the host.
        """
        mounts = [
            DockerMount(
                target=m.target,
                source=m.source,
                type=m.type,
                read_only=m.read_only,
            )
            for m in args.mounts
        ]
        host_config = self.api.create_host_config(mounts=mounts)
        self.api.create_container(
            image=args.image,
            name=args.name,
            user=args.user or None,
            host_config=host_config,
        )

    def start(self, name: str) -> None:
        self.api.start(name)

    def stop(self, name: str) -> None:
        self.api.stop(name, timeout=CONTAINER_STOP_TIMEOUT)

    def remove(self, name: str) -> None:
        self.api.remove_container(name)

    def list_by_prefix(self, prefix: str) -> List[str]:
        names: List[str] = []
        for c in self.api.containers(all=True):
            for name in c.get("Names") or []:
                name = _normalize(name)
                if name.startswith(prefix):
                    names.append(name)
        return names

    def mounts_of(self, name: str) -> List[Mount]:
        inspect = self.api.inspect_container(name)
        return [
            Mount(
                source=m.get("Source", ""),
                target=m.get("Destination", ""),
                type=m.get("Type", "bind"),
                read_only=not m.get("RW", True),
                mode=m.get("Mode", ""),
            )
            for m in inspect.get("Mounts") or []
        ]
