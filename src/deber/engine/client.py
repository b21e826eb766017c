# engine/client.py
from __future__ import annotations

from typing import Optional

import docker
from docker.utils import version_lt

from ..errors import DAEMON_UNAVAILABLE, DeberError
from .container import Containers
from .exec import Exec
from .image import Images
from .network import Network
from .terminal import Terminal

# Minimum supported Docker Engine API version
API_VERSION = "1.30"


class Engine:
    """
    One daemon connection shared by every component.

    Built around an injected low-level API object, so tests can hand in a fake.
    """

    def __init__(self, api, terminal: Optional[Terminal] = None, stdout=None):
        self.api = api
        self.containers = Containers(api)
        self.network = Network(api)
        self.images = Images(api)
        self.exec = Exec(api, self.network, terminal=terminal, stdout=stdout)


def connect(base_url: Optional[str] = None) -> Engine:
    """
    Connect to the Docker daemon and check its API version.

    Raises:
        DeberError: daemon_unavailable if the daemon cannot be reached or
            speaks an API older than API_VERSION
    """
    try:
        if base_url:
            api = docker.APIClient(base_url=base_url, version="auto")
        else:
            api = docker.from_env(version="auto").api
        version = api.api_version
    except docker.errors.DockerException as e:
        raise DeberError(
            kind=DAEMON_UNAVAILABLE,
            message="could not connect to Docker daemon",
            details={"error": e, "hint": "Install Docker and ensure the daemon is running."},
        ) from e

    if version_lt(version, API_VERSION):
        raise DeberError(
            kind=DAEMON_UNAVAILABLE,
            message=f"Docker Engine API {version} is too old",
            details={"minimum": API_VERSION},
        )

    return Engine(api)
