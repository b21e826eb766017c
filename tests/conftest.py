from __future__ import annotations

import io
import threading
from contextlib import contextmanager
from pathlib import Path

import docker
import pytest

from deber import settings
from deber.debian import Debian
from deber.engine.client import Engine
from deber.model import BuildContext
from deber.naming import Naming


class FakeSocket:
    """Stands in for the raw exec stream."""

    def __init__(self, chunks=(), on_first_recv=None, wait_for_input: float = 0):
        self.chunks = list(chunks)
        self.sent = bytearray()
        self.closed = False
        self.input_received = threading.Event()
        self.on_first_recv = on_first_recv
        self.wait_for_input = wait_for_input
        self._first = True

    def recv(self, n):
        if self._first:
            self._first = False
            if self.on_first_recv is not None:
                self.on_first_recv()
            if self.wait_for_input:
                self.input_received.wait(self.wait_for_input)
        if self.chunks:
            return self.chunks.pop(0)
        return b""

    def sendall(self, data):
        self.sent += data
        self.input_received.set()

    def close(self):
        self.closed = True


class FakeAPI:
    """
    Minimal in-memory Docker daemon speaking the docker.APIClient surface
    the engine uses. Every call is recorded in `calls`.
    """

    def __init__(self):
        self.state: dict[str, dict] = {}
        self.calls: list[tuple] = []
        self.exit_code = 0
        self.output = [b"output\n"]
        self.socket: FakeSocket | None = None
        self.sockets: list[FakeSocket] = []
        self.image_tags: set[str] = set()
        self.build_stream: list[dict] = [{"stream": "Step 1/4 : FROM debian:unstable\n"}]
        self.inspect_results: list[dict] = []
        self._exec_seq = 0

    def add(self, name, state="running", networks=("bridge",), mounts=()):
        self.state[name] = {
            "State": state,
            "Networks": set(networks),
            "Mounts": list(mounts),
        }

    def named(self, method):
        return [c for c in self.calls if c[0] == method]

    # ---- containers ----
    def containers(self, all=False):
        self.calls.append(("containers", all))
        return [
            {"Names": ["/" + name], "State": c["State"]}
            for name, c in self.state.items()
        ]

    def create_host_config(self, mounts=None):
        return {"Mounts": mounts or []}

    def create_container(self, image, name=None, user=None, host_config=None):
        self.calls.append(("create_container", image, name, user, host_config))
        if name in self.state:
            raise docker.errors.APIError(f"Conflict. The container name /{name} is already in use")
        mounts = [
            {
                "Type": m["Type"],
                "Source": m["Source"],
                "Destination": m["Target"],
                "Mode": "",
                "RW": not m.get("ReadOnly", False),
            }
            for m in (host_config or {}).get("Mounts", [])
        ]
        self.add(name, state="created", networks=("bridge",), mounts=mounts)
        return {"Id": f"id-{name}"}

    def start(self, name):
        self.calls.append(("start", name))
        self.state[name]["State"] = "running"

    def stop(self, name, timeout=None):
        self.calls.append(("stop", name, timeout))
        self.state[name]["State"] = "exited"

    def remove_container(self, name):
        self.calls.append(("remove_container", name))
        if self.state[name]["State"] == "running":
            raise docker.errors.APIError("You cannot remove a running container")
        del self.state[name]

    def inspect_container(self, name):
        self.calls.append(("inspect_container", name))
        if name not in self.state:
            raise docker.errors.NotFound(f"No such container: {name}")
        c = self.state[name]
        return {
            "State": {"Status": c["State"]},
            "NetworkSettings": {"Networks": {n: {} for n in c["Networks"]}},
            "Mounts": c["Mounts"],
        }

    # ---- network ----
    def connect_container_to_network(self, container, net_id):
        self.calls.append(("connect_container_to_network", container, net_id))
        self.state[container]["Networks"].add(net_id)

    def disconnect_container_from_network(self, container, net_id):
        self.calls.append(("disconnect_container_from_network", container, net_id))
        self.state[container]["Networks"].discard(net_id)

    # ---- exec ----
    def exec_create(self, container, cmd, **kwargs):
        self.calls.append(("exec_create", container, cmd, kwargs))
        self._exec_seq += 1
        return {"Id": f"exec-{self._exec_seq}"}

    def exec_start(self, exec_id, tty=False, socket=False):
        self.calls.append(("exec_start", exec_id, tty, socket))
        sock = self.socket or FakeSocket(self.output)
        self.sockets.append(sock)
        return sock

    def exec_inspect(self, exec_id):
        self.calls.append(("exec_inspect", exec_id))
        if self.inspect_results:
            return self.inspect_results.pop(0)
        return {"ExitCode": self.exit_code, "Running": False}

    def exec_resize(self, exec_id, height=None, width=None):
        self.calls.append(("exec_resize", exec_id, width, height))

    # ---- images ----
    def images(self, name=None, quiet=False):
        self.calls.append(("images", name))
        return ["sha256:abc"] if name in self.image_tags else []

    def build(self, fileobj=None, tag=None, rm=False, pull=False, decode=False):
        self.calls.append(("build", tag, fileobj.read().decode("utf-8")))
        self.image_tags.add(tag)
        return iter(self.build_stream)


class FakeTerminal:
    def __init__(self, fd=-1, tty=True, sizes=((80, 24),)):
        self.fd = fd
        self.tty = tty
        self.sizes = list(sizes)
        self.events: list[str] = []

    def is_tty(self):
        return self.tty

    def size(self):
        if len(self.sizes) > 1:
            return self.sizes.pop(0)
        return self.sizes[0]

    @contextmanager
    def raw(self):
        self.events.append("raw")
        try:
            yield self
        finally:
            self.events.append("restored")


@pytest.fixture
def api():
    return FakeAPI()


@pytest.fixture
def stdout():
    return io.BytesIO()


@pytest.fixture
def engine(api, stdout):
    return Engine(api, stdout=stdout)


@pytest.fixture
def home(tmp_path, monkeypatch):
    home = tmp_path / "deber"
    monkeypatch.setattr(settings, "DEBER_HOME", home)
    return home


def write_changelog(source_dir: Path, header: str = "hello (1.0-1) unstable; urgency=medium") -> Path:
    changelog = source_dir / "debian" / "changelog"
    changelog.parent.mkdir(parents=True, exist_ok=True)
    changelog.write_text(
        f"{header}\n\n  * Initial release.\n\n -- Jane Doe <jane@example.com>  Mon, 01 Jan 2024 00:00:00 +0000\n",
        encoding="utf-8",
    )
    return changelog


@pytest.fixture
def source_dir(tmp_path):
    src = tmp_path / "work" / "hello-1.0"
    write_changelog(src)
    return src


@pytest.fixture
def debian(source_dir):
    return Debian.from_changelog(source_dir / "debian" / "changelog")


@pytest.fixture
def naming(debian, home, source_dir):
    return Naming.new(debian, "unstable", home=home, source_dir=source_dir)


@pytest.fixture
def ctx(debian, naming, engine):
    return BuildContext(debian=debian, naming=naming, engine=engine)
