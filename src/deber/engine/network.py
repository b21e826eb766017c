# engine/network.py
from __future__ import annotations

NETWORK = "bridge"


class Network:
    """Attach or detach a container from the build network."""

    def __init__(self, api, network: str = NETWORK):
        self.api = api
        self.network = network

    def is_attached(self, name: str) -> bool:
        inspect = self.api.inspect_container(name)
        networks = (inspect.get("NetworkSettings") or {}).get("Networks") or {}
        return self.network in networks

    def set_attached(self, name: str, want: bool) -> None:
        """Connect or disconnect only when the current posture differs."""
        attached = self.is_attached(name)

        if want and not attached:
            self.api.connect_container_to_network(name, self.network)
        elif not want and attached:
            self.api.disconnect_container_from_network(name, self.network)
