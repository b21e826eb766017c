# debian.py
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

_HEADER = re.compile(r"^(?P<source>[a-z0-9][a-z0-9+.-]+) \((?P<version>[^)\s]+)\) (?P<dist>[^;]+);")


@dataclass(frozen=True)
class Debian:
    """Package metadata taken from the top entry of debian/changelog."""
    source: str
    version: str
    upstream: str
    target_dist: str
    is_native: bool

    @classmethod
    def from_changelog(cls, path: str | Path) -> Debian:
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            first = f.readline().strip()

        m = _HEADER.match(first)
        if not m:
            raise ValueError(f"Malformed changelog header in {path}: {first!r}")

        version = m.group("version")
        # epoch is not part of file names
        no_epoch = version.split(":", 1)[1] if ":" in version else version
        is_native = "-" not in no_epoch
        upstream = no_epoch if is_native else no_epoch.rsplit("-", 1)[0]

        return cls(
            source=m.group("source"),
            version=version,
            upstream=upstream,
            target_dist=m.group("dist").split()[0],
            is_native=is_native,
        )
