# naming.py
from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from . import settings
from .debian import Debian

PROGRAM = "deber"
DEFAULT_DIST = "unstable"

UBUNTU_DISTS = {
    "bionic", "focal", "jammy", "noble", "oracular", "plucky", "questing",
}


def _sanitize(s: str) -> str:
    # docker names allow [a-zA-Z0-9][a-zA-Z0-9_.-]
    return re.sub(r"[^a-zA-Z0-9_.-]", "-", s)


def resolve_dist(debian: Debian, dist: str | None = None) -> str:
    if dist:
        return dist
    if debian.target_dist == "UNRELEASED":
        return DEFAULT_DIST
    return debian.target_dist


def base_image(dist: str) -> str:
    """Image the build image starts FROM."""
    if dist in UBUNTU_DISTS:
        return f"ubuntu:{dist}"
    return f"debian:{dist}"


def container_prefix(dist: str | None = None, source: str | None = None) -> str:
    parts = [PROGRAM]
    if dist:
        parts.append(_sanitize(dist))
        if source:
            parts.append(_sanitize(source))
    return "_".join(parts) + "_"


@dataclass(frozen=True)
class Naming:
    dist: str
    container: str
    image: str
    from_image: str
    source_dir: Path
    source_parent_dir: Path
    build_dir: Path
    cache_dir: Path
    archive_dir: Path
    archive_package_dir: Path

    @classmethod
    def new(
        cls,
        debian: Debian,
        dist: str,
        *,
        home: Path | None = None,
        source_dir: Path | None = None,
    ) -> Naming:
        home = Path(home or settings.DEBER_HOME)
        source_dir = Path(source_dir or Path.cwd()).resolve()
        container = container_prefix(dist, debian.source) + _sanitize(debian.version)
        archive_dir = home / "archive" / dist

        return cls(
            dist=dist,
            container=container,
            image=f"{PROGRAM}:{_sanitize(dist)}",
            from_image=base_image(dist),
            source_dir=source_dir,
            source_parent_dir=source_dir.parent,
            build_dir=home / "builddir" / container,
            cache_dir=home / "cache" / dist,
            archive_dir=archive_dir,
            archive_package_dir=archive_dir / debian.source / debian.version,
        )
