from __future__ import annotations
import os
from pathlib import Path

# Extra flags appended to dpkg-buildpackage, read once at process start.
DPKG_BUILDPACKAGE_FLAGS = os.environ.get("DEBER_DPKG_BUILDPACKAGE_FLAGS", "-tc")
DEBER_HOME = Path(os.environ.get("DEBER_HOME", Path.home() / "deber")).expanduser()
