# steps/pipeline.py
from __future__ import annotations

from .commands import STEP_DEPS, STEP_PACKAGE, STEP_TEST, STEP_UPDATE
from .container import STEP_BUILD, STEP_CREATE, STEP_REMOVE, STEP_START, STEP_STOP
from .host import STEP_ARCHIVE, STEP_CHECK, STEP_TARBALL

PIPELINE = [
    STEP_CHECK,
    STEP_BUILD,
    STEP_CREATE,
    STEP_START,
    STEP_TARBALL,
    STEP_UPDATE,
    STEP_DEPS,
    STEP_PACKAGE,
    STEP_TEST,
    STEP_ARCHIVE,
    STEP_STOP,
    STEP_REMOVE,
]

# What `deber shell` needs before it can exec into the container
SHELL_PIPELINE = [STEP_BUILD, STEP_CREATE, STEP_START]
