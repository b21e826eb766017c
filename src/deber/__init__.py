from .model import BuildContext, CreateArgs, ExecArgs, Mount, Outcome, Step
from .runner import run_pipeline, select_steps

__version__ = "0.1.0"

__all__ = [
    "BuildContext",
    "CreateArgs",
    "ExecArgs",
    "Mount",
    "Outcome",
    "Step",
    "run_pipeline",
    "select_steps",
]
