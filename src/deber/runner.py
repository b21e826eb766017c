# runner.py
from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

from .model import FAILED, SKIPPED, BuildContext, Outcome, Step
from .ui.console import get_console


# ----------------------------------------------------------------------
# Step selection
# ----------------------------------------------------------------------

def select_steps(
    steps: Sequence[Step],
    *,
    include: Iterable[str] = (),
    exclude: Iterable[str] = (),
) -> List[Step]:
    """
    Narrow the pipeline down without changing its order.

    include empty -> every step; exclude always wins over include.
    """
    include = list(include)
    exclude = list(exclude)
    known = {s.name for s in steps}
    for name in include + exclude:
        if name not in known:
            raise ValueError(f"Unknown step '{name}'. Known steps: {[s.name for s in steps]}")

    selected: List[Step] = []
    for s in steps:
        if include and s.name not in include:
            continue
        if s.name in exclude:
            continue
        selected.append(s)
    return selected


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

def run_pipeline(steps: Sequence[Step], ctx: BuildContext) -> List[Tuple[str, Outcome]]:
    """
    Run steps strictly in order against one context.

    Returns (step_name, outcome) for every step that ran; halts right after
    the first failed outcome.
    """
    console = get_console()
    results: List[Tuple[str, Outcome]] = []

    for step in steps:
        console.print_debug(f"step: {step.name}")
        outcome = step.execute(ctx)
        results.append((step.name, outcome))

        if outcome.status == FAILED:
            console.print_fail(str(outcome.error))
            break
        if outcome.status == SKIPPED:
            console.print_skip(outcome.reason)
        else:
            console.print_done()

    return results


def failed(results: Sequence[Tuple[str, Outcome]]) -> bool:
    return any(not outcome.ok for _name, outcome in results)
