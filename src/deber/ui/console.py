"""Console output formatting utilities for deber."""

from __future__ import annotations

import sys
import traceback
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_build_started(self, package: str, version: str, dist: str, container: str) -> None:
        """Print build start information."""
        print("\nBUILD STARTED")
        print(f"Package: {package}")
        print(f"Version: {version}")
        print(f"Distribution: {dist}")
        print(f"Container: {container}")
        print()

    def print_step(self, message: str) -> None:
        """Print step start message, status follows on the same line."""
        print(f"==> {message}...", end=" ", flush=True)

    def print_drop(self) -> None:
        """Break the step line before streamed command output."""
        print(flush=True)

    def print_done(self) -> None:
        print("done")

    def print_skip(self, reason: Optional[str] = None) -> None:
        print(f"skip ({reason})" if reason else "skip")

    def print_fail(self, reason: str) -> None:
        """Print failure message; first line only unless debugging."""
        print("failed")
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)
        else:
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            print(f"Error: {error_line}", file=sys.stderr)

    def print_steps(self, steps) -> None:
        """Print pipeline steps with their descriptions."""
        for step in steps:
            print(f"{step.name}")
            for line in step.description:
                print(f"  {line}")

    def print_results(self, results: list) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, outcome in results:
            print(f"  {name}: {outcome.status.upper()}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[dict] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print an error to stderr as ``deber: <title>`` followed by the message.

        Args:
            title: Error kind or short summary
            message: What went wrong
            details: Context rendered one ``key: value`` per line
            suggestion: What the operator can try next
        """
        print(f"deber: {title}", file=sys.stderr)
        print(f"  {message}", file=sys.stderr)
        for key, value in (details or {}).items():
            print(f"    {key}: {value}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print an unexpected exception; the traceback only with --debug."""
        if self.debug:
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"deber: {type(exc).__name__}: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        print(message, flush=True)

    def print_debug(self, message: str) -> None:
        if self.debug:
            print(f"deber[debug]: {message}", file=sys.stderr)


_console = Console()


def get_console() -> Console:
    return _console


def set_console(console: Console) -> None:
    """Replace the process-wide console; the CLI does this once per invocation."""
    global _console
    _console = console
