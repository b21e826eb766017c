# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from .debian import Debian
from .engine.client import connect
from .engine.container import CONTAINER_SOURCE_DIR
from .errors import DeberError
from .model import BuildContext, ExecArgs
from .naming import Naming, container_prefix, resolve_dist
from .runner import failed, run_pipeline, select_steps
from .steps.pipeline import PIPELINE, SHELL_PIPELINE
from .ui.console import Console, get_console, set_console

DEFAULT_CHANGELOG = "debian/changelog"


def load_debian(changelog: str) -> Debian:
    """
    Read package metadata or exit with a readable error.

    Raises:
        SystemExit: If the changelog is missing or malformed
    """
    console = get_console()
    path = Path(changelog)
    if not path.exists():
        console.print_error(
            "Changelog not found",
            f"Could not find changelog: {changelog}",
            suggestion="Run deber from the root of a Debian source tree\n  or pass --changelog path/to/debian/changelog",
        )
        sys.exit(1)
    try:
        return Debian.from_changelog(path)
    except ValueError as e:
        console.print_error("Invalid changelog", str(e))
        sys.exit(1)


def build_context(ctx: click.Context, changelog: str, dist: str | None) -> BuildContext:
    debian = load_debian(changelog)
    dist = resolve_dist(debian, dist)
    source_dir = Path(changelog).resolve().parent.parent
    naming = Naming.new(debian, dist, source_dir=source_dir)
    engine = ctx.obj.get("engine_factory", connect)()
    return BuildContext(debian=debian, naming=naming, engine=engine)


def _handle_error(e: Exception) -> None:
    console = get_console()
    if isinstance(e, DeberError):
        console.print_error(e.kind, e.message, details=e.details)
    else:
        console.print_exception(e)
    sys.exit(1)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """deber: build Debian packages in disposable Docker containers."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@click.option("--dist", default=None, help="Target distribution (defaults to changelog's)")
@click.option("--changelog", default=DEFAULT_CHANGELOG, show_default=True, help="Path to debian/changelog")
@click.option("--include", "-i", multiple=True, help="Run only these steps (repeatable)")
@click.option("--exclude", "-e", multiple=True, help="Skip these steps (repeatable)")
@click.pass_context
def build(ctx, dist, changelog, include, exclude):
    """Build the package in its container."""
    console = get_console()

    try:
        steps = select_steps(PIPELINE, include=include, exclude=exclude)
    except ValueError as e:
        console.print_error("Invalid step selection", str(e), suggestion="List steps with:\n  deber steps")
        sys.exit(2)

    try:
        build_ctx = build_context(ctx, changelog, dist)
        console.print_build_started(
            package=build_ctx.debian.source,
            version=build_ctx.debian.version,
            dist=build_ctx.naming.dist,
            container=build_ctx.naming.container,
        )

        results = run_pipeline(steps, build_ctx)
        console.print_results(results)

        if failed(results):
            sys.exit(1)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        _handle_error(e)


@cli.command()
@click.option("--dist", default=None, help="Target distribution (defaults to changelog's)")
@click.option("--changelog", default=DEFAULT_CHANGELOG, show_default=True, help="Path to debian/changelog")
@click.option("--network/--no-network", default=True, show_default=True, help="Attach container to network")
@click.pass_context
def shell(ctx, dist, changelog, network):
    """Open an interactive root shell in the package's container."""
    console = get_console()

    try:
        build_ctx = build_context(ctx, changelog, dist)
        results = run_pipeline(SHELL_PIPELINE, build_ctx)
        if failed(results):
            sys.exit(1)

        build_ctx.engine.exec.run(
            ExecArgs(
                name=build_ctx.naming.container,
                workdir=CONTAINER_SOURCE_DIR,
                as_root=True,
                interactive=True,
                network=network,
            )
        )
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        _handle_error(e)


@cli.command()
def steps():
    """List pipeline steps with their descriptions."""
    get_console().print_steps(PIPELINE)


@cli.command()
@click.option("--all", "all_", is_flag=True, default=False, help="Remove every deber container, not just this package's")
@click.option("--dist", default=None, help="Target distribution (defaults to changelog's)")
@click.option("--changelog", default=DEFAULT_CHANGELOG, show_default=True, help="Path to debian/changelog")
@click.pass_context
def clean(ctx, all_, dist, changelog):
    """Stop and remove containers left over from earlier builds."""
    console = get_console()

    try:
        if all_:
            prefix = container_prefix()
        else:
            debian = load_debian(changelog)
            prefix = container_prefix(resolve_dist(debian, dist), debian.source)

        engine = ctx.obj.get("engine_factory", connect)()
        names = engine.containers.list_by_prefix(prefix)
        if not names:
            console.print_info(f"No containers matching {prefix}*")
            return

        for name in names:
            if engine.containers.is_running(name):
                engine.containers.stop(name)
            engine.containers.remove(name)
            console.print_info(f"Removed {name}")
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        _handle_error(e)


if __name__ == "__main__":
    cli()
