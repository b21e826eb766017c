from __future__ import annotations

from click.testing import CliRunner

from deber.cli import cli
from deber.errors import DAEMON_UNAVAILABLE, DeberError
from deber.steps.pipeline import PIPELINE


def invoke(engine, *args):
    runner = CliRunner()
    return runner.invoke(cli, list(args), obj={"engine_factory": lambda: engine})


def test_steps_lists_pipeline():
    result = CliRunner().invoke(cli, ["steps"])

    assert result.exit_code == 0
    for step in PIPELINE:
        assert step.name in result.output
    assert "dpkg-buildpackage" in result.output


def test_build_unknown_step(engine, source_dir):
    result = invoke(engine, "build", "--changelog", str(source_dir / "debian" / "changelog"), "-i", "bogus")
    assert result.exit_code == 2
    assert "Unknown step" in result.output


def test_build_missing_changelog(engine, tmp_path):
    result = invoke(engine, "build", "--changelog", str(tmp_path / "nope"))
    assert result.exit_code == 1
    assert "Changelog not found" in result.output


def test_full_build(engine, api, source_dir, home):
    (source_dir.parent / "hello_1.0.orig.tar.gz").write_bytes(b"tarball")

    result = invoke(engine, "build", "--changelog", str(source_dir / "debian" / "changelog"))

    assert result.exit_code == 0, result.output
    assert "RESULTS" in result.output
    assert len(api.named("exec_create")) == 4
    # built, used, cleaned up
    assert api.state == {}
    archived = home / "archive" / "unstable" / "hello" / "1.0-1" / "hello_1.0.orig.tar.gz"
    assert archived.read_bytes() == b"tarball"


def test_build_stops_at_first_failure(engine, api, source_dir):
    (source_dir.parent / "hello_1.0.orig.tar.gz").write_bytes(b"tarball")
    api.exit_code = 100

    result = invoke(engine, "build", "--changelog", str(source_dir / "debian" / "changelog"))

    assert result.exit_code == 1
    assert "update: FAILED" in result.output
    assert len(api.named("exec_create")) == 1
    assert api.named("stop") == []


def test_build_already_archived_exits_zero(engine, api, source_dir, home):
    (home / "archive" / "unstable" / "hello" / "1.0-1").mkdir(parents=True)

    result = invoke(engine, "build", "--changelog", str(source_dir / "debian" / "changelog"))

    assert result.exit_code == 0
    assert "already built" in result.output
    assert api.calls == []


def test_build_selected_steps(engine, api, source_dir):
    api.add("deber_unstable_hello_1.0-1", state="running")

    result = invoke(
        engine, "build", "--changelog", str(source_dir / "debian" / "changelog"), "-i", "stop", "-i", "remove",
    )

    assert result.exit_code == 0, result.output
    assert api.state == {}


def test_clean_all(engine, api):
    api.add("deber_unstable_hello_1.0-1", state="running")
    api.add("deber_bookworm_other_2.0-1", state="exited")
    api.add("postgres", state="running")

    result = invoke(engine, "clean", "--all")

    assert result.exit_code == 0, result.output
    assert list(api.state) == ["postgres"]
    assert api.named("stop") == [("stop", "deber_unstable_hello_1.0-1", 0)]


def test_clean_this_package_only(engine, api, source_dir):
    api.add("deber_unstable_hello_1.0-1", state="exited")
    api.add("deber_unstable_hello_0.9-1", state="exited")
    api.add("deber_unstable_other_1.0-1", state="exited")

    result = invoke(engine, "clean", "--changelog", str(source_dir / "debian" / "changelog"))

    assert result.exit_code == 0, result.output
    assert list(api.state) == ["deber_unstable_other_1.0-1"]


def test_shell_brings_container_up_and_execs(engine, api, source_dir):
    api.image_tags.add("deber:unstable")

    result = invoke(engine, "shell", "--changelog", str(source_dir / "debian" / "changelog"), "--no-network")

    assert result.exit_code == 0, result.output
    assert api.state["deber_unstable_hello_1.0-1"]["State"] == "running"
    (_, name, cmd, kwargs), = api.named("exec_create")
    assert name == "deber_unstable_hello_1.0-1"
    assert cmd == ["bash"]
    assert kwargs["user"] == "root"
    assert kwargs["stdin"] is True
    assert api.named("disconnect_container_from_network")


def test_daemon_error_printed_with_details(source_dir, home):
    def unreachable():
        raise DeberError(
            kind=DAEMON_UNAVAILABLE,
            message="daemon API version 1.24 is too old",
            details={"minimum": "1.30"},
        )

    result = CliRunner().invoke(
        cli,
        ["build", "--changelog", str(source_dir / "debian" / "changelog")],
        obj={"engine_factory": unreachable},
    )

    assert result.exit_code == 1
    assert "deber: daemon_unavailable" in result.output
    assert "minimum: 1.30" in result.output
    assert "Traceback" not in result.output
