"""Tests for the tar-delta command line."""

import pytest
from loguru import logger
from typer.testing import CliRunner

from archive_utils import contents, read_archive
from tardelta.cli.main import app
from tardelta.schemas import MANIFEST_NAME


@pytest.fixture
def runner(delta_config):
    yield CliRunner()
    # setup_logging points loguru at the runner's captured stderr
    logger.remove()


def test_diff_apply_show(runner, scenario, tmp_path):
    delta = tmp_path / "delta.tar"
    rebuilt = tmp_path / "rebuilt.tar"

    result = runner.invoke(app, ["diff", str(scenario["old"]), str(scenario["new"]), str(delta)])
    assert result.exit_code == 0, result.output
    assert "Delta delta.tar" in result.output
    assert [e.name for e in read_archive(delta)] == [MANIFEST_NAME, "b.txt", "c.txt"]

    result = runner.invoke(app, ["apply", str(scenario["old"]), str(delta), str(rebuilt)])
    assert result.exit_code == 0, result.output
    assert "Wrote" in result.output
    assert contents(rebuilt) == {"a.txt": b"hello", "b.txt": b"WORLD", "c.txt": b"new"}

    result = runner.invoke(app, ["show", "--detail", str(delta)])
    assert result.exit_code == 0, result.output
    assert "Changed" in result.output
    assert "Added" in result.output
    assert "b.txt" in result.output
    assert "c.txt" in result.output


def test_show_no_changes(runner, scenario, tmp_path):
    delta = tmp_path / "delta.tar"
    runner.invoke(app, ["diff", str(scenario["old"]), str(scenario["old"]), str(delta)])

    result = runner.invoke(app, ["show", str(delta)])
    assert result.exit_code == 0, result.output
    assert "No changes" in result.output


def test_show_compact_summary(runner, make_archive, tmp_path):
    old = make_archive("old.tar", {"docs/a.md": "a", "docs/b.md": "b", "top.txt": "t"})
    new = make_archive("new.tar", {"docs/a.md": "A", "docs/c.md": "c", "top.txt": "t"})
    delta = tmp_path / "delta.tar"
    runner.invoke(app, ["diff", str(old), str(new), str(delta)])

    result = runner.invoke(app, ["show", str(delta)])
    output = result.output.replace("  ", " ")
    assert "docs/ +1 added ~1 changed -1 removed" in output


def test_gzip_rejected(runner, scenario, tmp_path):
    delta = tmp_path / "delta.tar"

    result = runner.invoke(
        app, ["--compression", "gzip", "diff", str(scenario["old"]), str(scenario["new"]), str(delta)]
    )

    assert result.exit_code == 1
    assert "UnsupportedCompression" in result.output
    assert not delta.exists()


def test_apply_rejects_archive_without_manifest(runner, scenario, tmp_path):
    rebuilt = tmp_path / "rebuilt.tar"

    result = runner.invoke(
        app, ["apply", str(scenario["old"]), str(scenario["new"]), str(rebuilt)]
    )

    assert result.exit_code == 1
    assert "MissingManifest [apply]" in result.output
    assert not rebuilt.exists()


def test_missing_input(runner, scenario, tmp_path):
    result = runner.invoke(
        app, ["diff", str(tmp_path / "nope.tar"), str(scenario["new"]), str(tmp_path / "d.tar")]
    )

    assert result.exit_code == 1
    assert "ReadError [index old]" in result.output


@pytest.mark.parametrize(
    "env, field",
    [
        ({"TARDELTA_CHUNK_SIZE": "0"}, "chunk_size"),
        ({"TARDELTA_COMPRESSION": "zip"}, "compression"),
    ],
)
def test_invalid_environment_config(runner, tmp_path, env, field):
    result = runner.invoke(app, ["show", str(tmp_path / "delta.tar")], env=env)

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    assert field in result.output
    assert "Traceback" not in result.output
    assert isinstance(result.exception, SystemExit)
