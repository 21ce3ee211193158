import logging
import subprocess

import pytest

from reprepro_backend.errors import ArchiveNotFoundError, CommandError, ToolError
from reprepro_backend.models import PackageRecord
from reprepro_backend.reprepro import parse_list_line


def test_parse_list_line():
    assert parse_list_line("unstable|main|amd64: foo 1.2-3") == ("amd64", "foo", "1.2-3")
    assert parse_list_line("unstable|main|source: foo 1:1.2-3") == ("source", "foo", "1:1.2-3")


@pytest.mark.parametrize("line", ["unstable|main|amd64:", "unstable|main: foo 1.0", "garbage", ""])
def test_parse_list_line_rejects(line):
    assert parse_list_line(line) is None


def test_command_flags(reprepro, base):
    assert reprepro.command("alpha", "list", "trixie") == [
        "reprepro",
        "-b",
        str(base / "alpha"),
        "--gnupghome",
        str(base / ".gnupg"),
        "list",
        "trixie",
    ]


def test_list_packages_orders_by_codename(reprepro, tools):
    tools.listings[("alpha", "trixie")] = "trixie|main|source: foo 2.0-1\n"
    tools.listings[("alpha", "bookworm")] = (
        "bookworm|main|amd64: foo 1.0-1\nbookworm|main|source: foo 1.0-1\nbookworm|main|i386: bar 3\n"
    )
    index = reprepro.list_packages("alpha")
    assert index["foo"] == [
        PackageRecord(codename="bookworm", architecture="amd64", package="foo", version="1.0-1"),
        PackageRecord(codename="bookworm", architecture="source", package="foo", version="1.0-1"),
        PackageRecord(codename="trixie", architecture="source", package="foo", version="2.0-1"),
    ]
    assert [r.version for r in index["bar"]] == ["3"]
    assert [argv[-1] for argv in tools.calls_to("reprepro")] == ["bookworm", "bookworm-backports", "trixie"]


def test_list_packages_skips_bad_lines(reprepro, tools, caplog):
    tools.listings[("alpha", "bookworm")] = "bookworm|main|amd64: foo 1.0\nthis is not a listing\n"
    with caplog.at_level(logging.WARNING):
        index = reprepro.list_packages("alpha")
    assert list(index) == ["foo"]
    assert "this is not a listing" in caplog.text


def test_run_failure_is_fatal(reprepro, tools):
    tools.returncodes["reprepro"] = 255
    with pytest.raises(CommandError, match="status 255"):
        reprepro.run("alpha", "list", "bookworm")


def test_unknown_archive_runs_nothing(reprepro, tools):
    with pytest.raises(ArchiveNotFoundError, match="unknown archive 'delta'"):
        reprepro.list_packages("delta")
    with pytest.raises(ArchiveNotFoundError):
        reprepro.passthrough("delta", "ls", "foo")
    assert tools.calls == []


def test_passthrough_returns_status(reprepro, tools):
    tools.returncodes["reprepro"] = 3
    assert reprepro.passthrough("beta", "remove", "trixie", "foo") == 3
    assert tools.calls[-1][-3:] == ["remove", "trixie", "foo"]


def test_build_needing_drops_blank_lines(reprepro, tools):
    tools.build_needing[("alpha", "trixie", "amd64")] = "foo 1.0 pool/main/f/foo/foo_1.0.dsc\n\n"
    assert reprepro.build_needing("alpha", "trixie", "amd64") == ["foo 1.0 pool/main/f/foo/foo_1.0.dsc"]


def test_missing_reprepro_binary(reprepro, monkeypatch):
    def not_found(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(subprocess, "run", not_found)
    with pytest.raises(ToolError, match="cannot run reprepro: No such file or directory"):
        reprepro.run("alpha", "list", "bookworm")
    with pytest.raises(ToolError):
        reprepro.passthrough("alpha", "ls", "foo")
