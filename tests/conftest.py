import re
import subprocess
from pathlib import Path

import pytest

from reprepro_backend.config import Config
from reprepro_backend.reprepro import Reprepro


def _version_key(version: str) -> list[int]:
    return [int(part) for part in re.split(r"\D+", version) if part]


class FakeTools:
    """Stands in for reprepro, rmadison and dpkg by answering subprocess.run calls."""

    def __init__(self):
        self.calls: list[list[str]] = []
        # (archive, codename) -> reprepro list output
        self.listings: dict[tuple[str, str], str] = {}
        # (archive, codename, arch) -> reprepro build-needing output
        self.build_needing: dict[tuple[str, str, str], str] = {}
        # codename -> rmadison output
        self.madison: dict[str, str] = {}
        self.returncodes: dict[str, int] = {}

    def calls_to(self, tool: str) -> list[list[str]]:
        return [argv for argv in self.calls if argv[0] == tool]

    def run(self, argv, stdout=None, text=False, check=False, **kwargs):
        argv = list(argv)
        self.calls.append(argv)
        tool = argv[0]
        output = ""
        if tool == "reprepro":
            archive = Path(argv[2]).name
            command = argv[5:]
            if command[0] == "list":
                output = self.listings.get((archive, command[1]), "")
            elif command[0] == "build-needing":
                output = self.build_needing.get((archive, command[1], command[2]), "")
        elif tool == "rmadison":
            output = self.madison.get(argv[4], "")
        elif tool == "dpkg":
            a, op, b = argv[2:5]
            assert op == "gt"
            return subprocess.CompletedProcess(argv, 0 if _version_key(a) > _version_key(b) else 1)
        returncode = self.returncodes.get(tool, 0)
        return subprocess.CompletedProcess(argv, returncode, stdout=output if stdout is not None else None)


@pytest.fixture
def tools(monkeypatch) -> FakeTools:
    fake = FakeTools()
    monkeypatch.setattr(subprocess, "run", fake.run)
    return fake


@pytest.fixture
def base(tmp_path) -> Path:
    repos = tmp_path / "repos"
    for name in ("alpha", "beta", "gamma"):
        (repos / name / "db").mkdir(parents=True)
    (repos / ".gnupg").mkdir()
    return repos


@pytest.fixture
def config(base) -> Config:
    return Config(
        base=base,
        repository="test",
        arches=["i386", "amd64"],
        codenames=["bookworm", "bookworm-backports", "trixie"],
        gnupghome=base / ".gnupg",
    )


@pytest.fixture
def reprepro(config) -> Reprepro:
    return Reprepro(config)
