"""Wrapper around the reprepro command line tool."""

import logging
import re
import subprocess

from reprepro_backend.archives import validate_archive
from reprepro_backend.config import Config
from reprepro_backend.constants import REPREPRO_BIN
from reprepro_backend.errors import CommandError, ToolError
from reprepro_backend.models import PackageIndex, PackageRecord

logger = logging.getLogger(__name__)

# <distribution>|<component>|<arch or source>: <package> <version>
LIST_LINE_RE = re.compile(r"^(?P<dist>\S+)\|(?P<area>\S+)\|(?P<arch>\S+): (?P<package>\S+) (?P<version>\S+)$")


def parse_list_line(line: str) -> tuple[str, str, str] | None:
    """Parse one line of ``reprepro list`` output.

    Returns:
        (architecture, package, version), or None if the line doesn't match
    """
    match = LIST_LINE_RE.match(line)
    if match is None:
        return None
    return match["arch"], match["package"], match["version"]


class Reprepro:
    """Runs reprepro against archives under the configured base path."""

    def __init__(self, config: Config):
        self.config = config

    def command(self, archive: str, *args: str) -> list[str]:
        """Build the reprepro argv for an archive."""
        return [
            REPREPRO_BIN,
            "-b",
            str(self.config.archive_path(archive)),
            "--gnupghome",
            str(self.config.gnupghome),
            *args,
        ]

    def run(self, archive: str, *args: str) -> str:
        """Run reprepro and return its standard output.

        Standard error is not captured, so reprepro's diagnostics reach the
        user directly.

        Raises:
            ArchiveNotFoundError: if the archive doesn't exist
            CommandError: if reprepro exits non-zero
        """
        validate_archive(self.config, archive)
        argv = self.command(archive, *args)
        logger.debug(f"Running {' '.join(argv)}")
        try:
            result = subprocess.run(argv, stdout=subprocess.PIPE, text=True, check=False)
        except OSError as e:
            raise ToolError(argv, e) from e
        if result.returncode != 0:
            raise CommandError(argv, result.returncode)
        return result.stdout

    def passthrough(self, archive: str, *args: str) -> int:
        """Run reprepro with our stdio and return its exit status."""
        validate_archive(self.config, archive)
        argv = self.command(archive, *args)
        logger.debug(f"Passing through to {' '.join(argv)}")
        try:
            return subprocess.run(argv, check=False).returncode
        except OSError as e:
            raise ToolError(argv, e) from e

    def list_packages(self, archive: str) -> PackageIndex:
        """Build the package index of an archive across all configured codenames.

        Records for each package are in codename order, then in the order
        reprepro printed them. Lines that can't be parsed are logged and skipped.
        """
        packages: PackageIndex = {}
        for codename in self.config.by_codename(self.config.codenames):
            output = self.run(archive, "list", codename)
            for line in output.splitlines():
                parsed = parse_list_line(line)
                if parsed is None:
                    logger.warning(f"Cannot parse reprepro output for {archive}: {line!r}")
                    continue
                arch, package, version = parsed
                record = PackageRecord(codename=codename, architecture=arch, package=package, version=version)
                packages.setdefault(package, []).append(record)
        return packages

    def build_needing(self, archive: str, codename: str, arch: str) -> list[str]:
        """Return reprepro's list of source packages needing a build for arch."""
        output = self.run(archive, "build-needing", codename, arch)
        return [line for line in output.splitlines() if line.strip()]
