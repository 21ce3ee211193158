"""Upstream Debian version lookups through rmadison and dpkg."""

import logging
import subprocess

from reprepro_backend.constants import BACKPORTS_MARKER, DPKG_BIN, REFERENCE_ARCH, RMADISON_BIN
from reprepro_backend.errors import CommandError, ToolError

logger = logging.getLogger(__name__)


def parse_madison(output: str) -> dict[str, str]:
    """Parse rmadison output into package -> first non-backports version.

    rmadison prints one ``package | version | suite | architectures`` row per
    match.
    """
    versions: dict[str, str] = {}
    for line in output.splitlines():
        fields = [field.strip() for field in line.split("|")]
        if len(fields) < 3 or not fields[0] or not fields[1]:
            logger.debug(f"Skipping rmadison line: {line!r}")
            continue
        package, version, suite = fields[:3]
        if BACKPORTS_MARKER in suite:
            continue
        versions.setdefault(package, version)
    return versions


class UpstreamOracle:
    """Looks up upstream versions, caching results for the life of the object."""

    def __init__(self, arch: str = REFERENCE_ARCH):
        self.arch = arch
        # codename -> package -> version, None meaning no upstream data
        self._cache: dict[str, dict[str, str | None]] = {}

    def _query(self, codename: str, packages: list[str]) -> dict[str, str]:
        argv = [RMADISON_BIN, "-a", self.arch, "-s", codename, *packages]
        logger.debug(f"Running {' '.join(argv)}")
        try:
            result = subprocess.run(argv, stdout=subprocess.PIPE, text=True, check=False)
        except OSError as e:
            raise ToolError(argv, e) from e
        if result.returncode != 0:
            raise CommandError(argv, result.returncode)
        return parse_madison(result.stdout)

    def lookup(self, codename: str, entries: list[list[str]]) -> dict[str, str]:
        """Fill in upstream versions for a batch of packages.

        Args:
            codename: The upstream suite to query
            entries: ``[package, local_version]`` lists. Entries with an
                upstream version get it set as their third element, in place.

        Returns:
            package -> upstream version for every entry that has one
        """
        cache = self._cache.setdefault(codename, {})
        missing = list(dict.fromkeys(entry[0] for entry in entries if entry[0] not in cache))
        if missing:
            found = self._query(codename, missing)
            for package in missing:
                cache[package] = found.get(package)

        versions: dict[str, str] = {}
        for entry in entries:
            upstream = cache.get(entry[0])
            if upstream is None:
                continue
            del entry[2:]
            entry.append(upstream)
            versions[entry[0]] = upstream
        return versions


def version_gt(a: str, b: str) -> bool:
    """Return True if Debian version a is strictly greater than b.

    The comparison is done by ``dpkg --compare-versions``.
    """
    argv = [DPKG_BIN, "--compare-versions", a, "gt", b]
    try:
        result = subprocess.run(argv, check=False)
    except OSError as e:
        raise ToolError(argv, e) from e
    match result.returncode:
        case 0:
            return True
        case 1:
            return False
        case _:
            raise CommandError(argv, result.returncode)
