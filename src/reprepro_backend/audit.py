"""Read-only audit reports over all archives.

Each report is a generator of output lines, so whatever has been produced is
already written out if a later reprepro or rmadison call fails.
"""

import logging
from collections.abc import Callable, Iterator

from reprepro_backend.archives import list_archives
from reprepro_backend.constants import CODENAME_QUALIFIER, LOCAL_PREFIXES, REFERENCE_ARCH
from reprepro_backend.reprepro import Reprepro
from reprepro_backend.upstream import UpstreamOracle, version_gt

logger = logging.getLogger(__name__)


def _is_qualified(codename: str) -> bool:
    # bookworm-backports, bookworm-security and friends
    return CODENAME_QUALIFIER in codename


def _strip_paths(line: str) -> str:
    fields = line.split()
    while fields and "/" in fields[-1]:
        fields.pop()
    return " ".join(fields)


def audit_build_needing(reprepro: Reprepro) -> Iterator[str]:
    """Report source packages that still need building, per archive/codename/arch."""
    config = reprepro.config
    first = True
    for archive in list_archives(config):
        for codename in config.codenames:
            if _is_qualified(codename):
                continue
            for arch in config.arches:
                lines = reprepro.build_needing(archive, codename, arch)
                if not lines:
                    continue
                if not first:
                    yield ""
                first = False
                yield f"{archive} {codename} {arch}:"
                for line in lines:
                    yield _strip_paths(line)


def audit_multiple(reprepro: Reprepro) -> Iterator[str]:
    """Report packages present in more than one archive."""
    archives = list_archives(reprepro.config)
    indexes = [reprepro.list_packages(archive) for archive in archives]
    for i, archive in enumerate(archives):
        for package in sorted(indexes[i]):
            for j in range(i + 1, len(archives)):
                if package in indexes[j]:
                    yield f"{package} in {archive} and {archives[j]}"


def audit_obsolete(
    reprepro: Reprepro,
    oracle: UpstreamOracle | None = None,
    newer: Callable[[str, str], bool] = version_gt,
    local_prefixes: tuple[str, ...] = LOCAL_PREFIXES,
    arch: str = REFERENCE_ARCH,
) -> Iterator[str]:
    """Report packages whose upstream Debian version is newer than ours.

    Locally maintained packages (by name prefix) and qualified codenames are
    skipped. Upstream lookups are batched: one rmadison call per codename per
    archive.
    """
    config = reprepro.config
    oracle = oracle or UpstreamOracle(arch=arch)
    for archive in list_archives(config):
        index = reprepro.list_packages(archive)

        batches: dict[str, list[list[str]]] = {}
        for package in sorted(index):
            if package.startswith(local_prefixes):
                continue
            records = [
                record
                for record in index[package]
                if record.architecture == arch and not _is_qualified(record.codename)
            ]
            seen: set[str] = set()
            for record in sorted(records, key=lambda r: config.codename_rank(r.codename)):
                if record.codename in seen:
                    continue
                seen.add(record.codename)
                batches.setdefault(record.codename, []).append([package, record.version])

        for codename in config.by_codename(batches):
            batch = batches[codename]
            logger.debug(f"Checking {len(batch)} packages in {archive} {codename} against upstream")
            oracle.lookup(codename, batch)
            for entry in batch:
                if len(entry) < 3:
                    continue
                package, local, upstream = entry
                if newer(upstream, local):
                    yield f"{package} ({codename}) {local} (Debian {upstream})"
