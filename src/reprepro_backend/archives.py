"""Archive discovery and validation."""

import logging

from reprepro_backend.config import Config
from reprepro_backend.constants import HIDDEN_PREFIX
from reprepro_backend.errors import ArchiveError, ArchiveNotFoundError
from reprepro_backend.models import Archive

logger = logging.getLogger(__name__)


def list_archives(config: Config) -> list[str]:
    """Return the names of all archives under the base path, sorted.

    Every subdirectory not starting with a dot is an archive. The repository
    structure inside it is not checked here.
    """
    try:
        entries = [
            entry.name
            for entry in config.base.iterdir()
            if not entry.name.startswith(HIDDEN_PREFIX) and entry.is_dir()
        ]
    except OSError as e:
        raise ArchiveError(f"cannot list archives in {config.base}: {e.strerror or e}") from e
    return sorted(entries)


def validate_archive(config: Config, name: str) -> Archive:
    """Check that an archive exists and return it.

    Raises:
        ArchiveNotFoundError: if the name is malformed or there is neither an
            archive directory nor a db directory for it
    """
    if not name or "/" in name or name.startswith(HIDDEN_PREFIX):
        raise ArchiveNotFoundError(name)

    path = config.archive_path(name)
    if not (path.is_dir() or (path / "db").is_dir()):
        raise ArchiveNotFoundError(name)

    logger.debug(f"Using archive {name} at {path}")
    return Archive(name=name, path=path)
