"""Removal of leftover uploads from an archive's incoming directory.

There is no coordination with uploaders: a file that is still being uploaded
while clean runs will be deleted like any other. ``min_age`` narrows the
window by leaving recently modified files alone, but it is not a lock.
"""

import logging
import time
from pathlib import Path

from reprepro_backend.archives import validate_archive
from reprepro_backend.config import Config
from reprepro_backend.constants import INCOMING_DIR
from reprepro_backend.errors import CleanError

logger = logging.getLogger(__name__)


def clean_incoming(config: Config, archive: str, min_age: float = 0) -> list[Path]:
    """Delete regular files from an archive's incoming directory.

    Args:
        config: The loaded configuration
        archive: Archive name
        min_age: Leave files modified less than this many seconds ago

    Returns:
        The removed files, in the order they were removed
    """
    target = validate_archive(config, archive)
    if min_age <= 0:
        logger.warning(f"Cleaning {archive} incoming without --min-age; uploads in progress may be removed")

    incoming = target.path / INCOMING_DIR
    if not incoming.is_dir():
        logger.debug(f"No incoming directory at {incoming}")
        return []

    cutoff = time.time() - min_age
    removed: list[Path] = []
    try:
        entries = sorted(incoming.iterdir())
    except OSError as e:
        raise CleanError(f"cannot list {incoming}: {e.strerror or e}") from e

    for entry in entries:
        if entry.is_symlink() or not entry.is_file():
            continue
        try:
            if min_age > 0 and entry.stat().st_mtime > cutoff:
                logger.info(f"Leaving recent file {entry}")
                continue
            entry.unlink()
        except FileNotFoundError:
            # processed or moved away by reprepro since the listing
            logger.debug(f"{entry} disappeared before removal")
            continue
        except OSError as e:
            raise CleanError(f"cannot remove {entry}: {e.strerror or e}") from e
        logger.debug(f"Removed {entry}")
        removed.append(entry)
    return removed
