"""Exceptions raised by reprepro-backend.

Everything derives from RepreproBackendError so the command line front end can
report any failure as a single line and exit non-zero.
"""

from collections.abc import Sequence


class RepreproBackendError(Exception):
    """Base class for all fatal errors."""


class ConfigError(RepreproBackendError):
    """The configuration file exists but could not be read."""


class ArchiveError(RepreproBackendError):
    """The archive base directory could not be listed."""


class ArchiveNotFoundError(ArchiveError):
    """The named archive has no directory under the base path."""

    def __init__(self, name: str):
        super().__init__(f"unknown archive '{name}'")
        self.name = name


class CommandError(RepreproBackendError):
    """An external tool exited with an unexpected status."""

    def __init__(self, argv: Sequence[str], returncode: int, detail: str | None = None):
        msg = f"{argv[0]} exited with status {returncode}"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.argv = list(argv)
        self.returncode = returncode


class ToolError(RepreproBackendError):
    """An external tool could not be started at all."""

    def __init__(self, argv: Sequence[str], error: OSError):
        super().__init__(f"cannot run {argv[0]}: {error.strerror or error}")
        self.argv = list(argv)


class CleanError(RepreproBackendError):
    """A file in an incoming directory could not be inspected or removed."""
