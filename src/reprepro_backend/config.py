"""Configuration file loading.

The configuration file is a shell-style list of ``KEY=value`` assignments:

    BASE=/srv/repos
    ARCHES=i386,amd64
    CODENAMES=bookworm,trixie,sid

Only a fixed set of keys is recognized; anything else is ignored. Missing keys
fall back to the defaults in ``constants``.
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, Field

from reprepro_backend import constants
from reprepro_backend.errors import ConfigError

logger = logging.getLogger(__name__)

# config file key -> Config field
CONFIG_KEYS = {
    "BASE": "base",
    "REPOSITORY": "repository",
    "ARCHES": "arches",
    "CODENAMES": "codenames",
    "GNUPGHOME": "gnupghome",
}
LIST_KEYS = {"ARCHES", "CODENAMES"}


class Config(BaseModel):
    """Runtime settings, built once at startup and passed to each component."""

    base: Path = Path(constants.DEFAULT_BASE)
    # names this set of archives in log messages
    repository: str = constants.DEFAULT_REPOSITORY
    arches: list[str] = Field(default_factory=lambda: list(constants.DEFAULT_ARCHES))
    codenames: list[str] = Field(default_factory=lambda: list(constants.DEFAULT_CODENAMES))
    gnupghome: Path = Path(constants.DEFAULT_GNUPGHOME)

    def archive_path(self, name: str) -> Path:
        return self.base / name

    def codename_rank(self, codename: str) -> tuple[int, str]:
        """Sort key placing codenames in configured order.

        Codenames that are not configured sort after all configured ones, in
        alphabetical order among themselves.
        """
        try:
            return (self.codenames.index(codename), "")
        except ValueError:
            return (len(self.codenames), codename)

    def by_codename(self, codenames: Iterable[str]) -> list[str]:
        """Return codenames sorted by their configured order."""
        return sorted(codenames, key=self.codename_rank)


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_config(text: str) -> dict[str, str | list[str]]:
    """Parse config file text into Config field values.

    Comment lines, blank lines, lines without ``=`` and unrecognized keys are
    skipped.
    """
    values: dict[str, str | list[str]] = {}
    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        key = key.strip()
        if not sep:
            logger.debug(f"Ignoring config line {lineno} without assignment: {line!r}")
            continue
        if key not in CONFIG_KEYS:
            logger.debug(f"Ignoring unrecognized config key {key!r} on line {lineno}")
            continue
        value = _unquote(value.strip())
        values[CONFIG_KEYS[key]] = _split_list(value) if key in LIST_KEYS else value
    return values


def load_config(path: Path | None = None) -> Config:
    """Load the configuration file, applying defaults for anything unset.

    Args:
        path: Explicit config file path. Falls back to $REPREPRO_CONFIG, then to
            the default location.

    Returns:
        The loaded Config

    Raises:
        ConfigError: if an explicitly requested file is missing, or an existing
            file cannot be read
    """
    explicit = path or constants.config_path_from_env()
    config_path = explicit or constants.DEFAULT_CONFIG_PATH

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"cannot open {config_path}: no such file")
        logger.debug(f"No config file at {config_path}, using defaults")
        config = Config()
        logger.debug(f"Using default config for repository {config.repository}")
        return config

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read {config_path}: {e.strerror or e}") from e
    except UnicodeDecodeError as e:
        raise ConfigError(f"cannot read {config_path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e

    config = Config.model_validate(parse_config(text))
    logger.debug(f"Loaded config for repository {config.repository} from {config_path}")
    return config
