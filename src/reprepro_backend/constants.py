from os import getenv
from pathlib import Path

# config file location, overridable from the environment
CONFIG_ENV_VAR = "REPREPRO_CONFIG"
DEFAULT_CONFIG_PATH = Path("/etc/reprepro/config")


def config_path_from_env() -> Path | None:
    value = getenv(CONFIG_ENV_VAR)
    return Path(value) if value else None


# defaults for keys missing from the config file
DEFAULT_BASE = "/srv/repos"
DEFAULT_REPOSITORY = "reprepro"
DEFAULT_ARCHES = ["i386", "amd64"]
DEFAULT_CODENAMES = ["bullseye", "bookworm", "trixie", "sid"]
DEFAULT_GNUPGHOME = "/srv/repos/.gnupg"

# external tools
REPREPRO_BIN = "reprepro"
RMADISON_BIN = "rmadison"
DPKG_BIN = "dpkg"

# audit conventions
HIDDEN_PREFIX = "."
CODENAME_QUALIFIER = "-"
REFERENCE_ARCH = "source"
BACKPORTS_MARKER = "backports"
# fmt: off
LOCAL_PREFIXES = (
    "stanford-", "eyrie-",
)
# fmt: on

# uploads land in <archive>/incoming
INCOMING_DIR = "incoming"

PROG_NAME = "reprepro-backend"
