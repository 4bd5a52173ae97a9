"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    INVALID_INPUT = 4


class OutputFormats(Enum):
    """Export formats supported by the CLI.

    Args:
        Enum (string): Export formats supported by the CLI.
    """

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REGISTRY_URL_NPM = "https://registry.npmjs.org/"
    # Abbreviated metadata omits readmes but keeps os/cpu/libc, deprecated and dist.
    NPM_ACCEPT_HEADER = (
        "application/vnd.npm.install-v1+json; q=1.0, application/json; q=0.8, */*"
    )
    USER_AGENT = "deptree/0.1"
    SUPPORTED_FORMATS = [OutputFormats.JSON.value, OutputFormats.CSV.value]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    HTTP_RETRY_MAX = 3
    HTTP_RETRY_BASE_DELAY_SEC = 0.3

    PACKUMENT_CACHE_MAX_AGE_SEC = 60 * 60
    PACKUMENT_CACHE_MAX_ENTRIES = 5000
    PACKUMENT_FETCH_CONCURRENCY = 20

    # Representative install target for platform-restricted packages.
    TARGET_OS = "linux"
    TARGET_CPU = "x64"
    TARGET_LIBC = "glibc"

    ENV_LOG_LEVEL = "DEPTREE_LOG_LEVEL"
    ENV_REGISTRY_URL = "DEPTREE_REGISTRY_URL"
    CONFIG_SECTION = "deptree"
