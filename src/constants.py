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
    INTERNAL_ERROR = 3


class PriorityTier(Enum):
    """Installation-preference tiers derived from a repository pin priority.

    Members are declared in tie-break precedence order.
    """

    BLOCKED = "blocked"
    FORCE_INSTALL = "force-install"
    INSTALL_EVEN_IF_LOWER = "install-even-if-lower"
    PREFERRED = "preferred"
    DEFAULT = "default"


class OutputFormats(Enum):
    """Export formats supported by the CLI."""

    JSON = "json"
    CSV = "csv"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    # APT pin-priority semantics
    DEFAULT_PRIORITY = 500
    PRIORITY_PREFERRED = 990
    PRIORITY_INSTALL_EVEN_IF_LOWER = 1000
    UNMATCHED_PRIORITY = 0

    # Debian archive layout: everything before this segment is the repository base
    POOL_SEGMENT = "/pool/"

    VERSION_OPERATORS = ["<<", "<=", ">=", ">>", "=", "<", ">"]
    MISSING_MARKER = "(missing)"

    SUPPORTED_OUTPUT_FORMATS = [OutputFormats.JSON.value, OutputFormats.CSV.value]
    LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    ENV_LOG_LEVEL = "DEBSOLVE_LOG_LEVEL"
    ENV_PRIORITY_CONFIG = "DEBSOLVE_PRIORITY_CONFIG"
    CHAIN_REPORT_FILE = "dependency_chains.txt"
