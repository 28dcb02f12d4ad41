"""Argument parsing functionality for debsolve."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="debsolve",
        description=(
            "debsolve - Debian package dependency closure and install-order resolver"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--catalog",
                        dest="CATALOGS",
                        help="Packages index to load, optionally with its repository base URL: PATH[=BASE_URL]",
                        action="append", type=str,
                        required=True)

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-l", "--load_list",
                        dest="LIST_FROM_FILE",
                        help="Load list of package selectors from a file",
                        action="store", type=str)
    input_group.add_argument("-p", "--package",
                            dest="SINGLE",
                            help="Name a single package selector (name, name_version or .deb stem).",
                            action="append", type=str)

    parser.add_argument("--priority-config",
                        dest="PRIORITY_CONFIG",
                        help=f"YAML file with repository priorities (default: ${Constants.ENV_PRIORITY_CONFIG})",
                        action="store",
                        type=str)
    parser.add_argument("--order",
                        dest="ORDER",
                        help="Emit packages in installation order instead of by name.",
                        action="store_true")
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV)",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_OUTPUT_FORMATS)
    parser.add_argument("--report-dir",
                        dest="REPORT_DIR",
                        help="Directory receiving the dependency-chain report on missing dependencies",
                        action="store",
                        type=str,
                        default=".")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=Constants.LOG_LEVELS,
                        default="INFO")

    return parser.parse_args(argv)
