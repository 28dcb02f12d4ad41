"""debsolve - Debian package dependency closure and install-order resolver.

    Returns:
        int: Exit code
"""
import csv
import json
import logging
import os
import sys

from constants import Constants, ExitCodes, OutputFormats
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import get_priority_config
from repository.packages_index import load_catalog
from resolver.candidates import CatalogIndex
from resolver.closure import ClosureResolver
from resolver.errors import (
    CatalogError,
    ConfigError,
    InstallOrderError,
    MissingDependencyError,
    RequestedPackageNotFoundError,
    ResolutionError,
)
from resolver.ordering import InstallOrderSorter
from resolver.priority import PriorityPolicy
from resolver.requested import match_requested

logger = logging.getLogger(__name__)


def load_pkgs_file(file_name):
    """Loads the package selectors from a file.

    Blank lines and ``#`` comments are skipped.

    Args:
        file_name (str): File path containing the list of packages.

    Returns:
        list: List of package selectors
    """
    try:
        with open(file_name, encoding='utf-8') as file:
            lines = [line.strip() for line in file]
    except FileNotFoundError as e:
        logging.error("File not found: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except IOError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return [line for line in lines if line and not line.startswith("#")]


def parse_catalog_arg(value):
    """Split a ``PATH[=BASE_URL]`` catalog argument."""
    path, _, base_url = value.partition("=")
    return path, base_url


def build_selector_list(args):
    """Collect selectors from -p or -l, keeping first occurrences only."""
    if args.LIST_FROM_FILE:
        raw = load_pkgs_file(args.LIST_FROM_FILE)
    else:
        raw = [s.strip() for s in (args.SINGLE or []) if s and s.strip()]
    seen = set()
    selectors = []
    for item in raw:
        if item not in seen:
            seen.add(item)
            selectors.append(item)
    return selectors


def make_report_sink(report_dir):
    """Return a report sink writing dependency chains into ``report_dir``."""
    def _sink(report):
        path = os.path.join(report_dir, Constants.CHAIN_REPORT_FILE)
        try:
            os.makedirs(report_dir, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as file:
                file.write(report.render())
        except OSError as e:
            logging.error("Dependency chain report couldn't be written to disk: %s", e)
            return None
        logging.info("Dependency chain report written to: %s", path)
        return path
    return _sink


def export_csv(packages, path):
    """Exports the resolved packages to a CSV file.

    Args:
        packages (list): Resolved PackageRecord instances, in output order.
        path (str): File path to export the CSV.
    """
    headers = [
        "Position",
        "Package Name",
        "Version",
        "Architecture",
        "URL",
        "Requires",
        "Provides",
        "SHA256",
    ]
    rows = [headers]
    for position, pkg in enumerate(packages, start=1):
        sha256 = next((c.value for c in pkg.checksums if c.algorithm == "SHA256"), "")
        rows.append([
            position,
            pkg.name,
            pkg.version,
            pkg.architecture,
            pkg.origin_url,
            " ".join(pkg.requires),
            " ".join(pkg.provides),
            sha256,
        ])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_json(packages, path):
    """Exports the resolved packages to a JSON file.

    Args:
        packages (list): Resolved PackageRecord instances, in output order.
        path (str): File path to export the JSON.
    """
    data = [pkg.to_dict() for pkg in packages]
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _output_format(args):
    if args.OUTPUT_FORMAT:
        return args.OUTPUT_FORMAT
    if args.OUTPUT and args.OUTPUT.lower().endswith(".csv"):
        return OutputFormats.CSV.value
    return OutputFormats.JSON.value


def write_results(args, packages):
    """Print ``name_version`` lines or export to the requested file."""
    if not args.OUTPUT:
        for pkg in packages:
            print(pkg.label)
        return
    if _output_format(args) == OutputFormats.CSV.value:
        export_csv(packages, args.OUTPUT)
    else:
        export_json(packages, args.OUTPUT)


def run(args):
    """Resolve the selectors in ``args`` and return the packages to emit.

    Raises:
        CatalogError: a package index cannot be read.
        ConfigError: the priority configuration is invalid.
        ResolutionError: a selector or dependency cannot be resolved.
        InstallOrderError: ordering lost packages.
    """
    config = get_priority_config(args)
    policy = PriorityPolicy(config)
    catalog = CatalogIndex(load_catalog(parse_catalog_arg(c) for c in args.CATALOGS))

    selectors = build_selector_list(args)
    if not selectors:
        logging.warning("No packages found in the input list.")
        return []

    requested = []
    for want in selectors:
        pkg = match_requested(want, catalog, policy)
        if pkg is None:
            raise RequestedPackageNotFoundError(want)
        if is_debug_enabled(logger):
            logger.debug(
                "Selector matched",
                extra=extra_context(
                    event="decision", component="cli", action="match_requested",
                    outcome="matched", target=want, package=pkg.key,
                ),
            )
        requested.append(pkg)

    resolver = ClosureResolver(policy, report_sink=make_report_sink(args.REPORT_DIR))
    packages = resolver.resolve(requested, catalog)
    if args.ORDER:
        packages = InstallOrderSorter().order(packages)
    return packages


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    os.environ[Constants.ENV_LOG_LEVEL] = str(args.LOG_LEVEL).upper()
    configure_logging()

    if is_debug_enabled(logger):
        logger.debug("CLI start", extra=extra_context(event="function_entry", component="cli", action="main"))

    try:
        packages = run(args)
    except (CatalogError, ConfigError) as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except MissingDependencyError as e:
        logging.error("%s", e)
        if e.report is not None and not e.report.location:
            sys.stderr.write(e.report.render())
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)
    except ResolutionError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)
    except InstallOrderError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.INTERNAL_ERROR.value)

    write_results(args, packages)
    if is_debug_enabled(logger):
        logger.debug(
            "CLI finished",
            extra=extra_context(event="function_exit", component="cli", action="main",
                                outcome="success", count=len(packages)),
        )
    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
