"""nixpin - pin PyPI packages for Nix build recipes

    Resolves each package name to its latest version, an SRI hash of the
    sdist, build-system dependencies and runtime dependencies, expressed as
    nixpkgs python attribute names.

    Returns:
        int: Exit code
"""
import csv
import sys
import logging
import json

import requirements

from constants import ExitCodes, Constants
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_cli_overrides, apply_config, load_config
from registry.pypi import resolve_many

logger = logging.getLogger(__name__)


def load_pkgs_file(file_name):
    """Loads package names from a file, one per line.

    Blank lines and lines starting with "#" are skipped.

    Args:
        file_name (str): File path containing the list of packages.

    Returns:
        list: List of packages
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


def load_requirements_file(file_name):
    """Extracts package names from a requirements.txt file.

    Args:
        file_name (str): Path to the requirements file.

    Returns:
        list: Package names in file order; entries without a name are skipped.
    """
    try:
        with open(file_name, "r", encoding="utf-8") as file:
            body = file.read()
    except (FileNotFoundError, IOError) as e:
        logging.error("Couldn't import from given path '%s', error: %s", file_name, e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    return [req.name for req in requirements.parse(body) if req.name]


def build_pkglist(args):
    """Build the de-duplicated package list from CLI inputs, preserving order."""
    names = []
    if args.LIST_FROM_FILE:
        for path in args.LIST_FROM_FILE:
            names.extend(load_pkgs_file(path))
    elif args.REQUIREMENTS_FILE:
        for path in args.REQUIREMENTS_FILE:
            names.extend(load_requirements_file(path))
    elif args.SINGLE:
        names.extend(tok.strip() for tok in args.SINGLE)
    return list(dict.fromkeys(n for n in names if n))


def export_json(results, path=None):
    """Exports the resolutions as JSON, to ``path`` or stdout.

    Args:
        results (list): List of PackageResolution values.
        path (str, optional): File path to export the JSON.
    """
    data = [r.as_dict() for r in results]
    if path is None:
        json.dump(data, sys.stdout, ensure_ascii=False, indent=4)
        sys.stdout.write("\n")
        return
    try:
        with open(path, 'w', encoding='utf-8') as file:
            json.dump(data, file, ensure_ascii=False, indent=4)
        logging.info("JSON file has been successfully exported at: %s", path)
    except OSError as e:
        logging.error("JSON file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def export_csv(results, path):
    """Exports the resolutions to a CSV file.

    Dependency lists are joined with single spaces, the way they appear in a
    Nix list.

    Args:
        results (list): List of PackageResolution values.
        path (str): File path to export the CSV.
    """
    rows = [["name", "version", "hash_expr", "build_deps", "runtime_deps", "resolved"]]
    for r in results:
        rows.append([
            r.name,
            r.version,
            r.hash_expr,
            " ".join(r.build_deps),
            " ".join(r.runtime_deps),
            r.resolved,
        ])
    try:
        with open(path, 'w', newline='', encoding='utf-8') as file:
            export = csv.writer(file)
            export.writerows(rows)
        logging.info("CSV file has been successfully exported at: %s", path)
    except (OSError, csv.Error) as e:
        logging.error("CSV file couldn't be written to disk: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)


def _output_format(args):
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT.lower()
    if args.OUTPUT and args.OUTPUT.lower().endswith(".csv"):
        return "csv"
    return "json"


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(
        level="CRITICAL" if args.QUIET else args.LOG_LEVEL,
        log_file=args.LOG_FILE,
    )
    apply_config(load_config(args.CONFIG))
    apply_cli_overrides(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(
                event="function_entry",
                component="cli",
                action="main",
                target=Constants.REGISTRY_URL_PYPI,
                outcome=Constants.BUILD_STRATEGY
            )
        )

    pkglist = build_pkglist(args)
    if not pkglist:
        logging.warning("No packages found in the input list.")
        sys.exit(ExitCodes.SUCCESS.value)
    logging.info("Package list imported: %s", str(pkglist))

    results = resolve_many(pkglist, max_workers=Constants.MAX_CONCURRENCY)

    fmt = _output_format(args)
    if fmt == "csv" and args.OUTPUT:
        export_csv(results, args.OUTPUT)
    elif args.OUTPUT:
        export_json(results, args.OUTPUT)
    elif not args.QUIET:
        if fmt == "csv":
            logging.warning("CSV output requires --output; writing JSON to stdout.")
        export_json(results)

    unresolved = [r.name for r in results if not r.resolved]
    if unresolved:
        for name in unresolved:
            logging.warning("%s could not be pinned; using %s.", name, Constants.FALLBACK_HASH)
        if args.ERROR_ON_WARNINGS:
            logging.error("Warnings present, exiting with non-zero status code.")
            sys.exit(ExitCodes.EXIT_WARNINGS.value)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
