"""Argument parsing functionality for nixpin."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="nixpin",
        description=(
            "nixpin - Pin PyPI packages (version, SRI hash, build and runtime deps) for Nix"
        ),
        add_help=True,
    )

    input_group = parser.add_mutually_exclusive_group(required=True)
    input_group.add_argument("-p", "--package",
                             dest="SINGLE",
                             help="Name a single package.",
                             action="append", type=str)
    input_group.add_argument("-l", "--load_list",
                             dest="LIST_FROM_FILE",
                             help="Load list of package names from a file",
                             action="append", type=str)
    input_group.add_argument("-r", "--requirements",
                             dest="REQUIREMENTS_FILE",
                             help="Extract package names from a requirements.txt file",
                             action="append", type=str)

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
                        choices=Constants.OUTPUT_FORMATS)
    parser.add_argument("-j", "--jobs",
                        dest="JOBS",
                        help="Number of packages resolved concurrently",
                        action="store",
                        type=int)
    parser.add_argument("--build-strategy",
                        dest="BUILD_STRATEGY",
                        help="Read build deps from [build-system] requires or build-backend",
                        action="store",
                        type=str.lower,
                        choices=Constants.BUILD_STRATEGIES)
    parser.add_argument("--registry-url",
                        dest="REGISTRY_URL",
                        help="Base URL of the PyPI JSON API (default: %s)" % Constants.REGISTRY_URL_PYPI,
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Per-request timeout in seconds",
                        action="store",
                        type=int)
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to a YAML configuration file",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level (default: $NIXPIN_LOG_LEVEL, then INFO)",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("--error-on-warnings",
                        dest="ERROR_ON_WARNINGS",
                        help="Exit with a non-zero status code if any package is unresolved.",
                        action="store_true")
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser.parse_args(argv)
