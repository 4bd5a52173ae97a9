"""Argument parsing functionality for deptree."""

import argparse
from .constants import Constants


def build_parser():
    """Builds the argument parser for the program."""
    parser = argparse.ArgumentParser(
        prog="deptree",
        description=(
            "deptree - Resolve the transitive npm dependency tree of a package"
        ),
        add_help=True,
    )

    parser.add_argument("-p", "--package",
                        dest="PACKAGE",
                        help="Root package as name[@range], e.g. express@^4.18.0 (default range: latest)",
                        action="store", type=str,
                        required=True)
    parser.add_argument("--depth",
                        dest="TRACK_DEPTH",
                        help="Record depth (root/direct/transitive) and path for each package.",
                        action="store_true")

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file (JSON or CSV); defaults to stdout",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (json or csv). If not specified, inferred from --output extension; defaults to json.",
                        action="store",
                        type=str.lower,
                        choices=Constants.SUPPORTED_FORMATS)

    parser.add_argument("--registry",
                        dest="REGISTRY",
                        help="Registry base URL (default: %s)" % Constants.REGISTRY_URL_NPM,
                        action="store",
                        type=str)
    parser.add_argument("--concurrency",
                        dest="CONCURRENCY",
                        help="Maximum packument fetches in flight per level",
                        action="store",
                        type=int)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="Per-request timeout in seconds",
                        action="store",
                        type=float)
    parser.add_argument("--os",
                        dest="TARGET_OS",
                        help="Target operating system (default: %s)" % Constants.TARGET_OS,
                        action="store",
                        type=str)
    parser.add_argument("--cpu",
                        dest="TARGET_CPU",
                        help="Target CPU architecture (default: %s)" % Constants.TARGET_CPU,
                        action="store",
                        type=str)
    parser.add_argument("--libc",
                        dest="TARGET_LIBC",
                        help="Target C library (default: %s)" % Constants.TARGET_LIBC,
                        action="store",
                        type=str)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)
    parser.add_argument("-q", "--quiet",
                        dest="QUIET",
                        help="Do not output to console.",
                        action="store_true")

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
