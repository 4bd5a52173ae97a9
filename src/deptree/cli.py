"""deptree command-line entry point.

Resolves one root package and exports the resulting tree as JSON or CSV.
"""

from __future__ import annotations

import asyncio
import csv
import json
import logging
import sys
from typing import IO, Optional

from .args import parse_args
from .cli_config import configure_runtime
from .common.logging_utils import configure_logging, extra_context, is_debug_enabled
from .constants import Constants, ExitCodes, OutputFormats
from .registry.npm.client import PackumentFetcher
from .resolution.models import ResolutionResult
from .resolution.platform import TargetPlatform
from .resolution.walker import TreeWalker
from .versioning.parser import InvalidPackageSpecError, parse_package_token

logger = logging.getLogger(__name__)

CSV_HEADERS = ["name", "version", "size", "optional", "depth", "path", "deprecated"]


def _setup_logging(args) -> None:
    """Configure logging from CLI arguments (level and optional log file)."""
    configure_logging(getattr(args, "LOG_LEVEL", None))

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
        logging.getLogger().addHandler(file_handler)
        logger.info("Logging to file: %s", log_file)


def _infer_format(args) -> str:
    """Explicit --format wins, then the --output extension, then JSON."""
    if getattr(args, "OUTPUT_FORMAT", None):
        return args.OUTPUT_FORMAT
    output = getattr(args, "OUTPUT", None) or ""
    if output.lower().endswith(".csv"):
        return OutputFormats.CSV.value
    return OutputFormats.JSON.value


def write_json(result: ResolutionResult, stream: IO[str]) -> None:
    """Write the resolution result as a JSON document."""
    json.dump(result.to_dict(), stream, ensure_ascii=False, indent=4)
    stream.write("\n")


def write_csv(result: ResolutionResult, stream: IO[str]) -> None:
    """Write one CSV row per resolved package."""

    def _nv(v):
        return "" if v is None else v

    writer = csv.writer(stream)
    writer.writerow(CSV_HEADERS)
    for pkg in result.values():
        writer.writerow([
            pkg.name,
            pkg.version,
            pkg.size,
            pkg.optional,
            _nv(pkg.depth.value if pkg.depth is not None else None),
            _nv(" > ".join(pkg.path) if pkg.path is not None else None),
            _nv(pkg.deprecated),
        ])


def export_result(result: ResolutionResult, fmt: str, path: Optional[str]) -> None:
    """Export to ``path``, or stdout when no path is given."""
    writer = write_csv if fmt == OutputFormats.CSV.value else write_json
    if not path:
        writer(result, sys.stdout)
        return
    try:
        with open(path, "w", newline="", encoding="utf-8") as file:
            writer(result, file)
        logging.info("%s file has been successfully exported at: %s", fmt.upper(), path)
    except (OSError, csv.Error) as e:
        logging.error("%s file couldn't be written to disk: %s", fmt.upper(), e)
        sys.exit(ExitCodes.FILE_ERROR.value)


async def run_resolution(name: str, spec: str, track_depth: bool) -> ResolutionResult:
    """Resolve ``name@spec`` with the runtime configuration on Constants."""
    async with PackumentFetcher(
        registry_url=Constants.REGISTRY_URL_NPM, timeout=Constants.REQUEST_TIMEOUT
    ) as fetcher:
        walker = TreeWalker(
            fetcher,
            platform=TargetPlatform.from_constants(),
            concurrency=Constants.PACKUMENT_FETCH_CONCURRENCY,
        )
        return await walker.walk(name, spec, track_depth=track_depth)


def main(argv=None) -> None:
    """Main function of the program."""
    args = parse_args(argv)
    _setup_logging(args)
    configure_runtime(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )

    try:
        name, spec = parse_package_token(args.PACKAGE)
    except InvalidPackageSpecError as e:
        logger.error("%s", e)
        sys.exit(ExitCodes.INVALID_INPUT.value)

    result = asyncio.run(run_resolution(name, spec, args.TRACK_DEPTH))

    if result.root is None:
        logger.error("Could not resolve %s@%s from %s", name, spec, Constants.REGISTRY_URL_NPM)
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)

    if not (args.QUIET and not args.OUTPUT):
        export_result(result, _infer_format(args), args.OUTPUT)

    sys.exit(ExitCodes.SUCCESS.value)


if __name__ == "__main__":
    main()
