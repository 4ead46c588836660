"""Command-line interface for tech-detector."""

import json
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Tuple

import click

from .. import __version__
from .._detectors import DEFAULT_MAX_FILES
from ..config import LOG_LEVELS, Config, evaluate_boolean
from ..console import print_scan_summary
from ..engine import SbomFirstEngine
from ..exceptions import ConfigurationError, RegistryError, ScanError
from ..logging_config import logger, setup_logging
from ..registry import load_registry
from ..result import DetectionResult

TECH_DETECTOR_VERSION = __version__


def build_config(
    paths: Tuple[str, ...],
    path_options: Tuple[str, ...],
    registry_path: Optional[str],
    aggregate: bool,
    compact: bool,
    max_files: int,
    workers: int,
    log_level: str,
    summary: bool,
    output_file: Optional[str],
) -> Config:
    """
    Build a Config from CLI arguments.

    Positional PATHS come first, followed by every --path option, with
    duplicates removed.

    Returns:
        Validated configuration object

    Raises:
        ConfigurationError: If configuration is invalid
    """
    merged = list(dict.fromkeys([*paths, *path_options]))
    config = Config(
        paths=merged,
        registry_path=registry_path,
        aggregate=aggregate,
        compact=compact,
        max_files=max_files,
        workers=workers,
        log_level=log_level,
        summary=summary,
        output_file=output_file,
    )
    config.validate()
    return config


def run_detection(config: Config) -> Dict[str, DetectionResult]:
    """
    Run the scans described by config.

    Returns:
        Mapping of project label to result. A single-path run has exactly
        one entry keyed by the path as given.

    Raises:
        RegistryError: If the registry cannot be loaded
        ScanError: If a single path or the aggregate root cannot be scanned
    """
    registry = load_registry(config.registry_path)
    engine = SbomFirstEngine(registry, max_files=config.max_files)

    if config.aggregate:
        return engine.scan_aggregate(config.paths[0], max_workers=config.workers)

    if len(config.paths) == 1:
        path = config.paths[0]
        return {path: engine.scan_project(path)}

    return engine.scan_many(config.paths, max_workers=config.workers)


def render_output(config: Config, results: Dict[str, DetectionResult]) -> str:
    """Serialize results: one document for a single path, otherwise a map."""
    indent = None if config.compact else 2
    if not config.aggregate and len(config.paths) == 1:
        (result,) = results.values()
        return result.to_json(pretty=config.pretty)
    return json.dumps({label: result.to_dict() for label, result in results.items()}, indent=indent)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("paths", nargs=-1, type=click.Path())
@click.option("--path", "path_options", multiple=True, type=click.Path(), help="Project path to scan (repeatable).")
@click.option("-c", "--compact", is_flag=True, default=False, help="Emit compact JSON instead of indented JSON.")
@click.option(
    "-a",
    "--aggregate",
    is_flag=True,
    default=False,
    help="Scan every immediate subdirectory of PATH as a separate project.",
)
@click.option(
    "--registry",
    "registry_path",
    type=click.Path(dir_okay=False),
    envvar="TECH_DETECTOR_REGISTRY",
    default=None,
    help="Technology registry JSON file. Defaults to the bundled registry. [env: TECH_DETECTOR_REGISTRY]",
)
@click.option(
    "--max-files",
    type=int,
    envvar="TECH_DETECTOR_MAX_FILES",
    default=DEFAULT_MAX_FILES,
    show_default=True,
    help="Maximum number of files visited per project. [env: TECH_DETECTOR_MAX_FILES]",
)
@click.option(
    "--workers",
    type=int,
    envvar="TECH_DETECTOR_WORKERS",
    default=1,
    show_default=True,
    help="Number of projects scanned concurrently. [env: TECH_DETECTOR_WORKERS]",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    envvar="LOG_LEVEL",
    default="WARNING",
    show_default=True,
    help="Logging verbosity. Logs are written to stderr. [env: LOG_LEVEL]",
)
@click.option(
    "--summary/--no-summary",
    default=None,
    help="Print a summary table to stderr. [env: TECH_DETECTOR_SUMMARY]",
)
@click.option(
    "-o",
    "--output",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write the JSON result to a file instead of stdout.",
)
@click.version_option(TECH_DETECTOR_VERSION, "--version", prog_name="tech-detector", message="%(prog)s %(version)s")
@click.pass_context
def cli(
    ctx: click.Context,
    paths: Tuple[str, ...],
    path_options: Tuple[str, ...],
    compact: bool,
    aggregate: bool,
    registry_path: Optional[str],
    max_files: int,
    workers: int,
    log_level: str,
    summary: Optional[bool],
    output_file: Optional[str],
) -> None:
    """Detect the technology stack of one or more projects.

    An SBOM (bom.xml, sbom.json, cyclonedx*.json) in a project root is
    analyzed first; file-based detectors fill in whatever it does not cover.
    """
    if not paths and not path_options:
        click.echo(ctx.get_help())
        ctx.exit(0)

    if summary is None:
        summary = evaluate_boolean(os.getenv("TECH_DETECTOR_SUMMARY", "false"))

    try:
        config = build_config(
            paths,
            path_options,
            registry_path,
            aggregate,
            compact,
            max_files,
            workers,
            log_level,
            summary,
            output_file,
        )
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    setup_logging(config.log_level)

    try:
        results = run_detection(config)
    except RegistryError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except ScanError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    output = render_output(config, results)
    if config.output_file:
        Path(config.output_file).write_text(output + "\n", encoding="utf-8")
        logger.info(f"Results written to {config.output_file}")
    else:
        click.echo(output)

    if config.summary:
        print_scan_summary(results)


def main() -> None:
    """Entry point for the tech-detector console script."""
    cli()


if __name__ == "__main__":
    main()
