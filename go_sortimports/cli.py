#!/usr/bin/env python3
"""Command-line interface for go-sortimports using Click."""

from importlib import metadata
import logging
from pathlib import Path
import sys
from typing import Optional, Sequence

import click
from go_sortimports import core
from go_sortimports.config import FORMATTERS
from go_sortimports.config import STRATEGIES
from go_sortimports.config import Config
from go_sortimports.config import read_config
from go_sortimports.errors import SortImportsError

LOG = logging.getLogger(__name__)

try:
    VERSION = f"go-sortimports {metadata.version('go-sortimports')}"
except metadata.PackageNotFoundError:
    VERSION = "go-sortimports"


def _handle_packages(patterns: Sequence[str], config: Config, apply_changes: bool, show_diff: bool = False) -> int:
    """Sort imports in every file of the given packages.

    Args:
        patterns: Package directories, ``dir/...`` patterns or import paths.
        config: Effective settings.
        apply_changes: If True, rewrite changed files in place.
        show_diff: If True, print a unified diff for every changed file.
    Returns:
        0 if every file was processed, 1 if any warning was emitted.
    """
    warnings = 0
    seen = set()
    cwd = Path.cwd()
    LOG.debug("Strategy %s, formatter %s, local prefix %r", config.strategy, config.formatter, config.local_prefix)

    for pattern in patterns or (".",):
        try:
            package_dirs = core.expand_pattern(pattern, cwd)
        except SortImportsError as exc:
            LOG.warning("[%s] %s", pattern, exc)
            warnings += 1
            continue

        for package_dir in package_dirs:
            key = package_dir.resolve()
            if key in seen:
                continue
            seen.add(key)

            try:
                resolver = core.make_resolver(package_dir, config.strategy, config.local_prefix)
            except SortImportsError as exc:
                LOG.warning("[%s] cannot read package: %s", package_dir, exc)
                warnings += 1
                continue
            LOG.debug("[%s] using %r", package_dir, resolver)

            report = core.sort_package(package_dir, resolver, config.formatter, apply=apply_changes)
            for change in report.changes:
                click.echo(str(change.path))
                if show_diff:
                    click.echo(change.diff(), nl=False)
            for file_path, msg in report.warnings:
                LOG.warning("[%s] %s", file_path, msg)
                warnings += 1

    if warnings:
        LOG.info("Total warnings: %d", warnings)
    return 1 if warnings else 0


def _load_config(config_dir: Optional[str], **overrides: Optional[str]) -> Config:
    try:
        config = read_config(config_dir or ".")
    except SortImportsError as exc:
        raise click.ClickException(str(exc)) from exc
    return config.override(**overrides)


_package_options = [
    click.argument("packages", nargs=-1),
    click.option("--local-prefix", default=None, help="Import path prefix that marks project imports."),
    click.option(
        "--strategy",
        type=click.Choice(STRATEGIES),
        default=None,
        help="How project imports are recognised (default: heuristic).",
    ),
    click.option(
        "--formatter",
        type=click.Choice(FORMATTERS),
        default=None,
        help="Formatter applied to rewritten files (default: gofmt).",
    ),
    click.option(
        "--config",
        "config_dir",
        type=click.Path(exists=True, file_okay=False, dir_okay=True),
        default=None,
        help="Directory holding .sortimports.toml (default: current directory).",
    ),
]


def package_options(func):
    for option in reversed(_package_options):
        func = option(func)
    return func


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Increase verbosity.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output.")
@click.version_option(version=VERSION, prog_name="go-sortimports CLI")
def cli(verbose: bool, quiet: bool) -> None:
    """Group and sort the import blocks of Go source files."""
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO
    # basicConfig is a no-op when the root logger already has handlers.
    logging.basicConfig(level=level, format="%(message)s")
    LOG.debug("%s, log level %s", VERSION, logging.getLevelName(level))


@cli.command(help="Print files whose imports are not sorted, without modifying them.")
@package_options
@click.option("--diff", "show_diff", is_flag=True, help="Show a unified diff for each file.")
def check(packages, local_prefix, strategy, formatter, config_dir, show_diff) -> None:
    config = _load_config(config_dir, local_prefix=local_prefix, strategy=strategy, formatter=formatter)
    sys.exit(_handle_packages(packages, config, apply_changes=False, show_diff=show_diff))


@cli.command(help="Sort imports in place and print the files that changed.")
@package_options
def fix(packages, local_prefix, strategy, formatter, config_dir) -> None:
    config = _load_config(config_dir, local_prefix=local_prefix, strategy=strategy, formatter=formatter)
    sys.exit(_handle_packages(packages, config, apply_changes=True))


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
