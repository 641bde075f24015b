#!/usr/bin/env python3
"""Core utilities for go-sortimports. This module
sorts the grouped import block of Go source files, runs the result through
an external formatter, and walks packages to rewrite or report files.
"""
from __future__ import annotations
from dataclasses import dataclass
from dataclasses import field
import difflib
import logging
import os
from pathlib import Path
import subprocess
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple

from go_sortimports import build
from go_sortimports.errors import BuildMetadataError
from go_sortimports.errors import FormatError
from go_sortimports.errors import SortImportsError
from go_sortimports.parser import Import
from go_sortimports.parser import locate_import_block
from go_sortimports.parser import path_bytes
from go_sortimports.parser import quote
from go_sortimports.rules import PrefixResolver
from go_sortimports.rules import Resolver

LOG = logging.getLogger(__name__)

INDENT = "\t"

FORMATTER_COMMANDS: Dict[str, List[str]] = {
    "gofmt": ["gofmt"],
    "gofumpt": ["gofumpt"],
}

SKIPPED_DIRS = {"vendor", "testdata"}


def sort_import_block(imports: Iterable[Import], resolver: Resolver) -> List[Import]:
    """Sort imports by tier, then path bytes. Equal paths keep their original order."""
    return sorted(imports, key=lambda imp: (resolver.classify(imp.path), path_bytes(imp.path)))


def format_import(imp: Import) -> List[str]:
    """Return the lines of a single import, leading comments first."""
    lines = [INDENT + comment for comment in imp.leading_comments]
    parts = (imp.alias, quote(imp.path), imp.trailing_comment)
    lines.append(INDENT + " ".join(part for part in parts if part))
    return lines


def render_imports(imports: Sequence[Import], resolver: Resolver) -> str:
    """Render imports as the interior of an import block.

    A blank line is emitted wherever the tier changes.
    """
    lines: List[str] = []
    previous = None
    for imp in imports:
        tier = resolver.classify(imp.path)
        if previous is not None and tier != previous:
            lines.append("")
        previous = tier
        lines.extend(format_import(imp))
    return "\n" + "\n".join(lines) + "\n"


def sort_imports(source: str, resolver: Resolver) -> str:
    """Return ``source`` with its import block grouped and sorted.

    Sources without an import block, or with an empty one, are returned
    unchanged.

    Raises:
        ImportBlockError: The import block cannot be parsed.
    """
    block = locate_import_block(source)
    if block is None:
        return source
    imports = block.parse_imports()
    if not imports:
        return source
    LOG.debug("Sorting %d imports", len(imports))
    return block.replace_body(render_imports(sort_import_block(imports, resolver), resolver))


def run_code_formatter(source: str, formatter: Optional[str] = "gofmt") -> str:
    """Pipe ``source`` through an external Go formatter.

    Args:
        source: Go source text.
        formatter: One of 'gofmt' or 'gofumpt'; None or 'none' returns the
            source as is.
    """
    if formatter is None or formatter == "none":
        return source
    try:
        cmd = FORMATTER_COMMANDS[formatter]
    except KeyError:
        raise FormatError(f"unknown formatter {formatter!r}") from None

    try:
        proc = subprocess.run(cmd, input=source, capture_output=True, text=True, encoding="utf-8", check=False)
    except FileNotFoundError:
        raise FormatError(f"{formatter} not found. Install it or use `--formatter none`.") from None
    if proc.returncode != 0:
        raise FormatError(proc.stderr.strip() or f"{formatter} exited with status {proc.returncode}")
    return proc.stdout


@dataclass
class FileChange:
    path: Path
    original: str
    updated: str

    def diff(self) -> str:
        """Return a unified diff from the original to the updated source."""
        return "".join(
            difflib.unified_diff(
                self.original.splitlines(keepends=True),
                self.updated.splitlines(keepends=True),
                fromfile=f"{self.path}.orig",
                tofile=str(self.path),
            )
        )


def process_file(file_path: Path, resolver: Resolver, formatter: Optional[str] = "gofmt", apply: bool = False) -> Optional[FileChange]:
    """Sort the imports of a single Go file.

    The file is rewritten only when ``apply`` is True and its content changed.
    Returns the change, or None if the file is already sorted.
    """
    path_obj = Path(file_path)
    original = path_obj.read_bytes().decode("utf-8")
    updated = run_code_formatter(sort_imports(original, resolver), formatter)
    if updated == original:
        return None

    if apply:
        LOG.debug("Writing %s", path_obj)
        path_obj.write_bytes(updated.encode("utf-8"))
    return FileChange(path_obj, original, updated)


def iter_go_files(package_dir: Path) -> Iterator[Path]:
    """Yield the Go files directly inside ``package_dir`` in name order."""
    for path in sorted(Path(package_dir).iterdir()):
        if path.suffix == ".go" and path.is_file():
            yield path


def _skip_dir(name: str) -> bool:
    return name in SKIPPED_DIRS or name.startswith((".", "_"))


def _walk_packages(root: Path) -> Iterator[Path]:
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(name for name in dirnames if not _skip_dir(name))
        if any(name.endswith(".go") for name in filenames):
            yield Path(dirpath)


def expand_pattern(pattern: str, cwd: Optional[Path] = None) -> List[Path]:
    """Expand a package argument into package directories.

    ``dir/...`` matches every package below ``dir``; a directory names
    itself; anything else is looked up as an import path with the go tool.

    Raises:
        BuildMetadataError: The pattern names nothing that can be read.
    """
    cwd = Path(cwd) if cwd is not None else Path.cwd()
    if pattern == "..." or pattern.endswith("/..."):
        root = cwd / (pattern[: -len("...")] or ".")
        if not root.is_dir():
            raise BuildMetadataError(f"cannot read {pattern!r}: not a directory")
        return list(_walk_packages(root))

    directory = cwd / pattern
    if directory.is_dir():
        return [directory]
    if pattern.startswith((".", "/")):
        raise BuildMetadataError(f"cannot read package {pattern!r}: not a directory")
    return [build.find_package_dir(pattern, cwd)]


def make_resolver(package_dir: Path, strategy: str = "heuristic", local_prefix: Optional[str] = None) -> Resolver:
    """Build the resolver used for every file of one package.

    An explicit ``local_prefix`` takes precedence over both strategies.
    """
    if local_prefix is not None:
        return PrefixResolver(local_prefix)
    if strategy == "go-list":
        return build.resolve_membership(package_dir).resolver()
    return PrefixResolver.for_package(build.find_import_path(package_dir))


@dataclass
class PackageReport:
    package_dir: Path
    changes: List[FileChange] = field(default_factory=list)
    warnings: List[Tuple[Path, str]] = field(default_factory=list)


def sort_package(package_dir: Path, resolver: Resolver, formatter: Optional[str] = "gofmt", apply: bool = False) -> PackageReport:
    """Process every Go file of a package.

    A file that cannot be processed is recorded as a warning and skipped;
    the remaining files are still handled.
    """
    report = PackageReport(Path(package_dir))
    try:
        files = list(iter_go_files(package_dir))
    except OSError as exc:
        report.warnings.append((Path(package_dir), f"cannot read directory: {exc}"))
        return report

    for file_path in files:
        try:
            change = process_file(file_path, resolver, formatter, apply=apply)
        except (SortImportsError, OSError, UnicodeDecodeError) as exc:
            report.warnings.append((file_path, str(exc)))
            continue
        if change is not None:
            report.changes.append(change)
    return report
