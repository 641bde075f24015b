"""Package metadata for go-sortimports.

Import paths can be worked out without the go tool by reading ``go.mod`` or
by looking at ``$GOPATH``. Module membership of imports, used by the
``go-list`` strategy, comes from running ``go list``.
"""

from __future__ import annotations
from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import subprocess
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import List
from typing import Optional
from typing import Sequence

from go_sortimports.errors import BuildMetadataError
from go_sortimports.parser import split_comment
from go_sortimports.parser import unquote
from go_sortimports.rules import MembershipResolver

LOG = logging.getLogger(__name__)


def find_go_mod(directory: Path) -> Optional[Path]:
    """Return the nearest go.mod at or above ``directory``."""
    for parent in (directory, *directory.parents):
        candidate = parent / "go.mod"
        if candidate.is_file():
            return candidate
    return None


def read_module_path(go_mod: Path) -> str:
    """Return the module path declared by the ``module`` directive of a go.mod file."""
    try:
        content = go_mod.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise BuildMetadataError(f"cannot read {go_mod}: {exc}") from exc
    for line in content.splitlines():
        code, _ = split_comment(line.strip())
        fields = code.split()
        if len(fields) != 2 or fields[0] != "module":
            continue
        if fields[1][0] in "\"`":
            try:
                return unquote(fields[1])
            except ValueError:
                raise BuildMetadataError(f"{go_mod}: invalid module path {fields[1]}") from None
        return fields[1]
    raise BuildMetadataError(f"{go_mod}: no module directive")


def gopath_entries() -> List[Path]:
    """Return the GOPATH workspaces, defaulting to ~/go like the go tool."""
    value = os.environ.get("GOPATH", "")
    entries = [Path(entry) for entry in value.split(os.pathsep) if entry]
    return entries or [Path.home() / "go"]


def find_import_path(package_dir: Path) -> str:
    """Work out the import path of the package in ``package_dir``.

    The nearest go.mod wins. Without one the directory must lie below the
    ``src`` directory of a GOPATH workspace.

    Raises:
        BuildMetadataError: Neither source of information applies.
    """
    directory = Path(package_dir).resolve()
    go_mod = find_go_mod(directory)
    if go_mod is not None:
        module_path = read_module_path(go_mod)
        relative = directory.relative_to(go_mod.parent)
        if not relative.parts:
            return module_path
        return f"{module_path}/{relative.as_posix()}"

    for workspace in gopath_entries():
        try:
            relative = directory.relative_to((workspace / "src").resolve())
        except ValueError:
            continue
        if relative.parts:
            return relative.as_posix()
    raise BuildMetadataError(f"cannot determine import path of {directory}")


def decode_json_stream(data: str) -> List[Dict[str, Any]]:
    """Decode the concatenated JSON objects printed by ``go list -json``."""
    decoder = json.JSONDecoder()
    objects: List[Dict[str, Any]] = []
    pos = 0
    while True:
        while pos < len(data) and data[pos].isspace():
            pos += 1
        if pos >= len(data):
            return objects
        try:
            obj, pos = decoder.raw_decode(data, pos)
        except json.JSONDecodeError as exc:
            raise BuildMetadataError(f"cannot decode go list output: {exc}") from exc
        objects.append(obj)


def go_list(args: Sequence[str], cwd: Optional[Path] = None, go: str = "go") -> List[Dict[str, Any]]:
    """Run ``go list -e -json`` with ``args`` and return the decoded packages."""
    cmd = [go, "list", "-e", "-json", *args]
    LOG.debug("Running %s in %s", " ".join(cmd), cwd or ".")
    try:
        proc = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True, check=False)
    except FileNotFoundError:
        raise BuildMetadataError(f"{go} not found. Install Go or use the heuristic strategy.") from None
    if proc.returncode != 0:
        raise BuildMetadataError(f"go list failed: {proc.stderr.strip()}")
    return decode_json_stream(proc.stdout)


@dataclass(frozen=True)
class Membership:
    """Which imports of a package belong to its own module."""

    import_path: str
    module_path: str
    local: FrozenSet[str]
    standard: FrozenSet[str]
    known: FrozenSet[str]

    def resolver(self) -> MembershipResolver:
        return MembershipResolver(self.module_path, self.local, self.standard, self.known)


def _module_path(package: Dict[str, Any]) -> Optional[str]:
    module = package.get("Module") or {}
    return module.get("Path")


def resolve_membership(package_dir: Path, go: str = "go") -> Membership:
    """Ask the go tool which imports of ``package_dir`` are part of its module.

    Imports the go tool cannot resolve are left out of ``known``.
    """
    packages = go_list(["."], cwd=package_dir, go=go)
    if not packages:
        raise BuildMetadataError(f"go list reported nothing for {package_dir}")
    package = packages[0]
    module_path = _module_path(package)
    if not module_path:
        raise BuildMetadataError(f"{package_dir} does not belong to a module")

    imports = set()
    for key in ("Imports", "TestImports", "XTestImports"):
        imports.update(package.get(key) or ())
    imports.discard("C")

    local = set()
    standard = set()
    known = set()
    if imports:
        for dep in go_list(sorted(imports), cwd=package_dir, go=go):
            path = dep.get("ImportPath")
            if not path:
                continue
            if dep.get("Standard"):
                standard.add(path)
            elif _module_path(dep) is None:
                LOG.debug("No module information for %s", path)
                continue
            elif _module_path(dep) == module_path:
                local.add(path)
            known.add(path)

    LOG.debug("%s: %d local and %d standard imports", package.get("ImportPath"), len(local), len(standard))
    return Membership(
        import_path=package.get("ImportPath", ""),
        module_path=module_path,
        local=frozenset(local),
        standard=frozenset(standard),
        known=frozenset(known),
    )


def find_package_dir(import_path: str, cwd: Optional[Path] = None, go: str = "go") -> Path:
    """Return the source directory of the package ``import_path``."""
    packages = go_list(["-find", import_path], cwd=cwd, go=go)
    if not packages or not packages[0].get("Dir"):
        error = packages[0].get("Error", {}).get("Err") if packages else None
        raise BuildMetadataError(f"cannot find package {import_path!r}" + (f": {error}" if error else ""))
    return Path(packages[0]["Dir"])
