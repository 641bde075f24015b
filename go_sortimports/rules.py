"""Rules module for go-sortimports.

This module decides which tier an import path belongs to: the standard
library, third-party code, or the project being processed.

Two resolvers are provided. ``PrefixResolver`` guesses the project root from
the package import path using an ordered table of hosting conventions.
``MembershipResolver`` uses module membership reported by the go tool.
"""

import enum
import re
from typing import FrozenSet, Iterable, List, NamedTuple, Optional


class Tier(enum.IntEnum):
    """Import groups, in output order."""

    STANDARD = 0
    EXTERNAL = 1
    LOCAL = 2


class PrefixRule(NamedTuple):
    name: str
    pattern: "re.Pattern[str]"

    def extract(self, import_path: str) -> Optional[str]:
        match = self.pattern.match(import_path)
        if match is None:
            return None
        return match.group(1)


def _rule(name: str, pattern: str) -> PrefixRule:
    return PrefixRule(name, re.compile(pattern))


# First match wins, so narrower conventions must come before broader ones.
PREFIX_RULES: List[PrefixRule] = [
    _rule("gopkg.in", r"^(gopkg\.in/([^/]*/)?[^/]+\.v[0-9]+)(/|$)"),
    _rule("github", r"^(github\.com/[^/]+/[^/]+)"),
    _rule("launchpad", r"^(launchpad\.net/[^/]+)"),
    _rule("google-code", r"^(code\.google\.com/p/[^/]+)"),
    _rule("generic", r"^((?!gopkg\.in/)[a-z]+\.[^/]+/[^/]+)"),
]


def local_package_prefix(import_path: str, rules: Iterable[PrefixRule] = PREFIX_RULES) -> str:
    """Return the project root of ``import_path``, or "" if no rule matches.

    Args:
        import_path: Import path of the package being processed.
        rules: Ordered rule table; the first rule that matches wins.
    """
    for rule in rules:
        prefix = rule.extract(import_path)
        if prefix is not None:
            return prefix
    return ""


def has_path_prefix(path: str, prefix: str) -> bool:
    """Report whether ``path`` is ``prefix`` or lies below it."""
    if not prefix or not path.startswith(prefix):
        return False
    return len(path) == len(prefix) or path[len(prefix)] == "/"


class Resolver:
    """Assigns a tier to import paths."""

    def is_local(self, path: str) -> bool:
        raise NotImplementedError

    def classify(self, path: str) -> Tier:
        if self.is_local(path):
            return Tier.LOCAL
        if "." in path:
            return Tier.EXTERNAL
        return Tier.STANDARD


class PrefixResolver(Resolver):
    """Heuristic resolver matching paths against a local package prefix."""

    def __init__(self, prefix: str) -> None:
        self.prefix = prefix

    @classmethod
    def for_package(cls, import_path: str) -> "PrefixResolver":
        return cls(local_package_prefix(import_path))

    def is_local(self, path: str) -> bool:
        return has_path_prefix(path, self.prefix)

    def __repr__(self) -> str:
        return f"PrefixResolver({self.prefix!r})"


class MembershipResolver(Resolver):
    """Authoritative resolver backed by module metadata from the go tool.

    Args:
        module_path: Path of the module the package belongs to.
        local: Import paths reported as belonging to that module.
        standard: Import paths reported as standard library packages.
        known: Every import path the metadata has an answer for. Paths
            outside this set fall back to a prefix test on ``module_path``.
    """

    def __init__(
        self,
        module_path: str,
        local: Iterable[str] = (),
        standard: Iterable[str] = (),
        known: Optional[Iterable[str]] = None,
    ) -> None:
        self.module_path = module_path
        self.local: FrozenSet[str] = frozenset(local)
        self.standard: FrozenSet[str] = frozenset(standard)
        if known is None:
            known = self.local | self.standard
        self.known: FrozenSet[str] = frozenset(known)

    def is_local(self, path: str) -> bool:
        if path in self.local:
            return True
        if path in self.known:
            return False
        return has_path_prefix(path, self.module_path)

    def classify(self, path: str) -> Tier:
        if path in self.standard:
            return Tier.STANDARD
        return super().classify(path)

    def __repr__(self) -> str:
        return f"MembershipResolver({self.module_path!r}, {len(self.local)} local)"
