"""Top-level package for go-sortimports.

This package exposes the core API for grouping and sorting Go import blocks.
"""

from go_sortimports.core import expand_pattern
from go_sortimports.core import make_resolver
from go_sortimports.core import process_file
from go_sortimports.core import render_imports
from go_sortimports.core import run_code_formatter
from go_sortimports.core import sort_import_block
from go_sortimports.core import sort_imports
from go_sortimports.core import sort_package
from go_sortimports.parser import Import
from go_sortimports.parser import locate_import_block
from go_sortimports.parser import parse_imports
from go_sortimports.rules import MembershipResolver
from go_sortimports.rules import PrefixResolver
from go_sortimports.rules import Tier
from go_sortimports.rules import local_package_prefix


__all__ = [
    "Import",
    "Tier",
    "PrefixResolver",
    "MembershipResolver",
    "local_package_prefix",
    "locate_import_block",
    "parse_imports",
    "sort_import_block",
    "render_imports",
    "sort_imports",
    "run_code_formatter",
    "process_file",
    "sort_package",
    "make_resolver",
    "expand_pattern",
]
