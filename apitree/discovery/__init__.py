"""Suite discovery: finding and parsing declaration files."""

from apitree.discovery.loader import discover_suites, find_declaration_files, load_suite

__all__ = [
    "discover_suites",
    "find_declaration_files",
    "load_suite",
]
