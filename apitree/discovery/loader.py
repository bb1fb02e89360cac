"""Discover suite declaration files under a directory tree.

Walks the tree for files with the declaration filename (``apitree.yml`` by
default), parses each as YAML, and turns it into a Suite. A file that cannot
be read or parsed is reported on stderr and skipped so that one broken
declaration does not hide the others.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml

from apitree.declaration.suite import DeclarationError, Suite

DEFAULT_DECLARATION_FILENAME = "apitree.yml"


def find_declaration_files(
    root: Path, filename: str = DEFAULT_DECLARATION_FILENAME
) -> list[Path]:
    """Recursively find declaration files below ``root``.

    Directories are visited in sorted order so discovery is deterministic.
    Hidden directories (``.git``, ``.venv`` ...) are not descended into.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
        if filename in filenames:
            found.append(Path(dirpath) / filename)
    return found


def suite_name_for(path: Path, root: Path) -> str:
    """Default suite name: the declaration's directory relative to ``root``.

    A declaration directly in ``root`` is named after the root directory.
    """
    parent = path.parent
    try:
        relative = parent.resolve().relative_to(root.resolve())
    except ValueError:
        return parent.name
    if str(relative) in ("", "."):
        return root.resolve().name
    return relative.as_posix()


def load_suite(path: Path, name: str) -> Suite:
    """Parse one declaration file into a Suite.

    Raises:
        DeclarationError: If the file cannot be read or is not a valid
            suite declaration.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DeclarationError(f"cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DeclarationError(f"invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    try:
        return Suite.from_declaration(data, name=name, source=path)
    except DeclarationError as e:
        raise DeclarationError(f"{path}: {e}") from e


def discover_suites(
    root: Path, filename: str = DEFAULT_DECLARATION_FILENAME
) -> list[Suite]:
    """Load every declaration found below ``root``.

    Args:
        root: Directory to search.
        filename: Declaration filename to look for.

    Returns:
        Successfully loaded suites, in discovery order.
    """
    suites: list[Suite] = []
    for path in find_declaration_files(root, filename):
        try:
            suites.append(load_suite(path, suite_name_for(path, root)))
        except DeclarationError as e:
            print(f"Warning: skipping declaration: {e}", file=sys.stderr)
    return suites
