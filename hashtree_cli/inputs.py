"""
CLI Item Loading

Reads the ordered item sequence for build/prove from positional
arguments, a JSON array file, or a newline-delimited text file.
"""

from __future__ import annotations

import json
import sys
from argparse import Namespace
from pathlib import Path
from typing import Any

from core.schemas.canonical import dumps_canonical


def normalize_item(item: Any) -> str:
    """
    Strings stay as-is; any other JSON value becomes its canonical JSON text.

    Strings are not quoted so a JSON array of names builds the same tree as
    the same names given on the command line or in a text file. As a result
    a non-string value and the string holding its JSON text share a leaf:
    1 and "1", or true and "true", normalize to the same item.
    """
    if isinstance(item, str):
        return item
    return dumps_canonical(item)


def read_items_file(path: str) -> list[str]:
    """
    Read items from a file ("-" for stdin).

    A .json file (or any content starting with "[") is parsed as a JSON
    array; anything else is split into lines, one item per line.
    """
    if path == "-":
        text = sys.stdin.read()
    else:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Items file not found: {file_path}")
        text = file_path.read_text(encoding="utf-8")

    if path.endswith(".json") or text.lstrip().startswith("["):
        data = json.loads(text)
        if not isinstance(data, list):
            raise ValueError(f"Items file must contain a JSON array: {path}")
        return [normalize_item(item) for item in data]

    return text.splitlines()


def load_items(args: Namespace) -> list[str]:
    """Collect items from --file or positional arguments."""
    if getattr(args, "file", None):
        return read_items_file(args.file)
    return list(getattr(args, "items", None) or [])
