"""Small IO helpers for envfile.

Text and JSON reads go through here so every branch of the loader decodes
files the same way.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_text(path: Path, *, encoding: str = "utf-8") -> str:
    """Read a whole file as text."""

    with path.open("r", encoding=encoding) as f:
        return f.read()


def read_json(path: Path, *, encoding: str = "utf-8") -> Any:
    """Read a JSON file and return the decoded Python object."""

    with path.open("r", encoding=encoding) as f:
        return json.load(f)


def to_plain_data(obj: Any) -> Any:
    """Return a deep copy of `obj` holding only JSON-representable values.

    Goes through a full dump/load so nothing but dicts, lists, strings,
    numbers, booleans and None survives.
    """

    return json.loads(json.dumps(obj, ensure_ascii=False))
