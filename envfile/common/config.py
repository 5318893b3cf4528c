"""Loader configuration for envfile.

Which extensions are treated as importable modules, and how plain env files
are decoded. Defaults can be overridden through environment variables:

Environment:
  - ENVFILE_MODULE_EXTENSIONS: comma-separated extensions, e.g. ".py,.json"
  - ENVFILE_ENCODING: text encoding for plain env files (default: utf-8)
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Tuple


DEFAULT_MODULE_EXTENSIONS: Tuple[str, ...] = (".py", ".json")
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class LoaderConfig:
    module_extensions: Tuple[str, ...] = DEFAULT_MODULE_EXTENSIONS
    encoding: str = DEFAULT_ENCODING

    def __post_init__(self) -> None:
        object.__setattr__(self, "module_extensions", normalize_extensions(self.module_extensions))

    def is_module_extension(self, ext: str) -> bool:
        return ext.lower() in self.module_extensions


def normalize_extensions(raw: Iterable[str]) -> Tuple[str, ...]:
    """Lowercase, de-duplicate and validate a list of extensions."""

    out: list[str] = []
    for item in raw:
        ext = (item or "").strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            raise ValueError(f"Module extension must start with '.': {item!r}")
        if ext not in out:
            out.append(ext)
    return tuple(out)


def load_loader_config(environ: Optional[Mapping[str, str]] = None) -> LoaderConfig:
    """Build a `LoaderConfig` from environment variables (or `environ`)."""

    env = os.environ if environ is None else environ

    raw_exts = (env.get("ENVFILE_MODULE_EXTENSIONS") or "").strip()
    module_extensions = normalize_extensions(raw_exts.split(",")) if raw_exts else DEFAULT_MODULE_EXTENSIONS

    encoding = (env.get("ENVFILE_ENCODING") or "").strip() or DEFAULT_ENCODING

    return LoaderConfig(module_extensions=module_extensions, encoding=encoding)
