"""Load an env file into an `Environment`.

Two kinds of files are supported:
  - importable modules (by default `.py` and `.json`) that export the
    configuration object directly
  - everything else, read as `.env` text and handed to `parse_env_string`

Module loading goes through a `ModuleLoader` so tests (or hosts with their
own import rules) can inject one. Nothing here reads or writes `os.environ`.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import os
from pathlib import Path
from types import ModuleType
from typing import Any, Dict, Mapping, Optional, Protocol, Union

from .common.config import LoaderConfig, load_loader_config
from .common.io import read_json, read_text
from .common.logging import get_logger
from .parser import Environment, parse_env_string

logger = get_logger(__name__, stage="load")

PathLike = Union[str, os.PathLike]

_module_counter = itertools.count()


class PathError(FileNotFoundError):
    """Raised when no file exists at the resolved env file path."""

    def __init__(self, path: PathLike) -> None:
        self.path = os.fspath(path)
        super().__init__(f"Invalid env file path ({self.path}).")


class ModuleLoader(Protocol):
    async def load(self, path: Path, *, json_module: bool) -> Any:
        ...


class SourceModuleLoader:
    """Default module loader.

    JSON files are decoded and wrapped as `{"default": payload}`. Python files
    are compiled and executed into a fresh module object each time. Neither
    `sys.modules` nor `__pycache__` is touched, so repeated loads see the
    file's current contents and nothing is written next to it.
    """

    def __init__(self, *, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    async def load(self, path: Path, *, json_module: bool) -> Any:
        if json_module:
            payload = await asyncio.to_thread(read_json, path, encoding=self.encoding)
            return {"default": payload}
        return await asyncio.to_thread(self._exec_module, path)

    @staticmethod
    def _exec_module(path: Path) -> ModuleType:
        module = ModuleType(f"_envfile_module_{next(_module_counter)}")
        module.__file__ = str(path)
        code = compile(path.read_bytes(), str(path), "exec")
        exec(code, module.__dict__)
        return module


def resolve_env_file_path(path: PathLike) -> Path:
    """Expand a leading `~` and make the path absolute against the cwd."""

    return Path(os.path.abspath(os.path.expanduser(os.fspath(path))))


def _module_namespace(module: ModuleType) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in vars(module).items():
        if k.startswith("_"):
            continue
        if isinstance(v, ModuleType) or callable(v):
            continue
        out[k] = v
    return out


def unwrap_module_value(res: Any) -> Any:
    """Pick the `default` export if there is one, else the whole namespace."""

    if isinstance(res, Mapping):
        return res["default"] if "default" in res else res
    if hasattr(res, "default"):
        return getattr(res, "default")
    if isinstance(res, ModuleType):
        return _module_namespace(res)
    return res


async def get_env_file_vars(
    env_file_path: PathLike,
    *,
    loader: Optional[ModuleLoader] = None,
    config: Optional[LoaderConfig] = None,
) -> Environment:
    """Get the environment vars from an env file.

    Raises:
        PathError: if nothing exists at the resolved path.
    """

    cfg = config or load_loader_config()
    absolute_path = resolve_env_file_path(env_file_path)
    log = logger.bind(env_file=str(absolute_path))

    if not await asyncio.to_thread(absolute_path.is_file):
        raise PathError(env_file_path)

    ext = absolute_path.suffix.lower()
    if cfg.is_module_extension(ext):
        log.debug("loading as module (ext=%s)", ext)
        module_loader = loader or SourceModuleLoader(encoding=cfg.encoding)
        res = await module_loader.load(absolute_path, json_module=ext == ".json")
        env = unwrap_module_value(res)
        if inspect.isawaitable(env):
            env = await env
    else:
        log.debug("loading as env text")
        text = await asyncio.to_thread(read_text, absolute_path, encoding=cfg.encoding)
        env = parse_env_string(text)

    log.debug("loaded %d keys", len(env) if isinstance(env, Mapping) else 0)
    return env


def load_env_file(env_file_path: PathLike, **kwargs: Any) -> Environment:
    """Synchronous wrapper around `get_env_file_vars`."""

    return asyncio.run(get_env_file_vars(env_file_path, **kwargs))
