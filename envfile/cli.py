"""envfile command line (inspect what an env file resolves to)."""

from __future__ import annotations

import argparse
import json
import math
from pathlib import Path
from typing import Any, Mapping, Optional

from rich.console import Console
from rich.table import Table

from .common.logging import setup_logging
from .loader import PathError, load_env_file


def _format_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, default=str)


def format_dotenv(env: Mapping[str, Any]) -> str:
    """Render a mapping back to `KEY=value` lines."""

    lines = []
    for key, value in env.items():
        text = _format_scalar(value).replace("\n", "\\n")
        if isinstance(value, str) and (text != text.strip() or text.startswith(("'", '"'))):
            text = f'"{text}"'
        lines.append(f"{key}={text}")
    return "\n".join(lines)


def _render_table(env: Mapping[str, Any], *, title: str) -> Table:
    table = Table(title=title)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_column("Type", style="dim")
    for key, value in env.items():
        table.add_row(str(key), _format_scalar(value), type(value).__name__)
    return table


def cmd_show(args: argparse.Namespace) -> None:
    console = Console()
    try:
        env = load_env_file(args.path)
    except PathError as e:
        Console(stderr=True).print(str(e), style="red", markup=False, highlight=False)
        raise SystemExit(2) from e

    if args.format == "json":
        console.print_json(json.dumps(env, ensure_ascii=False, default=str))
    elif args.format == "dotenv":
        console.out(format_dotenv(env), highlight=False)
    else:
        console.print(_render_table(env, title=str(args.path)))


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="envfile")
    p.add_argument("--log-level", default="WARNING", help="logging level (default: WARNING)")
    p.add_argument("--log-dir", default=None, help="also write a rotating log file under this directory")
    sub = p.add_subparsers(dest="cmd", required=True)

    pshow = sub.add_parser("show", help="Load an env file and print the typed values")
    pshow.add_argument("path", help="env file path (.env text, .py or .json module)")
    pshow.add_argument("--format", choices=["table", "json", "dotenv"], default="table")
    pshow.set_defaults(func=cmd_show)

    return p


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_dir=Path(args.log_dir) if args.log_dir else None)
    args.func(args)
