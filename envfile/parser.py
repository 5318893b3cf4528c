"""Parser for `.env`-style text.

Rules:
  - Lines starting with '#' are comments and are removed entirely
  - Lines made of just a line terminator are removed
  - Every remaining `KEY=VALUE` line is kept; the key ends at the first '='
  - One leading and one trailing quote (' or ") are stripped from the value
  - A literal backslash-n in the value becomes a newline
  - Values coerce to a number, then `true`/`false`, else stay strings
  - Later duplicate keys overwrite earlier ones

Lines without '=' (or with an empty key) are ignored, never reported.
"""

from __future__ import annotations

import math
import re
from typing import Dict, List, Optional, Union

from .common.io import to_plain_data
from .common.logging import get_logger

Scalar = Union[str, int, float, bool]
Environment = Dict[str, Scalar]

logger = get_logger(__name__, stage="parse")

# A line and its terminator; the last line may have none.
_LINE_SPLIT_RE = re.compile(r"[^\r\n\u2028\u2029]*(?:\r\n|[\r\n\u2028\u2029])|[^\r\n\u2028\u2029]+\Z")
_LINE_TERMINATORS = "\r\n\u2028\u2029"

_ENV_LINE_RE = re.compile(r"(.+?)=(.*)")
_QUOTE_RE = re.compile(r"\A['\"]|['\"]\Z")

_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_RADIX_RE = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)")
_INFINITY_RE = re.compile(r"[+-]?Infinity")
# JavaScript trim() also drops the byte order mark.
_TRIM_RE = re.compile(r"\A[\s\ufeff]+|[\s\ufeff]+\Z")


def _split_lines(text: str) -> List[str]:
    return _LINE_SPLIT_RE.findall(text)


def _without_terminator(line: str) -> str:
    return line.rstrip(_LINE_TERMINATORS)


def _trim(text: str) -> str:
    return _TRIM_RE.sub("", text)


def _clamp_int(n: int) -> Union[int, float]:
    # Past the double range the value is infinite, as Number() would give.
    if n.bit_length() > 1024:
        return math.inf if n > 0 else -math.inf
    return n


def to_number(text: str) -> Optional[Union[int, float]]:
    """Convert a numeric literal to int/float, or return None.

    Accepts what JavaScript's `Number()` accepts for config values: decimal
    literals with optional sign/fraction/exponent, unsigned 0x/0o/0b integers
    and `Infinity`. Surrounding whitespace is ignored; a blank string is not
    a number.
    """

    s = _trim(text)
    if not s:
        return None
    if _RADIX_RE.fullmatch(s):
        return _clamp_int(int(s, 0))
    if _DECIMAL_RE.fullmatch(s):
        if any(c in s for c in ".eE"):
            return float(s)
        try:
            return _clamp_int(int(s))
        except ValueError:
            # too many digits for int(); float() saturates instead
            return float(s)
    if _INFINITY_RE.fullmatch(s):
        return float(s.replace("Infinity", "inf"))
    return None


def coerce_value(value: str) -> Scalar:
    """Coerce an unquoted value: number, then true, then false, else string."""

    if value != "":
        number = to_number(value)
        if number is not None:
            return number
    if value == "true":
        return True
    if value == "false":
        return False
    return value


def strip_comments(text: str) -> str:
    """Remove every line whose first character is '#'."""

    return "".join(line for line in _split_lines(text) if not line.startswith("#"))


def strip_empty_lines(text: str) -> str:
    """Remove lines that consist of only a line terminator."""

    return "".join(line for line in _split_lines(text) if _without_terminator(line))


def parse_env_vars(text: str) -> Environment:
    """Parse every `KEY=VALUE` line into a typed mapping."""

    out: Environment = {}
    for raw in _split_lines(text):
        m = _ENV_LINE_RE.fullmatch(_without_terminator(raw))
        if m is None:
            continue
        key = _trim(m.group(1))
        if not key:
            continue
        value = _QUOTE_RE.sub("", _trim(m.group(2)))
        value = value.replace("\\n", "\n")
        out[key] = coerce_value(value)
    return to_plain_data(out)


def parse_env_string(text: Union[str, bytes]) -> Environment:
    """Strip comments and empty lines, then parse the remaining lines."""

    if isinstance(text, bytes):
        text = text.decode("utf-8")
    text = strip_comments(text)
    text = strip_empty_lines(text)
    env = parse_env_vars(text)
    logger.debug("parsed %d env vars", len(env))
    return env
