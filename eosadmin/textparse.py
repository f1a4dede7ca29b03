"""Small text helpers for EOS command output, shell quoting and host names."""

from __future__ import annotations

import json
import math
import posixpath
import re
from typing import Any

_UINT64_MAX = (1 << 64) - 1
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1

_SHELL_SAFE_ARG = re.compile(r"[A-Za-z0-9_@%+=:,./-]+")
_NS_STAT_LINE = re.compile(r"^ALL\s+(.+?)\s{2,}(.+)$", re.ASCII)
_DIGITS = re.compile(r"[0-9]+", re.ASCII)
_SIGNED_DIGITS = re.compile(r"[+-]?[0-9]+", re.ASCII)
_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?:inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

_UNIT_MULTIPLIERS = {
    "KB": 1024,
    "MB": 1024**2,
    "GB": 1024**3,
    "TB": 1024**4,
}

_WHITESPACE = " \t\r\n"


def flexible_string(value: Any) -> str:
    """Render a decoded JSON value as text; strings pass through, null is empty."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    return json.dumps(value, separators=(",", ":"))


def strip_preamble(text: str | bytes) -> str:
    """Return output from the first line that looks like JSON onwards.

    EOS sometimes prints ``* <message>`` lines before the JSON payload.
    Output with no such line is returned unchanged.
    """
    if isinstance(text, bytes):
        text = text.decode("utf-8", errors="replace")
    for line in text.splitlines(keepends=True) if "\r" in text else text.split("\n"):
        trimmed = line.strip()
        if trimmed.startswith(("[", "{")):
            idx = text.find(trimmed)
            if idx >= 0:
                return text[idx:].strip()
    return text


def shell_quote(s: str) -> str:
    """Wrap ``s`` in single quotes, escaping embedded single quotes."""
    return "'" + s.replace("'", "'\\''") + "'"


def shell_join(args: list[str]) -> str:
    """Quote every argument and join with spaces."""
    return " ".join(shell_quote(arg) for arg in args)


def shell_display_join(args: list[str]) -> str:
    """Join arguments, quoting only those that are not shell-safe."""
    return " ".join(
        arg if arg and _SHELL_SAFE_ARG.fullmatch(arg) else shell_quote(arg)
        for arg in args
    )


def _has_whitespace(text: str) -> bool:
    return any(ch in text for ch in _WHITESPACE)


def normalize_cluster_instance(target: str) -> str:
    """Extract the logical EOS instance name from an alias or host name."""
    target = target.strip()
    if not target or _has_whitespace(target):
        return ""

    at = target.rfind("@")
    if at != -1:
        target = target[at + 1 :]
    target = host_only(target)
    target = target.split(".")[0].strip()
    if not target:
        return ""

    for marker in ("-ns-", "-mgm-", "-qdb-", "-fst-"):
        idx = target.find(marker)
        if idx > 0:
            target = target[:idx]
            break
    for suffix in ("-ns", "-mgm", "-qdb", "-fst"):
        if target.endswith(suffix):
            target = target[: -len(suffix)]
            break

    if not target or _has_whitespace(target):
        return ""
    return target


def to_uint64(value: Any) -> int:
    """Convert a decoded JSON number to an unsigned 64-bit value; anything else is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value % (1 << 64)
    if isinstance(value, float):
        if not math.isfinite(value) or value < 0:
            return 0
        return min(int(value), _UINT64_MAX)
    return 0


def parse_labeled_values(output: str) -> dict[str, str]:
    """Parse ``ALL  <label>  <value>`` lines into a mapping."""
    values: dict[str, str] = {}
    for raw_line in output.split("\n"):
        match = _NS_STAT_LINE.match(raw_line.strip())
        if match:
            values[match.group(1).strip()] = match.group(2).strip()
    return values


def parse_uint(raw: str) -> int:
    """Parse the first whitespace-separated field as an unsigned integer, or 0."""
    fields = raw.split()
    if not fields or not _DIGITS.fullmatch(fields[0]):
        return 0
    return min(int(fields[0]), _UINT64_MAX)


def parse_human_bytes(raw: str) -> int:
    """Parse values such as ``586.30 MB`` into a byte count."""
    fields = raw.split()
    if len(fields) < 2 or not _FLOAT_PATTERN.fullmatch(fields[0]):
        return 0
    value = float(fields[0])
    result = value * _UNIT_MULTIPLIERS.get(fields[1].upper(), 1)
    if not math.isfinite(result) or result < 0:
        return 0
    return min(int(result), _UINT64_MAX)


def clean_path(raw_path: str) -> str:
    """Normalise a namespace path so that it is absolute and lexically clean."""
    if not raw_path:
        return "/"
    cleaned = posixpath.normpath(raw_path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    if not cleaned.startswith("/"):
        return "/" + cleaned
    return cleaned


def split_host_port(hp: str) -> tuple[str, int]:
    """Split ``host:port``; the port is 0 when absent or not a number."""
    parts = hp.split(":")
    host = parts[0]
    port = 0
    if len(parts) > 1 and _SIGNED_DIGITS.fullmatch(parts[1]):
        port = max(_INT64_MIN, min(int(parts[1]), _INT64_MAX))
    return host, port


def host_only(host_port: str) -> str:
    """Strip a trailing ``:port`` from a host string."""
    idx = host_port.rfind(":")
    if idx != -1:
        return host_port[:idx]
    return host_port


def ensure_root_prefix(target: str) -> str:
    """Prefix ``root@`` unless it is already there."""
    if target.startswith("root@"):
        return target
    return "root@" + target


def parse_eos_server_version(output: str | bytes) -> str:
    """Extract the server version from ``eos version`` or ``eos --version`` output."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    for line in output.split("\n"):
        line = line.strip()
        if line.startswith("EOS_SERVER_VERSION="):
            fields = line[len("EOS_SERVER_VERSION=") :].split()
            if fields:
                return fields[0]
        if line.startswith("EOS "):
            fields = line.split()
            if len(fields) >= 2:
                return fields[1]
    return ""