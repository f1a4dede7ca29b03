"""IO shaping: parsing traffic and policy listings and building policy commands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from eosadmin.textparse import strip_preamble


class IOShapingMode(IntEnum):
    """What IO shaping entries are keyed by."""

    APPS = 0
    USERS = 1
    GROUPS = 2


class IOShapingUnsupportedError(RuntimeError):
    """The connected EOS instance has no ``io shaping`` subcommand."""

    def __init__(self, message: str = "io shaping is not supported by this EOS version") -> None:
        super().__init__(message)


@dataclass(frozen=True)
class IOShapingRecord:
    """Observed traffic rates for one app, user or group."""

    id: str
    type: str
    window_sec: int
    read_bps: float
    write_bps: float
    read_iops: float
    write_iops: float


@dataclass(frozen=True)
class IOShapingPolicyRecord:
    """A configured shaping policy."""

    id: str
    type: str
    enabled: bool
    limit_read_bytes_per_sec: float
    limit_write_bytes_per_sec: float
    reservation_read_bytes_per_sec: float
    reservation_write_bytes_per_sec: float


@dataclass(frozen=True)
class IOShapingPolicyUpdate:
    """The values to set on a shaping policy."""

    mode: IOShapingMode
    id: str
    enabled: bool = False
    limit_read_bytes_per_sec: int = 0
    limit_write_bytes_per_sec: int = 0
    reservation_read_bytes_per_sec: int = 0
    reservation_write_bytes_per_sec: int = 0


def looks_unsupported(error: object, output: str | bytes) -> bool:
    """True when a failure is EOS rejecting ``io shaping`` as an unknown subcommand."""
    if error is None:
        return False
    if "exit status 22" not in str(error):
        return False
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    if "usage:" not in output:
        return False
    return "io shaping" not in output and "io_shaping" not in output


def io_shaping_list_args(mode: IOShapingMode) -> list[str]:
    """Build the ``eos io shaping ls`` command; unknown modes list apps."""
    flag = {IOShapingMode.USERS: "--users", IOShapingMode.GROUPS: "--groups"}.get(mode, "--apps")
    return ["eos", "io", "shaping", "ls", flag, "--json", "--window", "5"]


def _obj(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {type(value).__name__}")
    return value


def _str(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"expected a string, got {value!r}")
    return value


def _int(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    return value


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _bool(value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"expected a boolean, got {value!r}")
    return value


def _json_list(output: str | bytes) -> list[dict[str, Any]]:
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    payload = json.loads(strip_preamble(output))
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array")
    return [_obj(item) for item in payload]


def parse_io_shaping_json(output: str | bytes) -> list[IOShapingRecord]:
    """Parse ``eos io shaping ls --json``; raises ValueError on bad input."""
    try:
        return [
            IOShapingRecord(
                id=_str(item.get("id")),
                type=_str(item.get("type")),
                window_sec=_int(item.get("window_sec")),
                read_bps=_float(item.get("read_rate_bps")),
                write_bps=_float(item.get("write_rate_bps")),
                read_iops=_float(item.get("read_iops")),
                write_iops=_float(item.get("write_iops")),
            )
            for item in _json_list(output)
        ]
    except ValueError as exc:
        raise ValueError(f"parse io shaping: {exc}") from exc


def parse_io_shaping_policies_json(output: str | bytes) -> list[IOShapingPolicyRecord]:
    """Parse ``eos io shaping policy ls --json``; raises ValueError on bad input."""
    try:
        return [
            IOShapingPolicyRecord(
                id=_str(item.get("id")),
                type=_str(item.get("type")),
                enabled=_bool(item.get("is_enabled")),
                limit_read_bytes_per_sec=_float(item.get("limit_read_bytes_per_sec")),
                limit_write_bytes_per_sec=_float(item.get("limit_write_bytes_per_sec")),
                reservation_read_bytes_per_sec=_float(item.get("reservation_read_bytes_per_sec")),
                reservation_write_bytes_per_sec=_float(item.get("reservation_write_bytes_per_sec")),
            )
            for item in _json_list(output)
        ]
    except ValueError as exc:
        raise ValueError(f"parse io shaping policy: {exc}") from exc


def io_shaping_policy_target_flag(mode: IOShapingMode | int) -> str:
    """Return the policy target flag for a mode; raises ValueError for unknown modes."""
    flags = {
        IOShapingMode.APPS: "--app",
        IOShapingMode.USERS: "--uid",
        IOShapingMode.GROUPS: "--gid",
    }
    if isinstance(mode, bool) or mode not in flags:
        raise ValueError(f"unsupported io shaping mode {int(mode)}")
    return flags[IOShapingMode(mode)]


def _rate(value: int) -> str:
    if value < 0:
        raise ValueError(f"io shaping rate must not be negative, got {value}")
    return str(value)


def io_shaping_policy_set_args(update: IOShapingPolicyUpdate) -> list[str]:
    """Build ``eos io shaping policy set`` for an update."""
    target_flag = io_shaping_policy_target_flag(update.mode)
    if not update.id.strip():
        raise ValueError("io shaping policy id is required")
    return [
        "eos", "io", "shaping", "policy", "set",
        target_flag, update.id,
        "--enable" if update.enabled else "--disable",
        "--limit-read", _rate(update.limit_read_bytes_per_sec),
        "--limit-write", _rate(update.limit_write_bytes_per_sec),
        "--reservation-read", _rate(update.reservation_read_bytes_per_sec),
        "--reservation-write", _rate(update.reservation_write_bytes_per_sec),
    ]


def io_shaping_policy_remove_args(mode: IOShapingMode | int, policy_id: str) -> list[str]:
    """Build ``eos io shaping policy rm``."""
    target_flag = io_shaping_policy_target_flag(mode)
    if not policy_id.strip():
        raise ValueError("io shaping policy id is required")
    return ["eos", "io", "shaping", "policy", "rm", target_flag, policy_id]