"""Spaces: parsing ``eos space ls`` and ``eos space status`` and building space commands."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from eosadmin.textparse import strip_preamble


@dataclass(frozen=True)
class SpaceRecord:
    """Summary of one space."""

    name: str
    type: str
    status: str
    groups: int
    num_files: int
    num_containers: int
    capacity_bytes: int
    used_bytes: int
    free_bytes: int


@dataclass(frozen=True)
class SpaceStatusRecord:
    """One configuration key of a space and its value."""

    key: str
    value: str


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


def _uint(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


def _decode(output: str | bytes) -> tuple[str, Any]:
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    return output, json.loads(strip_preamble(output))


def _result_list(payload: Any) -> list[Any]:
    result = _obj(payload).get("result") or []
    if not isinstance(result, list):
        raise ValueError("result is not a list")
    return result


def _space_from_json(item: Any) -> SpaceRecord:
    item = _obj(item)
    summary = _obj(item.get("sum"))
    statfs = _obj(_obj(summary.get("stat")).get("statfs"))
    return SpaceRecord(
        name=_str(item.get("name")),
        type=_str(item.get("type")),
        status="active",
        groups=_uint(_obj(item.get("cfg")).get("groupsize")),
        num_files=_uint(statfs.get("files")),
        num_containers=_uint(summary.get("n_rw")),
        capacity_bytes=_uint(statfs.get("capacity")),
        used_bytes=_uint(statfs.get("usedbytes")),
        free_bytes=_uint(statfs.get("freebytes")),
    )


def parse_spaces_json(output: str | bytes) -> list[SpaceRecord]:
    """Parse the JSON space listing, sorted by name; raises ValueError on bad input."""
    text = output.decode("utf-8", errors="replace") if isinstance(output, bytes) else output
    try:
        _, payload = _decode(text)
        spaces = [_space_from_json(item) for item in _result_list(payload)]
    except ValueError as exc:
        raise ValueError(f"parse space ls: {exc} (output: {text[:200]})") from exc
    return sorted(spaces, key=lambda space: space.name)


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        number = float(value)
        if not math.isfinite(number):
            return repr(number)
        return format(Decimal(repr(number)).normalize(), "f")
    return json.dumps(value, separators=(",", ":"))


def _flatten(dst: dict[str, str], prefix: str, value: Any) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            _flatten(dst, f"{prefix}.{key}" if prefix else key, child)
    elif isinstance(value, list):
        dst[prefix] = ",".join(_format_value(item) for item in value)
    elif value is None:
        dst[prefix] = ""
    else:
        dst[prefix] = _format_value(value)


def parse_space_status_json(output: str | bytes) -> list[SpaceStatusRecord]:
    """Flatten the first result of ``eos --json space status`` into sorted dotted keys."""
    try:
        _, payload = _decode(output)
        result = _result_list(payload)
        first = _obj(result[0]) if result else {}
    except ValueError as exc:
        raise ValueError(f"parse space status json: {exc}") from exc

    flattened: dict[str, str] = {}
    _flatten(flattened, "", first)
    return [SpaceStatusRecord(key=key, value=flattened[key]) for key in sorted(flattened)]


def parse_space_status_legacy(output: str | bytes) -> list[SpaceStatusRecord]:
    """Parse the plain-text ``key := value`` form of ``eos space status``."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    records = []
    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        key, sep, value = line.partition(":=")
        if not sep:
            continue
        records.append(SpaceStatusRecord(key=key.strip(), value=value.strip()))
    return records


def space_config_args(name: str, key: str, value: str) -> list[str]:
    """Build ``eos -b space config``; keys without ``space.`` or ``fs.`` get ``space.``."""
    full_key = key
    if not key.startswith(("space.", "fs.")):
        full_key = "space." + key
    return ["eos", "-b", "space", "config", name, f"{full_key}={value}"]