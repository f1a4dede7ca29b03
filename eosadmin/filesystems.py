"""Filesystems: parsing ``eos -j -b fs ls`` and building fs commands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from eosadmin.textparse import flexible_string, strip_preamble


@dataclass(frozen=True)
class FileSystemRecord:
    """One filesystem as reported by the FST listing."""

    host: str
    port: int
    id: int
    path: str
    sched_group: str
    geotag: str
    boot: str
    config_status: str
    drain_status: str
    active: str
    health: str
    capacity_bytes: int
    used_bytes: int
    free_bytes: int
    used_files: int
    disk_bw_mb: float
    disk_iops: float
    read_rate_mb: float
    write_rate_mb: float


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


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _filesystem_from_json(item: Any) -> FileSystemRecord:
    item = _obj(item)
    stat = _obj(item.get("stat"))
    disk = _obj(stat.get("disk"))
    statfs = _obj(stat.get("statfs"))
    drain = _obj(_obj(item.get("local")).get("drain"))
    health = _str(_obj(stat.get("health")).get("status"))
    return FileSystemRecord(
        host=_str(item.get("host")),
        port=_uint(item.get("port")),
        id=_uint(item.get("id")),
        path=_str(item.get("path")),
        sched_group=_str(item.get("schedgroup")),
        geotag=flexible_string(stat.get("geotag")),
        boot=_str(stat.get("boot")),
        config_status=_str(item.get("configstatus")),
        drain_status=_str(drain.get("status")),
        active=_str(stat.get("active")),
        health=health.replace("%20", " "),
        capacity_bytes=_uint(statfs.get("capacity")),
        used_bytes=_uint(statfs.get("usedbytes")),
        free_bytes=_uint(statfs.get("freebytes")),
        used_files=_uint(stat.get("usedfiles")),
        disk_bw_mb=_float(disk.get("bw")),
        disk_iops=_float(disk.get("iops")),
        read_rate_mb=_float(disk.get("readratemb")),
        write_rate_mb=_float(disk.get("writeratemb")),
    )


def parse_filesystems_json(output: str | bytes) -> list[FileSystemRecord]:
    """Parse the JSON filesystem listing, sorted by id; raises ValueError on bad input."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    try:
        payload = _obj(json.loads(strip_preamble(output)))
        result = payload.get("result") or []
        if not isinstance(result, list):
            raise ValueError("result is not a list")
        filesystems = [_filesystem_from_json(item) for item in result]
    except ValueError as exc:
        raise ValueError(f"parse fs ls: {exc} (output: {output[:200]})") from exc
    return sorted(filesystems, key=lambda fs: fs.id)


def fs_config_status_args(fs_id: int, value: str) -> list[str]:
    """Build ``eos -b fs config <id> configstatus=<value>``."""
    return ["eos", "-b", "fs", "config", str(fs_id), f"configstatus={value}"]