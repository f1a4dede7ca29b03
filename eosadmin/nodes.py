"""FST nodes: namespace node statistics and the ``eos node ls`` listing."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping

from eosadmin.textparse import flexible_string, parse_uint, split_host_port, strip_preamble


@dataclass
class NodeStats:
    """Namespace process counters from ``eos -b ns stat -m``."""

    file_count: int = 0
    dir_count: int = 0
    current_fid: int = 0
    current_cid: int = 0
    mem_virtual: int = 0
    mem_resident: int = 0
    mem_shared: int = 0
    mem_growth: int = 0
    thread_count: int = 0
    file_descs: int = 0
    uptime: timedelta = timedelta(0)
    boot_time: datetime | None = None


@dataclass(frozen=True)
class FstRecord:
    """One FST node as reported by ``eos -j node ls``."""

    type: str
    host: str
    port: int
    geotag: str
    status: str
    activated: str
    heartbeat_delta: int
    file_system_count: int
    eos_version: str
    kernel: str
    uptime: str
    thread_count: int
    rss_bytes: int
    vsize_bytes: int
    capacity_bytes: int
    used_bytes: int
    free_bytes: int
    used_files: int
    disk_load: float
    read_rate_mb: float
    write_rate_mb: float


def node_stats_from_monitoring_values(values: Mapping[str, str]) -> NodeStats:
    """Build node stats from monitoring key/values; boot time is derived from uptime."""

    def number(key: str) -> int:
        return parse_uint(values.get(key, ""))

    stats = NodeStats(
        file_count=number("ns.total.files"),
        dir_count=number("ns.total.directories"),
        current_fid=number("ns.current.fid"),
        current_cid=number("ns.current.cid"),
        mem_virtual=number("ns.memory.virtual"),
        mem_resident=number("ns.memory.resident"),
        mem_shared=number("ns.memory.share"),
        mem_growth=number("ns.memory.growth"),
        thread_count=number("ns.stat.threads"),
        file_descs=number("ns.fds.all"),
        uptime=timedelta(seconds=number("ns.uptime")),
    )
    if stats.uptime > timedelta(0):
        stats.boot_time = datetime.now(timezone.utc) - stats.uptime
    return stats


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


def _int(value: Any, *, unsigned: bool = False) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    if unsigned and value < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _node_from_json(raw: Any) -> FstRecord:
    item = _obj(raw)
    cfg = _obj(item.get("cfg"))
    cfg_stat = _obj(cfg.get("stat"))
    sys_info = _obj(cfg_stat.get("sys"))
    sum_stat = _obj(_obj(item.get("sum")).get("stat"))
    sum_disk = _obj(sum_stat.get("disk"))
    statfs = _obj(sum_stat.get("statfs"))
    avg_disk = _obj(_obj(_obj(item.get("avg")).get("stat")).get("disk"))

    geotag = flexible_string(item.get("geotag")) or flexible_string(cfg_stat.get("geotag"))
    host, port = split_host_port(_str(item.get("hostport")))
    return FstRecord(
        type=_str(item.get("type")),
        host=host,
        port=port,
        geotag=geotag,
        status=_str(item.get("status")),
        activated=_str(cfg.get("status")),
        heartbeat_delta=_int(item.get("heartbeatdelta")),
        file_system_count=_int(item.get("nofs")),
        eos_version=_str(_obj(sys_info.get("eos")).get("version")),
        kernel=_str(sys_info.get("kernel")),
        uptime=_str(sys_info.get("uptime")),
        thread_count=_int(sys_info.get("threads"), unsigned=True),
        rss_bytes=_int(sys_info.get("rss"), unsigned=True),
        vsize_bytes=_int(sys_info.get("vsize"), unsigned=True),
        capacity_bytes=_int(statfs.get("capacity"), unsigned=True),
        used_bytes=_int(statfs.get("usedbytes"), unsigned=True),
        free_bytes=_int(statfs.get("freebytes"), unsigned=True),
        used_files=_int(sum_stat.get("usedfiles"), unsigned=True),
        disk_load=_float(avg_disk.get("load")),
        read_rate_mb=_float(sum_disk.get("readratemb")),
        write_rate_mb=_float(sum_disk.get("writeratemb")),
    )


def parse_nodes_json(output: str | bytes) -> list[FstRecord]:
    """Parse ``eos -j node ls``, sorted by host then port; raises ValueError on bad input."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    try:
        result = _obj(json.loads(strip_preamble(output))).get("result") or []
        if not isinstance(result, list):
            raise ValueError("result is not a list")
        nodes = [_node_from_json(item) for item in result]
    except ValueError as exc:
        raise ValueError(f"parse node ls: {exc} (output: {output[:200]})") from exc
    return sorted(nodes, key=lambda node: (node.host, node.port))


def node_set_args(host: str, port: int, status: str) -> list[str]:
    """Build ``eos node set <host:port> <status>``."""
    return ["eos", "node", "set", f"{host}:{port}", status]