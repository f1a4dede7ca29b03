"""Namespace inspector: parsing ``eos inspector -l -m`` monitoring output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from eosadmin.textparse import parse_uint

_FLOAT_PATTERN = re.compile(
    r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?"
    r"|[+-]?(?:inf|infinity|nan)",
    re.ASCII | re.IGNORECASE,
)

_BIN_TAGS = {
    "accesstime::files": "access_files",
    "accesstime::volume": "access_volume",
    "birthtime::files": "birth_files",
    "birthtime::volume": "birth_volume",
}


@dataclass(frozen=True)
class InspectorBin:
    """One histogram bin: an age in seconds and the count or volume in it."""

    bin_seconds: int = 0
    value: int = 0


@dataclass(frozen=True)
class InspectorCostRecord:
    """Disk cost attributed to one user or group."""

    name: str = ""
    id: int = 0
    cost: float = 0.0
    tb_years: float = 0.0


@dataclass(frozen=True)
class InspectorLayoutSummary:
    """Volume stored with one file layout."""

    layout: str = ""
    type: str = ""
    volume_bytes: int = 0
    physical_bytes: int = 0
    locations: int = 0


@dataclass
class InspectorStats:
    """Everything the inspector reports, with lists in display order."""

    avg_file_size: int = 0
    hardlink_count: int = 0
    hardlink_volume: int = 0
    symlink_count: int = 0
    layout_count: int = 0
    top_layout: InspectorLayoutSummary = field(default_factory=InspectorLayoutSummary)
    layouts: list[InspectorLayoutSummary] = field(default_factory=list)
    top_user_cost: InspectorCostRecord = field(default_factory=InspectorCostRecord)
    user_costs: list[InspectorCostRecord] = field(default_factory=list)
    top_group_cost: InspectorCostRecord = field(default_factory=InspectorCostRecord)
    group_costs: list[InspectorCostRecord] = field(default_factory=list)
    access_files: list[InspectorBin] = field(default_factory=list)
    access_volume: list[InspectorBin] = field(default_factory=list)
    birth_files: list[InspectorBin] = field(default_factory=list)
    birth_volume: list[InspectorBin] = field(default_factory=list)


def parse_inspector_fields(line: str) -> dict[str, str]:
    """Split a line into ``key=value`` pairs; words without ``=`` are ignored."""
    fields: dict[str, str] = {}
    for word in line.split():
        key, sep, value = word.partition("=")
        if sep:
            fields[key] = value
    return fields


def _parse_float(raw: str | None) -> float:
    text = (raw or "").strip()
    if not _FLOAT_PATTERN.fullmatch(text):
        return 0.0
    return float(text)


def _fallback(value: str | None, default: str | None) -> str:
    value = (value or "").strip()
    return value if value else (default or "").strip()


def _cost_record(fields: dict[str, str], name_key: str, id_key: str) -> InspectorCostRecord:
    return InspectorCostRecord(
        name=_fallback(fields.get(name_key), fields.get(id_key)),
        id=parse_uint(fields.get(id_key, "")),
        cost=_parse_float(fields.get("cost")),
        tb_years=_parse_float(fields.get("tbyears")),
    )


def _sorted_bins(bins: dict[int, int]) -> list[InspectorBin]:
    return [InspectorBin(bin_seconds=key, value=bins[key]) for key in sorted(bins)]


def parse_inspector_stats(output: str | bytes) -> InspectorStats:
    """Parse ``eos inspector -l -m`` output; unknown lines are ignored."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")

    stats = InspectorStats()
    bins: dict[str, dict[int, int]] = {name: {} for name in _BIN_TAGS.values()}

    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("* "):
            continue

        fields = parse_inspector_fields(line)
        tag = fields.get("tag", "")
        value = parse_uint(fields.get("value", ""))

        if tag == "summary::avg_filesize":
            stats.avg_file_size = value
        elif tag == "links::hardlink_count":
            stats.hardlink_count = value
        elif tag == "links::hardlink_volume":
            stats.hardlink_volume = value
        elif tag == "links::symlink_count":
            stats.symlink_count = value
        elif tag == "user::cost::disk":
            record = _cost_record(fields, "username", "uid")
            stats.user_costs.append(record)
            if record.cost > stats.top_user_cost.cost:
                stats.top_user_cost = record
        elif tag == "group::cost::disk":
            record = _cost_record(fields, "groupname", "gid")
            stats.group_costs.append(record)
            if record.cost > stats.top_group_cost.cost:
                stats.top_group_cost = record
        elif tag in _BIN_TAGS:
            bins[_BIN_TAGS[tag]][parse_uint(fields.get("bin", ""))] = value

        layout = fields.get("layout", "")
        if layout:
            stats.layout_count += 1
            summary = InspectorLayoutSummary(
                layout=layout,
                type=fields.get("type", ""),
                volume_bytes=parse_uint(fields.get("volume", "")),
                physical_bytes=parse_uint(fields.get("physicalsize", "")),
                locations=parse_uint(fields.get("locations", "")),
            )
            stats.layouts.append(summary)
            if summary.volume_bytes > stats.top_layout.volume_bytes:
                stats.top_layout = summary

    stats.layouts.sort(key=lambda item: (-item.volume_bytes, item.layout))
    stats.user_costs.sort(key=lambda item: (-item.cost, item.name))
    stats.group_costs.sort(key=lambda item: (-item.cost, item.name))
    stats.access_files = _sorted_bins(bins["access_files"])
    stats.access_volume = _sorted_bins(bins["access_volume"])
    stats.birth_files = _sorted_bins(bins["birth_files"])
    stats.birth_volume = _sorted_bins(bins["birth_volume"])
    return stats


def inspector_error(output: str | bytes, error: object) -> RuntimeError:
    """Turn a failed ``eos inspector -l -m`` run into a readable exception."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    message = output.strip()
    lower = message.lower()
    if "permission denied" in lower:
        return RuntimeError("inspector unavailable on this host: permission denied")
    if "inspector disabled" in lower:
        return RuntimeError("inspector disabled")
    if message:
        return RuntimeError(f"eos inspector -l -m: {message}")
    return RuntimeError(f"eos inspector -l -m: {error}")