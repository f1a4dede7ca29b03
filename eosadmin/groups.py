"""Scheduling groups: parsing ``eos -j -b group ls`` and building group commands."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from eosadmin.textparse import strip_preamble

_GROUP_STATUSES = frozenset({"on", "off", "drain"})


@dataclass(frozen=True)
class GroupRecord:
    """Summary of one scheduling group."""

    name: str
    status: str
    nofs: int
    capacity_bytes: int
    used_bytes: int
    free_bytes: int
    num_files: int


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


def _int(value: Any, *, unsigned: bool) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {value!r}")
    if unsigned and value < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return value


def _group_from_json(item: Any) -> GroupRecord:
    item = _obj(item)
    statfs = _obj(_obj(_obj(item.get("sum")).get("stat")).get("statfs"))
    return GroupRecord(
        name=_str(item.get("name")),
        status=_str(_obj(item.get("cfg")).get("status")),
        nofs=_int(item.get("nofs"), unsigned=False),
        capacity_bytes=_int(statfs.get("capacity"), unsigned=True),
        used_bytes=_int(statfs.get("usedbytes"), unsigned=True),
        free_bytes=_int(statfs.get("freebytes"), unsigned=True),
        num_files=_int(statfs.get("files"), unsigned=True),
    )


def parse_groups_json(output: str | bytes) -> list[GroupRecord]:
    """Parse the JSON group listing, sorted by name; raises ValueError on bad input."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    try:
        payload = _obj(json.loads(strip_preamble(output)))
        result = payload.get("result") or []
        if not isinstance(result, list):
            raise ValueError("result is not a list")
        groups = [_group_from_json(item) for item in result]
    except ValueError as exc:
        raise ValueError(f"parse group ls: {exc} (output: {output[:200]})") from exc
    return sorted(groups, key=lambda group: group.name)


def group_set_args(group: str, status: str) -> list[str]:
    """Build ``eos -b group set <group> <status>``; status is on, off or drain."""
    group = group.strip()
    status = status.strip()
    if not group:
        raise ValueError("group name is required")
    if status not in _GROUP_STATUSES:
        raise ValueError(f"unsupported group status {status!r}")
    return ["eos", "-b", "group", "set", group, status]