"""Namespace: file info, directory listings, attributes and namespace statistics."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from eosadmin.textparse import clean_path, strip_preamble, to_uint64

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_DIRECTORY_MODE_BIT = 0o40000


class EntryKind(str, Enum):
    """Whether a namespace entry is a file or a container (directory)."""

    FILE = "file"
    CONTAINER = "container"


@dataclass(frozen=True)
class CliLocation:
    """A filesystem holding a replica or stripe of a file."""

    fsid: int = 0


@dataclass(frozen=True)
class CliFileInfo:
    """The decoded JSON of ``eos -j -b fileinfo``."""

    name: str = ""
    path: str = ""
    id: int = 0
    pid: int = 0
    inode: int = 0
    uid: int = 0
    gid: int = 0
    size: int = 0
    tree_size: int = 0
    nfiles: int = 0
    nndirectories: int = 0
    tree_files: int = 0
    tree_containers: int = 0
    flags: int = 0
    mode: int = 0
    locations: list[CliLocation] = field(default_factory=list)
    link_target: str = ""
    etag: str = ""
    mtime: int = 0
    mtime_ns: int = 0
    ctime: int = 0
    ctime_ns: int = 0
    children: list[CliFileInfo] = field(default_factory=list)


@dataclass(frozen=True)
class Entry:
    """A file or container in the namespace."""

    kind: EntryKind
    name: str
    path: str
    id: int = 0
    parent_id: int = 0
    inode: int = 0
    uid: int = 0
    gid: int = 0
    size: int = 0
    tree_size: int = 0
    files: int = 0
    containers: int = 0
    flags: int = 0
    mode: int = 0
    locations: int = 0
    link_name: str = ""
    etag: str = ""
    modified_at: datetime = _EPOCH
    changed_at: datetime = _EPOCH


@dataclass(frozen=True)
class Directory:
    """A container with its children, containers first then by name."""

    path: str
    entry: Entry
    entries: list[Entry] = field(default_factory=list)


@dataclass(frozen=True)
class NamespaceAttr:
    """An extended attribute of a namespace entry."""

    key: str
    value: str


@dataclass
class NamespaceStats:
    """Counters reported by ``eos -j -b ns stat``."""

    master_host: str = ""
    total_files: int = 0
    total_directories: int = 0
    current_fid: int = 0
    current_cid: int = 0
    generated_fid: int = 0
    generated_cid: int = 0
    contention_read: float = 0.0
    contention_write: float = 0.0
    cache_files_max: int = 0
    cache_files_occup: int = 0
    cache_files_requests: int = 0
    cache_files_hits: int = 0
    cache_containers_max: int = 0
    cache_containers_occup: int = 0
    cache_containers_requests: int = 0
    cache_containers_hits: int = 0


def _text(output: str | bytes) -> str:
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def _obj(value: Any) -> dict[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"expected an object, got {type(value).__name__}")
    return value


def _list(value: Any) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"expected an array, got {type(value).__name__}")
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


def _uint(value: Any) -> int:
    number = _int(value)
    if number < 0:
        raise ValueError(f"expected an unsigned integer, got {value!r}")
    return number


def _float(value: Any) -> float:
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"expected a number, got {value!r}")
    return float(value)


def _result_list(payload: Any) -> list[Any]:
    return _list(_obj(payload).get("result"))


def parse_namespace_stats_json(output: str | bytes) -> NamespaceStats:
    """Parse ``eos -j -b ns stat``; the last result wins, non-numeric totals are ignored."""
    text = _text(output)
    stats = NamespaceStats()
    try:
        for raw_item in _result_list(json.loads(strip_preamble(text))):
            item = _obj(raw_item)
            ns = _obj(item.get("ns"))
            total = _obj(ns.get("total"))
            current = _obj(ns.get("current"))
            generated = _obj(ns.get("generated"))
            contention = _obj(ns.get("contention"))
            cache = _obj(ns.get("cache"))
            files_cache = _obj(cache.get("files"))
            containers_cache = _obj(cache.get("containers"))

            stats.master_host = _str(item.get("master_id"))
            total_files = to_uint64(total.get("files"))
            if total_files > 0:
                stats.total_files = total_files
            total_dirs = to_uint64(total.get("directories"))
            if total_dirs > 0:
                stats.total_directories = total_dirs
            stats.current_fid = _uint(current.get("fid"))
            stats.current_cid = _uint(current.get("cid"))
            stats.generated_fid = _uint(generated.get("fid"))
            stats.generated_cid = _uint(generated.get("cid"))
            stats.contention_read = _float(contention.get("read"))
            stats.contention_write = _float(contention.get("write"))
            stats.cache_files_max = _uint(files_cache.get("maxsize"))
            stats.cache_files_occup = _uint(files_cache.get("occupancy"))
            stats.cache_files_requests = _uint(files_cache.get("requests"))
            stats.cache_files_hits = _uint(files_cache.get("hits"))
            stats.cache_containers_max = _uint(containers_cache.get("maxsize"))
            stats.cache_containers_occup = _uint(containers_cache.get("occupancy"))
            stats.cache_containers_requests = _uint(containers_cache.get("requests"))
            stats.cache_containers_hits = _uint(containers_cache.get("hits"))
    except ValueError as exc:
        raise ValueError(f"parse ns stat: {exc} (output: {text[:200]})") from exc
    return stats


def _fileinfo_from_json(raw: Any) -> CliFileInfo:
    item = _obj(raw)
    return CliFileInfo(
        name=_str(item.get("name")),
        path=_str(item.get("path")),
        id=_uint(item.get("id")),
        pid=_uint(item.get("pid")),
        inode=_uint(item.get("inode")),
        uid=_uint(item.get("uid")),
        gid=_uint(item.get("gid")),
        size=_uint(item.get("size")),
        tree_size=_uint(item.get("treesize")),
        nfiles=_uint(item.get("nfiles")),
        nndirectories=_uint(item.get("nndirectories")),
        tree_files=_uint(item.get("treefiles")),
        tree_containers=_uint(item.get("treecontainers")),
        flags=_uint(item.get("flags")),
        mode=_uint(item.get("mode")),
        locations=[
            CliLocation(fsid=_uint(_obj(location).get("fsid")))
            for location in _list(item.get("locations"))
        ],
        link_target=_str(item.get("link")),
        etag=_str(item.get("etag")),
        mtime=_int(item.get("mtime")),
        mtime_ns=_int(item.get("mtime_ns")),
        ctime=_int(item.get("ctime")),
        ctime_ns=_int(item.get("ctime_ns")),
        children=[_fileinfo_from_json(child) for child in _list(item.get("children"))],
    )


def parse_fileinfo_json(output: str | bytes) -> CliFileInfo:
    """Parse ``eos -j -b fileinfo``; raises ValueError on bad input."""
    text = _text(output)
    try:
        return _fileinfo_from_json(json.loads(strip_preamble(text)))
    except ValueError as exc:
        raise ValueError(f"parse fileinfo: {exc} (output: {text[:200]})") from exc


def _unix_time(seconds: int, nanoseconds: int) -> datetime:
    return _EPOCH + timedelta(seconds=seconds, microseconds=nanoseconds // 1000)


def entry_from_cli(info: CliFileInfo) -> Entry:
    """Turn decoded file info into an entry; containers report tree-wide counts."""
    full_path = clean_path(info.path.strip())
    name = info.name.strip()
    if not name and full_path == "/":
        name = "/"

    is_container = bool(info.mode & _DIRECTORY_MODE_BIT)
    return Entry(
        kind=EntryKind.CONTAINER if is_container else EntryKind.FILE,
        name=name,
        path=full_path,
        id=info.id,
        parent_id=info.pid,
        inode=info.inode,
        uid=info.uid,
        gid=info.gid,
        size=info.size,
        tree_size=info.tree_size,
        files=info.tree_files if is_container else info.nfiles,
        containers=info.tree_containers if is_container else info.nndirectories,
        flags=info.flags,
        mode=info.mode,
        locations=len(info.locations),
        link_name=info.link_target.strip(),
        etag=info.etag.strip(),
        modified_at=_unix_time(info.mtime, info.mtime_ns),
        changed_at=_unix_time(info.ctime, info.ctime_ns),
    )


def directory_from_cli(info: CliFileInfo, raw_path: str) -> Directory:
    """Build a directory listing, dropping the container itself from its children."""
    path = clean_path(raw_path)
    entries = [
        entry
        for entry in (entry_from_cli(child) for child in info.children)
        if entry.path != path
    ]
    entries.sort(key=lambda e: (e.kind != EntryKind.CONTAINER, e.name.lower()))
    return Directory(path=path, entry=entry_from_cli(info), entries=entries)


def parse_namespace_attrs(output: str | bytes) -> list[NamespaceAttr]:
    """Parse ``eos attr ls`` into attributes sorted case-insensitively by key."""
    attrs = []
    for raw_line in _text(output).replace("\r\n", "\n").split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("*"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key:
            continue
        attrs.append(NamespaceAttr(key=key, value=value.strip().strip('"')))
    attrs.sort(key=lambda attr: attr.key.lower())
    return attrs


def attr_set_args(raw_path: str, key: str, value: str, recursive: bool) -> list[str]:
    """Build ``eos attr [-r] set key=value <path>``."""
    args = ["eos", "attr"]
    if recursive:
        args.append("-r")
    return [*args, "set", f"{key}={value}", raw_path]