"""MGM and QuarkDB topology: leaders, followers and raft state."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

from eosadmin.textparse import ensure_root_prefix, host_only, split_host_port

DEFAULT_MGM_PORT = "1094"
QDB_PORT = "7777"

_KEY_VALUE_SEPARATOR = re.compile(r"[ \t]")


@dataclass(frozen=True)
class MgmRecord:
    """One MGM node paired with one QuarkDB node."""

    host: str = ""
    port: int = 0
    qdb_host: str = ""
    qdb_port: int = 0
    role: str = ""
    qdb_role: str = ""
    status: str = ""
    qdb_status: str = ""
    eos_version: str = ""
    qdb_version: str = ""


@dataclass(frozen=True)
class RaftReplica:
    """A ``REPLICA`` line of ``raft-info``."""

    host: str = ""
    status: str = ""
    sync: str = ""
    version: str = ""


@dataclass
class RaftInfo:
    """The parts of ``redis-cli raft-info`` output that describe the cluster."""

    leader: str = ""
    myself: str = ""
    my_role: str = ""
    my_version: str = ""
    my_health: str = ""
    nodes: list[str] = field(default_factory=list)
    replicas: list[RaftReplica] = field(default_factory=list)


def _text(output: str | bytes) -> str:
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output


def parse_monitoring_key_values(output: str | bytes) -> dict[str, str]:
    """Collect every ``key=value`` token of monitoring (``-m``) output; later keys win."""
    values: dict[str, str] = {}
    for raw in _text(output).split("\n"):
        for token in raw.split():
            key, sep, value = token.partition("=")
            if not sep or not key:
                continue
            values[key] = value
    return values


def split_monitoring_list(raw: str) -> list[str]:
    """Split a comma-separated list, dropping blanks and ``none``."""
    raw = raw.strip()
    if not raw or raw == "none":
        return []
    return [
        part
        for part in (piece.strip() for piece in raw.split(","))
        if part and part != "none"
    ]


def unique_endpoints(nodes: Iterable[str]) -> list[str]:
    """Strip and de-duplicate endpoints, keeping first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for node in nodes:
        node = node.strip()
        if not node or node in seen:
            continue
        seen.add(node)
        out.append(node)
    return out


def mgm_leader_from_monitoring_values(values: Mapping[str, str]) -> str:
    """Return the MGM leader endpoint, falling back to ``master_id``."""
    leader = values.get("ns.mgm.leader", "").strip()
    if leader:
        return leader
    return values.get("master_id", "").strip()


def mgm_port_from_monitoring_values(values: Mapping[str, str]) -> str:
    """Return the MGM port taken from ``master_id``, or the default port."""
    master_id = values.get("master_id", "").strip()
    idx = master_id.rfind(":")
    if idx != -1:
        port = master_id[idx + 1 :]
        if port:
            return port
    return DEFAULT_MGM_PORT


def parse_mgms_from_monitoring_values(values: Mapping[str, str]) -> list[MgmRecord] | None:
    """Pair MGM and QDB nodes by position; None when either leader is unknown."""
    mgm_leader = mgm_leader_from_monitoring_values(values)
    qdb_leader = values.get("ns.qdb.leader", "").strip()
    if not mgm_leader or not qdb_leader:
        return None

    mgm_nodes = unique_endpoints(
        [mgm_leader, *split_monitoring_list(values.get("ns.mgm.followers", ""))]
    )
    qdb_nodes = unique_endpoints(
        [qdb_leader, *split_monitoring_list(values.get("ns.qdb.followers", ""))]
    )

    records: list[MgmRecord] = []
    for i in range(max(len(mgm_nodes), len(qdb_nodes))):
        fields: dict[str, object] = {}
        if i < len(mgm_nodes):
            host, port = split_host_port(mgm_nodes[i])
            fields.update(
                host=host,
                port=port,
                role="leader" if mgm_nodes[i] == mgm_leader else "follower",
                status="online",
            )
        if i < len(qdb_nodes):
            qdb_host, qdb_port = split_host_port(qdb_nodes[i])
            fields.update(
                qdb_host=qdb_host,
                qdb_port=qdb_port,
                qdb_role="leader" if qdb_nodes[i] == qdb_leader else "follower",
                qdb_status="online",
            )
        records.append(MgmRecord(**fields))  # type: ignore[arg-type]
    return records


def parse_mgms_from_ns_stat_monitoring(output: str | bytes) -> list[MgmRecord] | None:
    """Parse ``eos ns stat -m`` output straight into MGM records."""
    return parse_mgms_from_monitoring_values(parse_monitoring_key_values(output))


def discover_leader_target(output: str | bytes) -> str:
    """Return ``root@<leader host>`` from ``eos -b ns stat -m`` output.

    Raises ValueError when no MGM leader is reported.
    """
    leader = mgm_leader_from_monitoring_values(parse_monitoring_key_values(output))
    if not leader:
        raise ValueError("no MGM leader found in eos ns stat -m output")
    return ensure_root_prefix(host_only(leader))


def parse_raft_info(output: str | bytes) -> RaftInfo:
    """Parse the output of ``redis-cli -p 7777 raft-info``."""
    info = RaftInfo()
    in_myself_section = False

    for raw in _text(output).split("\n"):
        line = raw.strip()
        if line == "----------":
            in_myself_section = False
            continue

        match = _KEY_VALUE_SEPARATOR.search(line)
        if match is None:
            continue
        key = line[: match.start()]
        value = line[match.start() + 1 :].strip()

        if key == "LEADER":
            info.leader = value
        elif key == "MYSELF":
            info.myself = value
            in_myself_section = True
        elif key == "STATUS":
            if in_myself_section:
                info.my_role = value.lower()
        elif key == "VERSION":
            if in_myself_section:
                info.my_version = value
        elif key == "NODE-HEALTH":
            if in_myself_section:
                info.my_health = value
        elif key == "NODES":
            info.nodes.extend(n.strip() for n in value.split(",") if n.strip())
        elif key == "REPLICA":
            parts = value.split("|")
            if len(parts) < 2:
                continue
            version = ""
            for part in parts:
                part = part.strip()
                if part.startswith("VERSION "):
                    version = part[len("VERSION ") :]
            info.replicas.append(
                RaftReplica(
                    host=parts[0].strip(),
                    status=parts[1].strip(),
                    sync=parts[2].strip() if len(parts) >= 3 else "",
                    version=version,
                )
            )

    # Single-node clusters may omit LEADER; infer it from MYSELF.
    if not info.leader and info.my_role == "leader" and info.myself:
        info.leader = info.myself

    return info


def mgms_from_raft_info(info: RaftInfo, mgm_port: str = "") -> list[MgmRecord]:
    """Build MGM records from raft state, leader first then by host and port.

    Raises ValueError when the raft state carries no cluster information.
    """
    if not info.leader and not info.nodes and not info.myself:
        raise ValueError("no MGM cluster info from raft-info")

    mgm_port = mgm_port or DEFAULT_MGM_PORT
    leader_host = host_only(info.leader)
    replicas = {host_only(r.host): r for r in info.replicas}

    nodes = info.nodes or ([info.myself] if info.myself else [])

    seen: set[str] = set()
    records: list[MgmRecord] = []
    for node in nodes:
        host = host_only(node)
        if host in seen:
            continue
        seen.add(host)

        role = "leader" if host == leader_host else "follower"
        status = "online"
        version = ""
        replica = replicas.get(host)
        if replica is not None:
            if replica.status.upper() == "OFFLINE":
                status = "offline"
            version = replica.version
        if host == leader_host and info.my_version:
            version = info.my_version

        mgm_host, port = split_host_port(f"{host}:{mgm_port}")
        qdb_host, qdb_port = split_host_port(node)
        records.append(
            MgmRecord(
                host=mgm_host,
                port=port,
                qdb_host=qdb_host,
                qdb_port=qdb_port,
                role=role,
                qdb_role=role,
                status=status,
                qdb_status=status,
                eos_version=version,
                qdb_version=version,
            )
        )

    records.sort(key=lambda r: (r.role != "leader", r.host, r.port))
    return records


def mgms_from_ssh_target(target: str) -> list[MgmRecord]:
    """Treat the SSH target as the single MGM leader.

    Used when raft-info requires authentication. Raises ValueError when
    there is no target.
    """
    if not target:
        raise ValueError(
            "redis-cli raft-info requires authentication and no SSH target is configured"
        )
    host, port = split_host_port(target.removeprefix("root@"))
    if port == 0:
        port = int(DEFAULT_MGM_PORT)
    return [MgmRecord(host=host, port=port, role="leader", status="online")]


def unique_hosts(selector: Callable[[MgmRecord], str], mgms: Iterable[MgmRecord]) -> list[str]:
    """Distinct non-empty hosts picked from each record, in first-seen order."""
    seen: set[str] = set()
    hosts: list[str] = []
    for record in mgms:
        host = selector(record).strip()
        if not host or host in seen:
            continue
        seen.add(host)
        hosts.append(host)
    return hosts


def qdb_version_from_raft_info(info: RaftInfo, host: str) -> str:
    """Return the QuarkDB version of ``host``; raises ValueError if none is reported."""
    if info.my_version:
        return info.my_version
    for replica in info.replicas:
        if host_only(replica.host) == host and replica.version:
            return replica.version
    raise ValueError("redis-cli raft-info: no VERSION found")


def qdb_attempt_coup_args() -> list[str]:
    """Command that asks the local QuarkDB node to take over leadership."""
    return ["redis-cli", "-p", QDB_PORT, "raft-attempt-coup"]