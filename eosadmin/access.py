"""Access rules: parsing ``eos access ls -m`` and building access commands."""

from __future__ import annotations

from dataclasses import dataclass

_ACTIONS = frozenset({"allow", "unallow", "ban", "unban"})
_CATEGORIES = frozenset({"user", "group", "host", "domain"})


@dataclass(frozen=True)
class AccessRecord:
    """One ``key=value`` line of the access listing."""

    category: str
    rule: str
    value: str
    raw_key: str


def parse_access_list(output: str | bytes) -> list[AccessRecord]:
    """Parse the monitoring output of ``eos access ls -m``."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    records = []
    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        raw_key, sep, value = line.partition("=")
        if not sep:
            continue
        raw_key = raw_key.strip()
        value = value.strip()
        category, dot, rule = raw_key.partition(".")
        if not dot:
            category, rule = raw_key, "value"
        records.append(
            AccessRecord(category=category, rule=rule, value=value, raw_key=raw_key)
        )
    return records


def access_rule_args(op: str, category: str, value: str) -> list[str]:
    """Build ``eos access <op> <category> <value>``; raises ValueError on bad input."""
    op = op.lower().strip()
    category = category.lower().strip()
    value = value.strip()

    if op not in _ACTIONS:
        raise ValueError(f"unsupported access action {op!r}")
    if category not in _CATEGORIES:
        raise ValueError(f"unsupported access category {category!r}")
    if not value:
        raise ValueError("access value is required")
    return ["eos", "access", op, category, value]


def access_stall_args(seconds: int) -> list[str]:
    """Build ``eos access set stall <seconds>``; seconds must be positive."""
    if seconds <= 0:
        raise ValueError("stall seconds must be positive")
    return ["eos", "access", "set", "stall", str(seconds)]