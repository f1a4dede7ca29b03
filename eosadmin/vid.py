"""Virtual identity listing: parsing ``eos vid ls``."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class VIDRecord:
    """One mapping line; bare lines carry an empty value."""

    key: str
    value: str = ""


def vid_list_args(flag: str = "") -> list[str]:
    """Build ``eos vid ls`` with an optional flag."""
    args = ["eos", "vid", "ls"]
    flag = flag.strip()
    if flag:
        args.append(flag)
    return args


def parse_vid_list(output: str | bytes) -> list[VIDRecord]:
    """Parse ``key => value`` lines, skipping blanks and ``* `` annotations."""
    if isinstance(output, bytes):
        output = output.decode("utf-8", errors="replace")
    records = []
    for raw_line in output.split("\n"):
        line = raw_line.strip()
        if not line or line.startswith("* "):
            continue
        key, sep, value = line.partition("=>")
        if not sep:
            records.append(VIDRecord(key=line.removesuffix(":")))
            continue
        records.append(
            VIDRecord(key=key.strip().removesuffix(":"), value=value.strip())
        )
    return records