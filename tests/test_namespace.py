from datetime import datetime, timezone

import pytest

from eosadmin.namespace import (
    CliFileInfo,
    CliLocation,
    EntryKind,
    attr_set_args,
    directory_from_cli,
    entry_from_cli,
    parse_fileinfo_json,
    parse_namespace_attrs,
    parse_namespace_stats_json,
)
from eosadmin.textparse import shell_display_join


def test_entry_from_cli_container():
    entry = entry_from_cli(
        CliFileInfo(
            name="eos",
            path="/eos/",
            id=2,
            pid=1,
            inode=2,
            mode=16893,
            tree_files=78,
            tree_containers=17,
            tree_size=4907360263,
        )
    )
    assert entry.kind == EntryKind.CONTAINER
    assert entry.path == "/eos"
    assert entry.files == 78
    assert entry.containers == 17
    assert entry.tree_size == 4907360263


def test_entry_from_cli_file():
    entry = entry_from_cli(
        CliFileInfo(
            name="hola",
            path="/eos/dev/test/hola",
            id=14,
            pid=17,
            inode=9223372036854775822,
            mode=493,
            size=12,
            locations=[CliLocation(fsid=3)],
        )
    )
    assert entry.kind == EntryKind.FILE
    assert entry.size == 12
    assert entry.locations == 1
    assert entry.parent_id == 17


def test_entry_from_cli_root_path():
    entry = entry_from_cli(CliFileInfo(name="", path="/", mode=0o40755))
    assert entry.name == "/"
    assert entry.path == "/"
    assert entry.kind == EntryKind.CONTAINER


def test_entry_from_cli_with_link_target():
    entry = entry_from_cli(
        CliFileInfo(name="mylink", path="/eos/mylink", link_target="/eos/target")
    )
    assert entry.link_name == "/eos/target"


def test_entry_from_cli_times():
    entry = entry_from_cli(
        CliFileInfo(name="f", path="/f", mtime=0, ctime=60, ctime_ns=5_000_000)
    )
    assert entry.modified_at == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert entry.changed_at == datetime(1970, 1, 1, 0, 1, 0, 5000, tzinfo=timezone.utc)


def test_directory_from_cli_sorts_and_skips_self():
    info = CliFileInfo(
        name="eos",
        path="/eos/",
        mode=0o40755,
        children=[
            CliFileInfo(name="eos", path="/eos", mode=0o40755),
            CliFileInfo(name="b", path="/eos/b", mode=0o644),
            CliFileInfo(name="A", path="/eos/A", mode=0o644),
            CliFileInfo(name="z", path="/eos/z", mode=0o40755),
        ],
    )
    directory = directory_from_cli(info, "/eos/")
    assert directory.path == "/eos"
    assert directory.entry.name == "eos"
    assert [e.name for e in directory.entries] == ["z", "A", "b"]


def test_parse_fileinfo_json_with_children():
    raw = (
        "* info\n"
        '{"name": "dir", "path": "/eos/dir/", "mode": 16877, "treefiles": 2,'
        ' "children": [{"name": "f", "path": "/eos/dir/f", "mode": 420, "size": 9,'
        ' "locations": [{"fsid": 1}, {"fsid": 2}]}]}'
    )
    info = parse_fileinfo_json(raw)
    assert info.name == "dir"
    assert info.tree_files == 2
    assert len(info.children) == 1
    assert info.children[0].locations == [CliLocation(fsid=1), CliLocation(fsid=2)]
    directory = directory_from_cli(info, "/eos/dir")
    assert directory.entries[0].size == 9
    assert directory.entries[0].locations == 2


def test_parse_fileinfo_json_rejects_garbage():
    with pytest.raises(ValueError, match="parse fileinfo"):
        parse_fileinfo_json("not json")


def test_namespace_stats_json_conflict():
    raw = """
{
  "result": [
    {"ns": {"total": {"files": 78, "directories": 19}}},
    {"ns": {"total": {"files": {"changelog": {"size": 0}}}}}
  ],
  "retc": "0"
}
"""
    stats = parse_namespace_stats_json(raw)
    assert stats.total_files == 78
    assert stats.total_directories == 19


def test_namespace_stats_parse_with_preamble():
    raw = "* msg: ns booted\n" + """{
  "errormsg": "",
  "result": [
    {
      "master_id": "mgm01:1094",
      "ns": {
        "total": {"files": 78, "directories": 19},
        "current": {"fid": 7661, "cid": 1000},
        "generated": {"fid": 7662, "cid": 1001},
        "contention": {"read": 0.1, "write": 0.2},
        "cache": {
          "files": {"maxsize": 1000, "occupancy": 500, "requests": 200, "hits": 180},
          "containers": {"maxsize": 500, "occupancy": 250, "requests": 100, "hits": 90}
        }
      }
    }
  ]
}"""
    stats = parse_namespace_stats_json(raw)
    assert stats.master_host == "mgm01:1094"
    assert stats.total_files == 78
    assert stats.total_directories == 19
    assert (stats.current_fid, stats.current_cid) == (7661, 1000)
    assert (stats.generated_fid, stats.generated_cid) == (7662, 1001)
    assert stats.contention_read == pytest.approx(0.1)
    assert stats.contention_write == pytest.approx(0.2)
    assert stats.cache_files_hits == 180
    assert stats.cache_containers_occup == 250


def test_namespace_stats_rejects_garbage():
    with pytest.raises(ValueError, match="parse ns stat"):
        parse_namespace_stats_json(b"oops")


def test_parse_namespace_attrs():
    raw = """
* attr listing
sys.forced.layout="replica"
user.comment = "hello world"
sys.mask=755
"""
    attrs = parse_namespace_attrs(raw)
    assert [(a.key, a.value) for a in attrs] == [
        ("sys.forced.layout", "replica"),
        ("sys.mask", "755"),
        ("user.comment", "hello world"),
    ]


def test_parse_namespace_attrs_empty():
    assert parse_namespace_attrs(b"") == []


def test_parse_namespace_attrs_star_lines():
    attrs = parse_namespace_attrs("* this is a header\nkey1=val1\n")
    assert [(a.key, a.value) for a in attrs] == [("key1", "val1")]


def test_parse_namespace_attrs_no_equals():
    attrs = parse_namespace_attrs("no-equals-here\nkey=value\n")
    assert [(a.key, a.value) for a in attrs] == [("key", "value")]


@pytest.mark.parametrize(
    "recursive, expected",
    [
        (False, ["eos", "attr", "set", "user.comment=hello world", "/eos/dev/file"]),
        (True, ["eos", "attr", "-r", "set", "user.comment=hello world", "/eos/dev/file"]),
    ],
)
def test_attr_set_args(recursive, expected):
    assert attr_set_args("/eos/dev/file", "user.comment", "hello world", recursive) == expected


@pytest.mark.parametrize(
    "recursive, expected",
    [
        (False, "eos attr set 'user.comment=hello world' /eos/dev/file"),
        (True, "eos attr -r set 'user.comment=hello world' /eos/dev/file"),
    ],
)
def test_set_attr_command_display(recursive, expected):
    args = attr_set_args("/eos/dev/file", "user.comment", "hello world", recursive)
    assert shell_display_join(args) == expected