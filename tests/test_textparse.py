import json

import pytest

from eosadmin.textparse import (
    clean_path,
    ensure_root_prefix,
    flexible_string,
    host_only,
    normalize_cluster_instance,
    parse_eos_server_version,
    parse_human_bytes,
    parse_labeled_values,
    parse_uint,
    shell_display_join,
    shell_join,
    shell_quote,
    split_host_port,
    strip_preamble,
    to_uint64,
)


def test_parse_labeled_values():
    text = """
ALL      Files                            78 [booted] (0s)
ALL      Directories                      19
ALL      current file id                  7661
ALL      memory resident                  586.30 MB
"""
    values = parse_labeled_values(text)
    assert parse_uint(values["Files"]) == 78
    assert parse_uint(values["Directories"]) == 19
    assert parse_uint(values["current file id"]) == 7661
    assert values["memory resident"] == "586.30 MB"
    assert parse_human_bytes(values["memory resident"]) > 0


@pytest.mark.parametrize(
    "text,expected",
    [
        ("eos -j node ls", "'eos -j node ls'"),
        ("it's a test", "'it'\\''s a test'"),
        ("simple", "'simple'"),
    ],
)
def test_shell_quote(text, expected):
    assert shell_quote(text) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        (78.0, 78),
        (100, 100),
        (50, 50),
        (10, 10),
        ("not a number", 0),
        ({"foo": "bar"}, 0),
        ("hello", 0),
        (5, 5),
    ],
)
def test_to_uint64(value, expected):
    assert to_uint64(value) == expected


def test_to_uint64_from_decoded_json_conflict():
    payload = json.loads(
        '{"result":[{"ns":{"total":{"files":78,"directories":19}}},'
        '{"ns":{"total":{"files":{"changelog":{"size":0}}}}}]}'
    )
    assert to_uint64(payload["result"][0]["ns"]["total"]["files"]) == 78
    assert to_uint64(payload["result"][1]["ns"]["total"]["files"]) == 0


def test_strip_preamble_no_preamble():
    assert strip_preamble('{"result":[]}') == '{"result":[]}'


def test_strip_preamble_array_no_preamble():
    assert strip_preamble('[{"id":"app1"}]') == '[{"id":"app1"}]'


def test_strip_preamble_single_star_line():
    assert strip_preamble('* warning: something\n{"result":[]}') == '{"result":[]}'


def test_strip_preamble_multiple_star_lines():
    text = '* info: connecting\n* warning: slow\n[{"id":"x"}]'
    assert strip_preamble(text) == '[{"id":"x"}]'


def test_strip_preamble_preserves_content():
    assert "default" in strip_preamble('{"result":[{"name":"default"}]}')


def test_strip_preamble_empty_input():
    assert strip_preamble("") == ""


def test_strip_preamble_bytes_input():
    assert strip_preamble(b"* msg\n{}") == "{}"


def test_strip_preamble_without_json_returns_input():
    assert strip_preamble("* only a message\n") == "* only a message\n"


def test_nodes_json_parses_after_preamble():
    raw = '* error: cannot connect to localhost\n{\n  "result": [{"hostport": "fst01:1095", "nofs": 5}]\n}'
    payload = json.loads(strip_preamble(raw))
    assert payload["result"][0]["hostport"] == "fst01:1095"
    assert payload["result"][0]["nofs"] == 5


def test_namespace_stats_json_parses_after_preamble():
    raw = (
        "* msg: ns booted\n"
        '{"result": [{"master_id": "mgm01:1094", "ns": {"total": {"files": 78}}}]}'
    )
    payload = json.loads(strip_preamble(raw))
    assert payload["result"][0]["master_id"] == "mgm01:1094"
    assert to_uint64(payload["result"][0]["ns"]["total"]["files"]) == 78


def test_shell_join_quotes_every_argument():
    got = shell_join(["eos", "attr", "set", "user.comment=hello world", "/eos/dev/file"])
    assert got == "'eos' 'attr' 'set' 'user.comment=hello world' '/eos/dev/file'"


def test_shell_join_contains_argument():
    assert shell_join(["echo", "hello world"]) == "'echo' 'hello world'"


def test_shell_display_join_keeps_simple_args_readable():
    assert shell_display_join(["eos", "-j", "-b", "space", "ls"]) == "eos -j -b space ls"


def test_shell_display_join_quotes_only_unsafe_args():
    got = shell_display_join(["eos", "attr", "set", "user.comment=hello world", "/eos/dev/file"])
    assert got == "eos attr set 'user.comment=hello world' /eos/dev/file"


def test_shell_display_join_rtlog():
    got = shell_display_join(["eos", "rtlog", "/eos/fst01.cern.ch:1095/fst", "600", "info"])
    assert got == "eos rtlog /eos/fst01.cern.ch:1095/fst 600 info"


def test_shell_display_join_quotes_empty_and_spaces():
    assert shell_display_join(["ls", "-la", "/tmp/my dir", ""]) == "ls -la '/tmp/my dir' ''"


@pytest.mark.parametrize(
    "target,expected",
    [
        ("eospublic", "eospublic"),
        ("root@eospublic-ns-01.example.com:1094", "eospublic"),
        ("root@eospilot-mgm-02.example.com", "eospilot"),
        ("eoshome-mgm", "eoshome"),
        ("local eos cli", ""),
        ("", ""),
        (" ", ""),
        ("a\tb", ""),
    ],
)
def test_normalize_cluster_instance(target, expected):
    assert normalize_cluster_instance(target) == expected


@pytest.mark.parametrize(
    "output,expected",
    [
        (
            "EOS_INSTANCE=eosdev\nEOS_SERVER_VERSION=5.3.27 EOS_SERVER_RELEASE=unknown\n"
            "EOS_CLIENT_VERSION=5.3.27 EOS_CLIENT_RELEASE=unknown\n",
            "5.3.27",
        ),
        ("* info: something\nEOS_SERVER_VERSION=5.4.1 EOS_SERVER_RELEASE=1\n", "5.4.1"),
        ("EOS_INSTANCE=eosdev\n", ""),
        ("EOS 5.4.2 (2026)\n\nDeveloped by the CERN IT Storage Group\n", "5.4.2"),
        ("EOS 5.4.0 (2020)\n\nDeveloped by the CERN IT storage group\n", "5.4.0"),
        ("", ""),
        ("random text\nnothing here\n", ""),
    ],
)
def test_parse_eos_server_version(output, expected):
    assert parse_eos_server_version(output) == expected


@pytest.mark.parametrize(
    "host_port,expected",
    [
        ("eospilot-ns-02.cern.ch:7777", "eospilot-ns-02.cern.ch"),
        ("lobisapa-dev.cern.ch:7777", "lobisapa-dev.cern.ch"),
        ("hostname", "hostname"),
        ("", ""),
        ("host:1234", "host"),
    ],
)
def test_host_only(host_port, expected):
    assert host_only(host_port) == expected


@pytest.mark.parametrize(
    "hp,expected",
    [("host:1234", ("host", 1234)), ("host", ("host", 0)), ("host:abc", ("host", 0))],
)
def test_split_host_port(hp, expected):
    assert split_host_port(hp) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("", "/"),
        ("foo/bar", "/foo/bar"),
        ("/eos/", "/eos"),
        ("/eos/dev", "/eos/dev"),
        ("//eos//dev/../x", "/eos/x"),
    ],
)
def test_clean_path(raw, expected):
    assert clean_path(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("10 KB", 10 * 1024),
        ("2 MB", 2 * 1024 * 1024),
        ("3 GB", 3 * 1024 * 1024 * 1024),
        ("1 TB", 1024 * 1024 * 1024 * 1024),
        ("512 B", 512),
        ("", 0),
        ("42", 0),
        ("abc MB", 0),
    ],
)
def test_parse_human_bytes(raw, expected):
    assert parse_human_bytes(raw) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [("", 0), ("123 [booted]", 123), ("-5", 0), ("x12", 0)],
)
def test_parse_uint(raw, expected):
    assert parse_uint(raw) == expected


def test_parse_uint_saturates_on_overflow():
    assert parse_uint("99999999999999999999999") == (1 << 64) - 1


def test_ensure_root_prefix():
    assert ensure_root_prefix("root@host") == "root@host"
    assert ensure_root_prefix("host") == "root@host"


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('"hello"', "hello"),
        ('""', ""),
        ("null", ""),
        ("83737789", "83737789"),
        ("3.14", "3.14"),
        ("-42", "-42"),
        ("true", "true"),
        ("false", "false"),
        ("   12345  ", "12345"),
    ],
)
def test_flexible_string_from_json_token(raw, expected):
    assert flexible_string(json.loads(raw)) == expected


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('{"geotag":"eu/cern/0123"}', "eu/cern/0123"),
        ('{"geotag":83737789}', "83737789"),
        ("{}", ""),
        ('{"geotag":null}', ""),
    ],
)
def test_flexible_string_in_object(raw, expected):
    assert flexible_string(json.loads(raw).get("geotag")) == expected