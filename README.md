# eosadmin

Parsers and command-line builders for administering EOS storage clusters.

The package turns the text and JSON printed by the `eos` and `redis-cli`
tools into Python dataclasses, and builds the argument lists for the
administrative commands. It has no dependencies outside the standard library.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Modules

- `eosadmin.textparse`: shared helpers.
  - `strip_preamble` drops the `* ...` lines EOS prints before JSON output.
  - `shell_quote`, `shell_join` and `shell_display_join` quote arguments for display or for a shell.
  - `split_host_port`, `host_only`, `ensure_root_prefix` and `normalize_cluster_instance` handle host names.
  - `clean_path` normalises namespace paths to absolute, clean form.
  - `parse_uint`, `parse_human_bytes`, `parse_labeled_values`, `to_uint64` and `flexible_string` read numbers and values.
  - `parse_eos_server_version` reads `eos version` or `eos --version` output.
- `eosadmin.sessionlog`: a per-session command log.
  - `init_session_log(home)` creates `<home>/.eosadmin/sessions/<timestamp>.log`, points `<home>/.eosadmin/latest.log` at it and returns its path, or `None` if it cannot.
  - `SessionLog(path)` appends entries with `log_command` and `log_error`, and `commands(n)` returns the last `n` command lines, reading only what was appended since the previous call. `commands` raises `RuntimeError` when the log has no path.
- `eosadmin.access`: `parse_access_list` reads `eos access ls -m`; `access_rule_args` and `access_stall_args` build the allow/ban and stall commands.
- `eosadmin.vid`: `parse_vid_list` reads `eos vid ls`; `vid_list_args` builds the command.
- `eosadmin.groups`: `parse_groups_json` reads `eos -j -b group ls`; `group_set_args` builds `group set` with status `on`, `off` or `drain`.
- `eosadmin.filesystems`: `parse_filesystems_json` reads `eos -j -b fs ls` (numeric geotags included); `fs_config_status_args` builds `fs config`.
- `eosadmin.spaces`: `parse_spaces_json`, `parse_space_status_json` and `parse_space_status_legacy` read `eos space ls` and both forms of `eos space status`; `space_config_args` builds `space config`.
- `eosadmin.inspector`: `parse_inspector_stats` reads `eos inspector -l -m` (layouts, user and group costs, access-time and birth-time bins); `inspector_error` turns a failed run into a readable `RuntimeError`.
- `eosadmin.ioshaping`: parses the IO shaping traffic and policy listings, builds the policy `set` and `rm` commands, and `looks_unsupported` recognises servers without `io shaping`.
- `eosadmin.mgm`: cluster topology.
  - Reads `eos ns stat -m` (`parse_monitoring_key_values`, `parse_mgms_from_monitoring_values`, `discover_leader_target`).
  - Reads `redis-cli raft-info` (`parse_raft_info`, `mgms_from_raft_info`, `qdb_version_from_raft_info`).
  - `qdb_attempt_coup_args` builds the QuarkDB leadership takeover command.
- `eosadmin.namespace`: `parse_fileinfo_json`, `entry_from_cli` and `directory_from_cli` turn `fileinfo` JSON into entries and listings; `parse_namespace_attrs`, `attr_set_args` and `parse_namespace_stats_json` cover attributes and namespace statistics.
- `eosadmin.nodes`: `parse_nodes_json` reads `eos -j node ls`; `node_stats_from_monitoring_values` builds node statistics; `node_set_args` builds `node set`.

## Example

```python
from eosadmin.access import access_rule_args, parse_access_list
from eosadmin.textparse import shell_display_join

records = parse_access_list("user.banned=nobody\nredirect=host-a:1094\n")
for record in records:
    print(record.category, record.rule, record.value)

print(shell_display_join(access_rule_args("ban", "user", "nobody")))
# eos access ban user nobody
```

Builders that validate their input raise `ValueError` when it is not valid:

```python
from eosadmin.groups import group_set_args

group_set_args("default.1", "drain")   # ['eos', '-b', 'group', 'set', 'default.1', 'drain']
group_set_args("default.1", "paused")  # raises ValueError
```

## What this package does not do

It does not run any command, locally or over SSH, and it has no client that
connects to a cluster. It has no interactive screen and no command-line
entry point. You run the built argument lists yourself and pass their output
to the parsers.