from __future__ import annotations

import argparse
import json
import sys
from datetime import date, time
from pathlib import Path
from typing import Any

from .backends import supported_suffixes
from .codecs import EnumCodec, HotkeyBundle
from .controller import SettingsController
from .defaults import builtin_defaults
from .enrichment import GpuPipeline, NetworkInterfacePipeline, TimeZonePipeline, time_zone_label
from .enumerators import (
    PsutilNetworkEnumerator,
    VulkanInfoEnumerator,
    ZoneInfoTimezoneSource,
)
from .errors import SettingsSyncError
from .fields import SettingSpec, get_spec, primary_fields
from .log import configure_logging
from .notifications import LoggingNotificationSink
from .paths import settings_file, user_config_dir
from .state import ViewState
from .store import FileConfigStore


def _store(args: argparse.Namespace) -> FileConfigStore:
    return FileConfigStore(Path(args.config) if args.config else None)


def _controller(args: argparse.Namespace) -> SettingsController:
    return SettingsController(
        _store(args),
        hardware=VulkanInfoEnumerator(),
        network=PsutilNetworkEnumerator(),
        timezones=ZoneInfoTimezoneSource(),
        notifier=LoggingNotificationSink(),
    )


def _jsonable(value: Any) -> Any:
    if isinstance(value, HotkeyBundle):
        return value.to_mapping()
    if isinstance(value, date | time):
        return value.isoformat()
    return value


def parse_value(spec: SettingSpec, text: str, current: Any = None) -> Any:
    """Convert command line *text* to a view value for *spec*."""

    if spec.kind == "index" and isinstance(spec.codec, EnumCodec):
        if text in spec.codec.names:
            return spec.codec.to_view(text)
        try:
            return int(text)
        except ValueError:
            choices = ", ".join(spec.codec.names)
            raise ValueError(f"{spec.name} must be one of: {choices}") from None
    if spec.kind in {"index", "integer"}:
        return int(text)
    if spec.kind in {"scale", "percent"}:
        return float(text)
    if spec.kind == "toggle":
        lower = text.strip().lower()
        if lower in {"true", "1", "yes", "on"}:
            return True
        if lower in {"false", "0", "no", "off"}:
            return False
        raise ValueError(f"{spec.name} expects true or false")
    if spec.kind == "hotkeys":
        action, sep, key = text.partition("=")
        if not sep:
            raise ValueError("hotkeys are set as ACTION=KEY")
        bundle = current if isinstance(current, HotkeyBundle) else HotkeyBundle()
        try:
            return bundle.with_binding(action.strip(), key.strip())
        except KeyError:
            raise ValueError(f"unknown hotkey action: {action}") from None
    if spec.kind == "clock":
        if spec.name == "current_date":
            return date.fromisoformat(text)
        return time.fromisoformat(text)
    if spec.kind == "path_list":
        raise ValueError("use add-dir / remove-dir to edit game directories")
    return text


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def where_cmd(args: argparse.Namespace) -> int:
    data = {
        "config_dir": user_config_dir(),
        "settings_file": Path(args.config) if args.config else settings_file(),
        "formats": " ".join(supported_suffixes()),
    }
    if args.as_json:
        print(json.dumps({k: str(v) for k, v in data.items()}))
    else:
        for k, v in data.items():
            print(f"{k}: {v}")
    return 0


def show_cmd(args: argparse.Namespace) -> int:
    state = ViewState()
    state.load(_store(args))
    values = {k: _jsonable(v) for k, v in state.values().items()}
    if args.field:
        get_spec(args.field)
        values = {args.field: values[args.field]}
    if args.as_json:
        print(json.dumps(values, sort_keys=True))
    else:
        for k, v in values.items():
            print(f"{k}: {v}")
    return 0


def set_cmd(args: argparse.Namespace) -> int:
    spec = get_spec(args.field)
    controller = _controller(args)
    try:
        state = controller.open(enrich=False)
        if spec.kind == "zone":
            TimeZonePipeline(controller.timezones).run(state, controller.store)
            if not state.validate_and_set_time_zone(args.value):
                print(f"unknown time zone: {args.value}", file=sys.stderr)
                return 2
        elif spec.kind == "option":
            pipeline = (
                GpuPipeline(controller.hardware)
                if spec.options == "gpus"
                else NetworkInterfacePipeline(controller.network)
            )
            pipeline.run(state, controller.store)
            index = state.options(spec.options).index_of(args.value, -1)
            if index < 0:
                print(f"unknown {spec.options} entry: {args.value}", file=sys.stderr)
                return 2
            state.set(spec.name, index)
        else:
            try:
                value = parse_value(spec, args.value, state.get(spec.name))
            except ValueError as exc:
                print(str(exc), file=sys.stderr)
                return 2
            state.set(spec.name, value)
        controller.apply()
    finally:
        controller.shutdown()
    print(_jsonable(state.get(spec.name)))
    return 0


def _edit_dir(args: argparse.Namespace, action: str) -> int:
    controller = _controller(args)
    try:
        state = controller.open(enrich=False)
        dirs = state.set_directory(str(Path(args.path).expanduser()), action)
        controller.apply()
    finally:
        controller.shutdown()
    for d in dirs:
        print(d)
    return 0


def add_dir_cmd(args: argparse.Namespace) -> int:
    return _edit_dir(args, "add")


def remove_dir_cmd(args: argparse.Namespace) -> int:
    return _edit_dir(args, "remove")


def defaults_cmd(args: argparse.Namespace) -> int:
    if args.dry_run:
        print(json.dumps(builtin_defaults(), indent=2, sort_keys=True))
        return 0
    controller = _controller(args)
    try:
        controller.open(enrich=False)
        controller.restore_defaults()
        controller.apply()
    finally:
        controller.shutdown()
    print(str(controller.store.path))
    return 0


def interfaces_cmd(args: argparse.Namespace) -> int:
    for iface in PsutilNetworkEnumerator().list_interfaces():
        print(f"{iface.id}\t{iface.name}")
    return 0


def timezones_cmd(args: argparse.Namespace) -> int:
    needle = (args.filter or "").lower()
    for entry in ZoneInfoTimezoneSource().list_entries():
        if needle and needle not in entry.location.lower():
            continue
        print(time_zone_label(entry))
    return 0


def fields_cmd(args: argparse.Namespace) -> int:
    for spec in primary_fields():
        print(f"{spec.name}\t{spec.kind}\t{spec.domain_key}")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="settingsync")
    parser.add_argument("--config", help="Settings file (.ini, .yaml or .json).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_where = subparsers.add_parser("where", help="Show settings locations.")
    p_where.add_argument("--json", dest="as_json", action="store_true")
    p_where.set_defaults(func=where_cmd)

    p_show = subparsers.add_parser("show", help="Show the current view values.")
    p_show.add_argument("field", nargs="?")
    p_show.add_argument("--json", dest="as_json", action="store_true")
    p_show.set_defaults(func=show_cmd)

    p_set = subparsers.add_parser("set", help="Set FIELD to VALUE and save.")
    p_set.add_argument("field")
    p_set.add_argument("value")
    p_set.set_defaults(func=set_cmd)

    p_add = subparsers.add_parser("add-dir", help="Add a game directory.")
    p_add.add_argument("path")
    p_add.set_defaults(func=add_dir_cmd)

    p_rm = subparsers.add_parser("remove-dir", help="Remove a game directory.")
    p_rm.add_argument("path")
    p_rm.set_defaults(func=remove_dir_cmd)

    p_defaults = subparsers.add_parser("defaults", help="Restore and save the default settings.")
    p_defaults.add_argument("--dry-run", action="store_true", help="Only print the defaults.")
    p_defaults.set_defaults(func=defaults_cmd)

    p_fields = subparsers.add_parser("fields", help="List editable fields.")
    p_fields.set_defaults(func=fields_cmd)

    p_ifaces = subparsers.add_parser("interfaces", help="List network interfaces.")
    p_ifaces.set_defaults(func=interfaces_cmd)

    p_tz = subparsers.add_parser("timezones", help="List time zones.")
    p_tz.add_argument("filter", nargs="?")
    p_tz.set_defaults(func=timezones_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        return int(func(args))
    except (SettingsSyncError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
