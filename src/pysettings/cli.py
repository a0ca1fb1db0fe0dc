from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .adapters import NAMED_ADAPTERS, adapter_for
from .core import Settings
from .errors import SettingsError
from .messages import DEFAULT_MESSAGES, dump_message_table, load_message_table
from .paths import default_settings_file

logger = logging.getLogger(__name__)


def _settings_file(args: argparse.Namespace) -> Path:
    if args.file is not None:
        return Path(args.file)
    return default_settings_file()


def _message_table(args: argparse.Namespace) -> tuple[str, ...]:
    if args.messages is None:
        return DEFAULT_MESSAGES
    return load_message_table(args.messages)


def _open(args: argparse.Namespace) -> Settings:
    settings = Settings(_message_table(args))
    settings.load(_settings_file(args))
    return settings


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def check_cmd(args: argparse.Namespace) -> int:
    _open(args)
    print("ok")
    return 0


def dump_cmd(args: argparse.Namespace) -> int:
    print(_open(args), end="")
    return 0


def sections_cmd(args: argparse.Namespace) -> int:
    for name in _open(args).sections():
        print(name)
    return 0


def keys_cmd(args: argparse.Namespace) -> int:
    for key in _open(args).keys(args.section):
        print(key)
    return 0


def get_cmd(args: argparse.Namespace) -> int:
    adapter = adapter_for(args.type)
    settings = _open(args)
    result = settings.get(args.section, args.key, None, kind=adapter)
    if result.ok:
        print(adapter.serialize(result.value))
        return 0
    print(result.error, file=sys.stderr)
    if args.default is not None:
        print(args.default)
        return 0
    return 1


def set_cmd(args: argparse.Namespace) -> int:
    adapter = adapter_for(args.type)
    try:
        value = adapter.parse(args.value)
    except ValueError as exc:
        print(f"invalid {adapter.name} value {args.value!r}: {exc}", file=sys.stderr)
        return 1
    settings = _open(args)
    settings.set(args.section, args.key, value, kind=adapter)
    settings.save()
    return 0


def where_cmd(args: argparse.Namespace) -> int:
    print(str(_settings_file(args)))
    return 0


def messages_cmd(args: argparse.Namespace) -> int:
    print(dump_message_table(_message_table(args)), end="")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pysettings", description="Inspect and edit INI-style settings files."
    )
    parser.add_argument("-f", "--file", help="Settings file (default: per-user settings.ini)")
    parser.add_argument("--messages", type=Path, help="TOML file with localized messages")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    p_check = subparsers.add_parser("check", help="Validate the settings file.")
    p_check.set_defaults(func=check_cmd)

    p_dump = subparsers.add_parser("dump", help="Print every section and key.")
    p_dump.set_defaults(func=dump_cmd)

    p_sections = subparsers.add_parser("sections", help="List section names.")
    p_sections.set_defaults(func=sections_cmd)

    p_keys = subparsers.add_parser("keys", help="List the keys of SECTION.")
    p_keys.add_argument("section")
    p_keys.set_defaults(func=keys_cmd)

    types = sorted(NAMED_ADAPTERS)

    p_get = subparsers.add_parser("get", help="Print the value of KEY in SECTION.")
    p_get.add_argument("section")
    p_get.add_argument("key")
    p_get.add_argument("--type", choices=types, default="str")
    p_get.add_argument("--default", help="Printed when the value is unavailable")
    p_get.set_defaults(func=get_cmd)

    p_set = subparsers.add_parser("set", help="Set KEY in SECTION to VALUE and save.")
    p_set.add_argument("section")
    p_set.add_argument("key")
    p_set.add_argument("value")
    p_set.add_argument("--type", choices=types, default="str")
    p_set.set_defaults(func=set_cmd)

    p_where = subparsers.add_parser("where", help="Print the settings file path.")
    p_where.set_defaults(func=where_cmd)

    p_messages = subparsers.add_parser(
        "messages", help="Print the message table as TOML, ready for translation."
    )
    p_messages.set_defaults(func=messages_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    func = getattr(args, "func", None)
    if func is None:
        parser.print_help()
        return 1
    try:
        return int(func(args))
    except SettingsError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        logger.debug("command failed", exc_info=True)
        print(str(exc), file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
