"""Command line access to the preferred id cache.

Usage:
  python -m e2estate key --url <url> --id <container> [--salt <salt>]
  python -m e2estate show
  python -m e2estate get --instance <key> --plugin <name> --type <component type>
  python -m e2estate remember --instance <key> --plugin <name> --type <type> --id <n>

Global options (before the command): --state <path>, --config <path>,
--verbosity quiet|normal|verbose|debug.

JSON goes to stdout; log lines go to stderr.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from e2estate.cache import PreferredIdCache
from e2estate.core.config import ConfigResolver
from e2estate.core.diagnostics import install_jsonl_sink
from e2estate.core.errors import E2EStateError
from e2estate.core.logging import get_logger, set_verbosity
from e2estate.instance_key import derive_instance_key
from e2estate.models import ComponentType
from e2estate.store import read_state

_logger = get_logger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="e2estate")
    p.add_argument("--state", dest="state_path", default=None)
    p.add_argument("--config", dest="config_path", default=None)
    p.add_argument(
        "--verbosity", choices=["quiet", "normal", "verbose", "debug"], default=None
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    key = sub.add_parser("key", help="derive an instance key")
    key.add_argument("--url", required=True)
    key.add_argument("--id", dest="target_id", required=True)
    key.add_argument("--salt", default=None)

    sub.add_parser("show", help="print the state document")

    types = [str(ct) for ct in ComponentType]
    get = sub.add_parser("get", help="print one preferred id")
    get.add_argument("--instance", required=True)
    get.add_argument("--plugin", required=True)
    get.add_argument(
        "--type", dest="component_type", type=str.casefold, choices=types, required=True
    )

    rem = sub.add_parser("remember", help="record a preferred id")
    rem.add_argument("--instance", required=True)
    rem.add_argument("--plugin", required=True)
    rem.add_argument(
        "--type", dest="component_type", type=str.casefold, choices=types, required=True
    )
    rem.add_argument("--id", dest="component_id", type=int, required=True)
    return p


def _make_resolver(args: argparse.Namespace) -> ConfigResolver:
    cli_args: dict[str, Any] = {}
    if args.state_path:
        cli_args["state.path"] = args.state_path
    if args.verbosity:
        cli_args["logging.level"] = args.verbosity
    user_config = Path(args.config_path) if args.config_path else None
    return ConfigResolver(cli_args=cli_args, user_config_path=user_config)


def _print_json(obj: Any) -> None:
    print(json.dumps(obj, indent=2, sort_keys=True))


def run(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        resolver = _make_resolver(args)
        set_verbosity(resolver.resolve_logging_level())
        install_jsonl_sink(resolver=resolver)

        if args.cmd == "key":
            salt = args.salt
            if salt is None:
                salt = resolver.resolve_optional("instance.salt")
            print(derive_instance_key(args.url, args.target_id, salt))
            return EXIT_OK

        cache = PreferredIdCache.from_resolver(resolver)

        if args.cmd == "show":
            _print_json(read_state(cache.path))
            return EXIT_OK

        if args.cmd == "get":
            found = cache.preferred_id(args.instance, args.plugin, args.component_type)
            if found is None:
                return EXIT_NOT_FOUND
            print(found)
            return EXIT_OK

        result = cache.remember(args.instance, args.plugin, args.component_type, args.component_id)
        _print_json(result.to_dict())
        return EXIT_OK
    except E2EStateError as e:
        _logger.error(str(e))
        return EXIT_USAGE


def main() -> None:
    sys.exit(run())
