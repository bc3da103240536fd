# retail_pos/main.py
"""
Process entry point.

    retail-pos init
    retail-pos keygen "Padaria Central"
    retail-pos activate "Padaria Central" 1A2B-...
    retail-pos dashboard --start 2025-01-01 --end 2025-01-31
    retail-pos sales [--start ... --end ... --filter pix]
    retail-pos purge --yes
"""
from __future__ import annotations

from typing import Optional, Sequence
import argparse
import json
import sys

from .config import Settings
from .constants import APP_NAME
from .errors import DomainError, StoreUnavailableError
from .modules.activation import ActivationStore, generate_key
from .modules.commands import CommandResult, PosApp
from .utils.helpers import today_str
from .utils.loggers import configure_file_logging, get_logger

_log = get_logger(__name__)


def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2, default=str))


def _emit(res: CommandResult) -> int:
    for w in res.warnings:
        print(f"warning: {w}", file=sys.stderr)
    if not res.ok:
        print(f"error: {res.error}", file=sys.stderr)
        return 1
    _print_json(res.data)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="retail-pos", description=f"{APP_NAME}: single-store point of sale.")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create or migrate the local database")

    p = sub.add_parser("keygen", help="Print the activation key for a client name")
    p.add_argument("name")

    p = sub.add_parser("activate", help="Activate this installation")
    p.add_argument("name")
    p.add_argument("key")

    today = today_str()
    p = sub.add_parser("dashboard", help="Dashboard aggregates as JSON")
    p.add_argument("--start", default=today, help="First day (YYYY-MM-DD), default today")
    p.add_argument("--end", default=today, help="Last day (YYYY-MM-DD), default today")

    p = sub.add_parser("sales", help="Sales history as JSON")
    p.add_argument("--start", help="First day (YYYY-MM-DD)")
    p.add_argument("--end", help="Last day (YYYY-MM-DD)")
    p.add_argument("--filter", dest="report_filter",
                   help="'all', 'cancelled' or a payment method; implies a report")

    p = sub.add_parser("purge", help="Delete the whole sales history (stock is kept)")
    p.add_argument("--yes", action="store_true", help="Confirm; nothing is deleted without it")
    return parser


def _run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "keygen":
        print(generate_key(args.name, settings.activation_secret))
        return 0

    if args.command == "activate":
        try:
            ActivationStore(settings.activation_path, settings.activation_secret).activate(args.name, args.key)
        except DomainError as e:
            print(f"error: {e.message}", file=sys.stderr)
            return 1
        print("Activated.")
        return 0

    if args.command == "purge" and not args.yes:
        print("Refusing to purge without --yes.", file=sys.stderr)
        return 1

    with PosApp.open(settings) as app:
        if args.command == "init":
            print(f"Database ready at {settings.db_path}")
            return 0

        if not app.is_activated():
            print("This installation is not activated; run `retail-pos activate NAME KEY`.", file=sys.stderr)
            return 1

        if args.command == "dashboard":
            return _emit(app.dispatch("dashboardData", args.start, args.end))
        if args.command == "sales":
            if args.start or args.end or args.report_filter:
                return _emit(app.dispatch("salesReport", args.start, args.end, args.report_filter or "all"))
            return _emit(app.dispatch("listSales"))
        if args.command == "purge":
            return _emit(app.dispatch("purgeHistory"))
    return 1


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings.from_env()
    try:
        settings.ensure_dirs()
        configure_file_logging(settings.log_path, settings.log_level)
    except OSError as e:
        _log.critical("Cannot prepare data directory %s: %s", settings.data_path, e)
        return 1

    try:
        return _run(args, settings)
    except StoreUnavailableError as e:
        _log.critical("Startup failed: %s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
