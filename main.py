"""Command-line interface for the user management service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from dataclasses import replace
from typing import Sequence

from usermanagement.application import create_data_context
from usermanagement.config import Settings, load_settings, resolve_seed_path
from usermanagement.database import DataContext
from usermanagement.service import UserService
from usermanagement.views import build_user_list

logger = logging.getLogger("usermanagement.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="User management utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    serve_parser = subparsers.add_parser("serve", help="Start the HTTP user management service")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address for the web UI")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port for the web UI (default: 8000)",
    )
    serve_parser.add_argument(
        "--seed-file",
        default=None,
        help="YAML file with the users loaded at start-up",
    )
    serve_parser.add_argument(
        "--no-seed",
        action="store_true",
        help="Start with an empty user store",
    )

    list_parser = subparsers.add_parser(
        "list-users", help="Print the users a freshly started service would hold"
    )
    list_parser.add_argument(
        "--seed-file",
        default=None,
        help="YAML file with the users loaded at start-up",
    )
    list_parser.add_argument(
        "--filter",
        default="all",
        help="Restrict the listing to 'active' or 'inactive' users",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "list-users"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            if any(flag in args_list for flag in ("-h", "--help")):
                return parser.parse_args(args_list)
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = load_settings(os.environ)
    if getattr(args, "seed_file", None):
        settings = replace(settings, seed_path=resolve_seed_path(args.seed_file))
    if getattr(args, "no_seed", False):
        settings = replace(settings, seed_enabled=False)
    return settings


def _initialise_data(settings: Settings) -> DataContext:
    try:
        data = create_data_context(settings)
    except (OSError, ValueError) as exc:
        raise SystemExit(f"Failed to load seed users: {exc}") from exc
    logger.info("User store initialised with %d user(s)", len(data.get_all()))
    return data


def _serve(*, settings: Settings, data: DataContext, host: str, port: int) -> None:
    from usermanagement.application import create_application
    import uvicorn

    logger.info("Starting user management UI on http://%s:%s", host, port)
    app = create_application(settings=settings, data=data)
    uvicorn.run(app, host=host, port=port, log_level="info")


def _list_users(data: DataContext, raw_filter: str) -> None:
    model = build_user_list(UserService(data), raw_filter)

    if not model.items:
        print("No users are currently registered.")
        return

    print(f"{len(model.items)} user(s) found (filter: {model.active_filter}):")
    print(f"{'ID':>4}  {'Name':<28}  {'Email':<32}  {'Born':<10}  Active")
    print("-" * 88)
    for item in model.items:
        name = f"{item.forename} {item.surname}"
        born = item.date_of_birth.isoformat() if item.date_of_birth else "-"
        active = "yes" if item.is_active else "no"
        print(f"{item.id:>4}  {name:<28}  {item.email:<32}  {born:<10}  {active}")


def main(argv: Sequence[str] | None = None) -> None:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    settings = _settings_for(args)
    data = _initialise_data(settings)

    if args.command == "serve":
        _serve(settings=settings, data=data, host=args.host, port=args.port)
    elif args.command == "list-users":
        _list_users(data, args.filter)


if __name__ == "__main__":
    main()
