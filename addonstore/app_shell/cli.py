import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from addonstore.app_shell.config import configure_logging, validate_ops_rules
from addonstore.app_shell.context import StoreContext
from addonstore.domain.entities import User
from addonstore.rules.loader import load_rules
from addonstore.shell.channel import resolve

logger = logging.getLogger("cli")

RULES_PATH = "rules.yaml"


def get_context(rules_path: str) -> StoreContext:
    path = Path(rules_path)
    if not path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    rules = load_rules(path)
    configure_logging(rules.logging.level)
    validate_ops_rules(rules)
    return StoreContext.create(rules, base_dir=path.resolve().parent)


def _dump(value: object) -> None:
    if isinstance(value, list):
        print(json.dumps([v.model_dump(mode="json") for v in value], indent=2))
    elif hasattr(value, "model_dump"):
        print(json.dumps(value.model_dump(mode="json"), indent=2))
    else:
        print(json.dumps(value, indent=2))


def handle_migrate(ctx: StoreContext, args: argparse.Namespace) -> int:
    # Migrations run while the context is built
    print(f"Database ready at {ctx.db_path or 'memory'}.")
    return 0


def handle_addons(ctx: StoreContext, args: argparse.Namespace) -> int:
    for addon in ctx.registry.addons():
        print(f"{addon.id}  {addon.name}  {', '.join(sorted(addon.types))}")
    return 0


def handle_add_user(ctx: StoreContext, args: argparse.Namespace) -> int:
    user = asyncio.run(ctx.users.save(User(name=args.name)))
    print(f"User '{user.name}' created with id {user.id}")
    return 0


def handle_show(ctx: StoreContext, args: argparse.Namespace) -> int:
    result = asyncio.run(ctx.store.get(args.record_id))
    _dump(resolve(result, return_error=True))
    return 0 if result.success else 1


def handle_owned(ctx: StoreContext, args: argparse.Namespace) -> int:
    result = asyncio.run(ctx.store.list_owned(args.user_id))
    _dump(resolve(result, return_error=True))
    return 0 if result.success else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="addonstore CLI")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")
    subparsers.add_parser("addons", help="List configured addons")

    add_user_parser = subparsers.add_parser("add-user", help="Create a user")
    add_user_parser.add_argument("name", help="Display name")

    show_parser = subparsers.add_parser("show", help="Show a content record")
    show_parser.add_argument("record_id")

    owned_parser = subparsers.add_parser("owned", help="List content owned by a user")
    owned_parser.add_argument("user_id")

    args = parser.parse_args(argv)
    ctx = get_context(args.rules)

    handlers = {
        "migrate": handle_migrate,
        "addons": handle_addons,
        "add-user": handle_add_user,
        "show": handle_show,
        "owned": handle_owned,
    }
    return handlers[args.command](ctx, args)


if __name__ == "__main__":
    sys.exit(main())
