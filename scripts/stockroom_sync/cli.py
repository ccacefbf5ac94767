"""
cli.py – Command-line front end for the stock console.

Reads the cached dataset, logs in/out, refreshes, and runs quote mutations
through the confirm/execute flow.  Connection settings come from the
environment (see ``config.py``).

Examples:
    stockroom-sync login --username maria
    stockroom-sync refresh
    stockroom-sync quote-items
    stockroom-sync update-item 42 --price 19.90 --status aprovado
    stockroom-sync finalize-quote 7
    stockroom-sync logout
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
from dataclasses import dataclass
from typing import Callable, Optional

from .actions import ActionExecutor, ActionState
from .config import Settings
from .errors import SyncError
from .formatting import format_iso_date
from .gateway import RemoteGateway
from .lookups import index_by_id, partition_records, product_name, supplier_name
from .models import PARTITION_KEYS
from .notifications import NotificationQueue
from .quotes import FINALIZED_STATUS, create_quote, finalize_quote, update_quote_item
from .refresh import RefreshCoordinator
from .session import login, logout, require_auth
from .storage import FileStorage, SessionStore

log = logging.getLogger(__name__)


@dataclass
class Console:
    """Everything a command needs, wired once per invocation."""

    store: SessionStore
    gateway: RemoteGateway
    refresher: RefreshCoordinator
    notifications: NotificationQueue
    executor: ActionExecutor


def build_console(settings: Settings, storage=None, session=None) -> Console:
    store = SessionStore(storage or FileStorage(settings.data_dir, settings.base_url))
    gateway = RemoteGateway(
        settings.base_url,
        settings.endpoints,
        token_source=store.get_token,
        session=session,
        timeout=settings.timeout,
    )
    notifications = NotificationQueue(ttl=settings.notification_ttl)
    notifications.subscribe(
        lambda item: print(f"[{item.label}] {item.message}", file=sys.stderr)
    )
    return Console(
        store=store,
        gateway=gateway,
        refresher=RefreshCoordinator(gateway, store),
        notifications=notifications,
        executor=ActionExecutor(notifications),
    )


def run_action(
    console: Console,
    title: str,
    message: str,
    operation,
    success_message: Optional[str] = None,
    assume_yes: bool = False,
    prompt: Callable[[str], str] = input,
) -> bool:
    """
    Drive one confirm/execute cycle on the terminal.  After a failure the same
    prompt is shown again until the user confirms successfully or declines.
    """
    executor = console.executor
    executor.request(title, message, operation, success_message)
    while executor.state in (ActionState.CONFIRMING, ActionState.REVERTED):
        if assume_yes and executor.state is ActionState.CONFIRMING:
            answer = "y"
        else:
            print(f"\n{title}\n{message}")
            if executor.state is ActionState.REVERTED:
                print("The last attempt failed. Retry?")
            try:
                answer = prompt("Confirm? [y/N] ")
            except EOFError:
                answer = ""
        if answer.strip().lower() not in ("y", "yes"):
            executor.cancel()
            return False
        asyncio.run(executor.confirm())
    return executor.state is ActionState.CLOSED


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_login(console: Console, args: argparse.Namespace) -> int:
    password = args.password or os.environ.get("STOCKROOM_PASSWORD") or getpass.getpass("Password: ")
    asyncio.run(login(console.gateway, console.store, console.refresher, args.username, password))
    console.notifications.success(f"Logged in as {args.username}")
    return 0


def cmd_logout(console: Console, args: argparse.Namespace) -> int:
    logout(console.store)
    console.notifications.info("Logged out")
    return 0


def cmd_refresh(console: Console, args: argparse.Namespace) -> int:
    require_auth(console.store)
    asyncio.run(console.refresher.refresh_all())
    console.notifications.success("Data refreshed")
    return 0


def cmd_status(console: Console, args: argparse.Namespace) -> int:
    session = console.store.get_session()
    if session is None:
        print("Not logged in")
        return 0
    print(f"User: {json.dumps(session.user, ensure_ascii=False)}")
    snapshot = console.store.get_snapshot()
    if snapshot is None:
        print("No cached data; run 'refresh'")
        return 0
    for attr, key in PARTITION_KEYS.items():
        records = snapshot.partition(attr)
        count = len(records) if isinstance(records, list) else "invalid"
        print(f"  {key:<18} {count}")
    return 0


def _cached(console: Console):
    require_auth(console.store)
    snapshot = console.store.get_snapshot()
    if snapshot is None:
        raise SyncError("No cached data; run 'refresh' first.")
    return snapshot


def cmd_products(console: Console, args: argparse.Namespace) -> int:
    for product in partition_records(_cached(console), "products"):
        print(f"{product.get('id')!s:>8}  {product.get('name', '')}")
    return 0


def cmd_suppliers(console: Console, args: argparse.Namespace) -> int:
    for supplier in partition_records(_cached(console), "suppliers"):
        print(f"{supplier.get('id')!s:>8}  {supplier.get('name', '')}")
    return 0


def cmd_quote_items(console: Console, args: argparse.Namespace) -> int:
    snapshot = _cached(console)
    if args.quote and args.quote not in index_by_id(partition_records(snapshot, "quotes")):
        raise SyncError(f"Quote {args.quote} is not in the cached data.")
    for item in partition_records(snapshot, "quote_items"):
        if args.quote and str(item.get("quote_id")) != args.quote:
            continue
        print(
            f"{item.get('id')!s:>8}  "
            f"{product_name(console.store, item.get('product_id')):<30}  "
            f"{supplier_name(console.store, item.get('supplier_id')):<24}  "
            f"{item.get('price', '')!s:>10}  {item.get('status', '')}  "
            f"{format_iso_date(item.get('updated_at'))}"
        )
    return 0


def cmd_create_quote(console: Console, args: argparse.Namespace) -> int:
    require_auth(console.store)
    body = args.body or {}
    ok = run_action(
        console,
        "Create quote",
        "Open a new quote?",
        lambda: create_quote(console.gateway, console.refresher, body),
        success_message="Quote created",
        assume_yes=args.yes,
    )
    return 0 if ok else 1


def cmd_update_item(console: Console, args: argparse.Namespace) -> int:
    require_auth(console.store)
    ok = run_action(
        console,
        "Update quote item",
        f"Set item {args.item_id} to price {args.price} with status '{args.status}'?",
        lambda: update_quote_item(console.gateway, console.refresher, args.item_id, args.price, args.status),
        success_message="Quote item updated",
        assume_yes=args.yes,
    )
    return 0 if ok else 1


def cmd_finalize_quote(console: Console, args: argparse.Namespace) -> int:
    require_auth(console.store)
    ok = run_action(
        console,
        "Finalize quote",
        f"Finalize quote {args.quote_id}? Prices can no longer be changed afterwards.",
        lambda: finalize_quote(console.gateway, console.refresher, args.quote_id, args.status),
        success_message="Quote finalized",
        assume_yes=args.yes,
    )
    return 0 if ok else 1


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="stockroom-sync",
        description="Sync and manage stock, suppliers and quotes from the command line.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login", help="Authenticate and load the dataset")
    p.add_argument("--username", required=True)
    p.add_argument("--password", help="Password (else STOCKROOM_PASSWORD or prompt)")
    p.set_defaults(func=cmd_login)

    sub.add_parser("logout", help="Clear session and cached data").set_defaults(func=cmd_logout)
    sub.add_parser("refresh", help="Reload every partition").set_defaults(func=cmd_refresh)
    sub.add_parser("status", help="Show session and cache state").set_defaults(func=cmd_status)
    sub.add_parser("products", help="List cached products").set_defaults(func=cmd_products)
    sub.add_parser("suppliers", help="List cached suppliers").set_defaults(func=cmd_suppliers)

    p = sub.add_parser("quote-items", help="List cached quote items")
    p.add_argument("--quote", help="Only items of this quote id")
    p.set_defaults(func=cmd_quote_items)

    p = sub.add_parser("create-quote", help="Open a new quote")
    p.add_argument("--body", type=json.loads, help="Extra JSON body for the request")
    p.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_create_quote)

    p = sub.add_parser("update-item", help="Set price and status of a quote item")
    p.add_argument("item_id")
    p.add_argument("--price", required=True, type=float)
    p.add_argument("--status", required=True)
    p.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_update_item)

    p = sub.add_parser("finalize-quote", help="Finalize a quote")
    p.add_argument("quote_id")
    p.add_argument("--status", default=FINALIZED_STATUS)
    p.add_argument("-y", "--yes", action="store_true", help="Do not ask for confirmation")
    p.set_defaults(func=cmd_finalize_quote)

    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    console = build_console(Settings.from_env())
    try:
        return args.func(console, args)
    except SyncError as exc:
        log.debug("Command %s failed: %s", args.command, exc.diagnostic)
        console.notifications.error(exc.display_message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
