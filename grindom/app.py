#!/usr/bin/env python3
"""
Grindom Control - client and order tracking for a small service business.

Composition root: logging setup, configuration, store construction, and a
small command-line front end over the data store.
"""

import argparse
import datetime
import logging
import sys
from typing import List, Optional

from colorama import Fore, Style, init

from .config import Config, load_config
from .errors import GrindomError, InvalidInputError
from .models import Client, Order, OrderStatus, ServiceTemplate
from .repositories import PayloadRepository
from .services import ANALYTICS_PERIODS, DataStore

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def setup_logging(level: str = 'WARNING', log_file: Optional[str] = None) -> logging.Logger:
    """Configure the root Grindom logger.

    Args:
        level:    Log level string (DEBUG, INFO, WARNING, ERROR, CRITICAL).
                  Defaults to WARNING so normal use is quiet.
        log_file: Optional path; when given, records are also appended there.

    Returns:
        Configured logger instance.
    """
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logger = logging.getLogger('grindom')
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter('[%(levelname)s] %(name)s: %(message)s'))
        logger.addHandler(handler)
    if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        fh = logging.FileHandler(log_file, encoding='utf-8')
        fh.setFormatter(logging.Formatter('[%(asctime)s] %(levelname)s %(name)s: %(message)s'))
        logger.addHandler(fh)
    logger.setLevel(numeric)
    return logger


logger = logging.getLogger('grindom.cli')


def build_store(config: Config) -> DataStore:
    """Create the repository and the store, and load the persisted dataset."""
    repo = PayloadRepository(config.data_path)
    store = DataStore(repo, currency_code=config.currency_code)
    store.load()
    return store


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

STATUS_COLORS = {
    OrderStatus.NEW: Fore.CYAN,
    OrderStatus.IN_PROGRESS: Fore.YELLOW,
    OrderStatus.DONE: Fore.GREEN,
    OrderStatus.CANCELED: Fore.RED,
}


def _short_id(value) -> str:
    return str(value)[:8]


def _client_name(store: DataStore, order: Order) -> str:
    client = store.client_by_id(order.client_id)
    return client.name if client else 'Unknown'


def print_board(store: DataStore) -> None:
    for status in store.status_order:
        items = store.orders_for_status(status)
        color = STATUS_COLORS[status]
        print(f"{color}{Style.BRIGHT}{status.value} ({len(items)})")
        if not items:
            print(f"  {Style.DIM}-")
        for o in items:
            when = o.date.astimezone().strftime('%Y-%m-%d %H:%M')
            print(f"  {Fore.WHITE}{_short_id(o.id)}  {when}  "
                  f"{_client_name(store, o)} · {o.service_name} · "
                  f"{store.format_currency(o.price)}")
        print()


def print_clients(store: DataStore, query: str = '', include_archived: bool = False) -> None:
    clients: List[Client] = store.active_clients(query)
    if include_archived:
        clients += sorted((c for c in store.clients if c.is_archived),
                          key=lambda c: c.name.casefold())
    if not clients:
        print(f"{Fore.YELLOW}No clients found.")
        return
    for c in clients:
        orders = store.orders_for_client(c)
        flag = f" {Fore.RED}[archived]" if c.is_archived else ''
        note = f" {Style.DIM}- {c.note}" if c.note else ''
        print(f"{Fore.WHITE}{_short_id(c.id)}  {Style.BRIGHT}{c.name}{Style.RESET_ALL}"
              f"  ({len(orders)} orders){note}{flag}")


def print_analytics(store: DataStore, period_days: int) -> None:
    totals = store.totals(period_days)
    print(f"{Fore.CYAN}{Style.BRIGHT}Analytics - last {period_days}d")
    print(f"  Completed orders: {totals.count}")
    print(f"  Revenue:          {store.format_currency(totals.revenue)}")
    print(f"  Average check:    {store.format_currency(totals.avg)}")
    breakdown = store.service_breakdown(period_days)
    if breakdown:
        print(f"\n{Fore.CYAN}By service")
        for item in breakdown:
            print(f"  {item.name:<16}{store.format_currency(item.total)}")


def print_templates() -> None:
    for t in ServiceTemplate.default_templates():
        print(f"  {t.name:<12} {t.base_price:>8.2f}  {t.icon}  {t.color_hex}")


# ---------------------------------------------------------------------------
# Argument resolution
# ---------------------------------------------------------------------------

def _resolve_client(store: DataStore, ref: str) -> Client:
    ref_cf = ref.strip().casefold()
    by_name = [c for c in store.clients if c.name.casefold() == ref_cf]
    if len(by_name) == 1:
        return by_name[0]
    by_id = [c for c in store.clients if str(c.id).startswith(ref.strip().lower())]
    if len(by_id) == 1:
        return by_id[0]
    raise InvalidInputError(f"No unique client matches {ref!r}")


def _resolve_order(store: DataStore, ref: str) -> Order:
    matches = [o for o in store.orders if str(o.id).startswith(ref.strip().lower())]
    if len(matches) != 1:
        raise InvalidInputError(f"No unique order matches {ref!r}")
    return matches[0]


def _resolve_template(name: str) -> ServiceTemplate:
    for t in ServiceTemplate.default_templates():
        if t.name.casefold() == name.strip().casefold():
            return t
    raise InvalidInputError(f"Unknown service template {name!r}")


def _parse_date(text: Optional[str]) -> datetime.datetime:
    if not text:
        return datetime.datetime.now().astimezone()
    try:
        return datetime.datetime.fromisoformat(text)
    except ValueError:
        raise InvalidInputError(f"Invalid date {text!r}; use YYYY-MM-DD[THH:MM]") from None


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='grindom',
        description='Grindom Control - clients, orders and revenue for a small service business',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  grindom board                          # Show the order board
  grindom clients --search ann           # Find clients
  grindom add-client "Anna" --note VIP   # Add a client
  grindom add-order Anna Haircut --date 2026-03-01T10:00
  grindom advance 3f2a1b9c               # Move an order to the next status
  grindom analytics --period 7           # Revenue for the last week
        """
    )
    parser.add_argument(
        '--config', '-c',
        default=None,
        help='Path to config file (default: ~/.grindom/config.json)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='Override the configured log level (DEBUG, INFO, WARNING, ...)'
    )
    sub = parser.add_subparsers(dest='command')

    sub.add_parser('board', help='Show orders grouped by status')

    p = sub.add_parser('clients', help='List clients')
    p.add_argument('--search', default='', help='Filter by name or note')
    p.add_argument('--all', action='store_true', help='Include archived clients')

    p = sub.add_parser('analytics', help='Show revenue for a trailing window')
    p.add_argument('--period', type=int, default=None, metavar='DAYS',
                   help=f"Window length in days (usually one of {ANALYTICS_PERIODS})")

    sub.add_parser('templates', help='List the built-in service templates')

    p = sub.add_parser('add-client', help='Create a client')
    p.add_argument('name')
    p.add_argument('--note', default=None)

    p = sub.add_parser('archive-client', help='Archive (or restore) a client')
    p.add_argument('client', help='Client name or id prefix')
    p.add_argument('--restore', action='store_true')

    p = sub.add_parser('delete-client', help='Delete a client and all of its orders')
    p.add_argument('client', help='Client name or id prefix')

    p = sub.add_parser('add-order', help='Create an order from a service template')
    p.add_argument('client', help='Client name or id prefix')
    p.add_argument('template', help='Template name, e.g. Haircut')
    p.add_argument('--price', default=None, help='Override the template price')
    p.add_argument('--date', default=None, help='ISO date/time (default: now)')
    p.add_argument('--note', default=None)
    p.add_argument('--status', default=OrderStatus.NEW.value,
                   choices=[s.value for s in OrderStatus])

    p = sub.add_parser('advance', help='Move an order to the next status')
    p.add_argument('order', help='Order id prefix')

    p = sub.add_parser('move', help='Set an order status directly')
    p.add_argument('order', help='Order id prefix')
    p.add_argument('status', choices=[s.value for s in OrderStatus])

    p = sub.add_parser('delete-order', help='Delete an order')
    p.add_argument('order', help='Order id prefix')

    sub.add_parser('reset', help='Delete the data file (demo data is re-seeded on next start)')
    return parser


def run(args: argparse.Namespace, config: Config) -> int:
    if args.command == 'templates':
        print_templates()
        return 0
    if args.command == 'reset':
        if PayloadRepository(config.data_path).clear():
            print(f"{Fore.GREEN}Removed {config.data_path}")
        else:
            print(f"{Fore.YELLOW}Nothing to remove at {config.data_path}")
        return 0

    store = build_store(config)

    if args.command in (None, 'board'):
        print_board(store)
    elif args.command == 'clients':
        print_clients(store, args.search, include_archived=args.all)
    elif args.command == 'analytics':
        print_analytics(store, args.period or config.analytics_period_days)
    elif args.command == 'add-client':
        client = store.add_client(args.name, args.note)
        print(f"{Fore.GREEN}Added client {client.name} ({_short_id(client.id)})")
    elif args.command == 'archive-client':
        client = _resolve_client(store, args.client)
        store.update_client(client, client.name, client.note, archived=not args.restore)
        print(f"{Fore.GREEN}{'Restored' if args.restore else 'Archived'} {client.name}")
    elif args.command == 'delete-client':
        client = _resolve_client(store, args.client)
        removed = len(store.orders_for_client(client))
        store.delete_client(client)
        print(f"{Fore.GREEN}Deleted {client.name} and {removed} order(s)")
    elif args.command == 'add-order':
        client = _resolve_client(store, args.client)
        order = store.add_order_from_template(
            client, _resolve_template(args.template), _parse_date(args.date),
            price_override=args.price, note=args.note, status=OrderStatus(args.status))
        print(f"{Fore.GREEN}Added order {_short_id(order.id)}: {order.service_name} "
              f"for {client.name}, {store.format_currency(order.price)}")
    elif args.command == 'advance':
        order = store.cycle_status_forward(_resolve_order(store, args.order))
        if order is not None:
            print(f"{Fore.GREEN}Order {_short_id(order.id)} is now {order.status.value}")
    elif args.command == 'move':
        order = store.move(_resolve_order(store, args.order), OrderStatus(args.status))
        if order is not None:
            print(f"{Fore.GREEN}Order {_short_id(order.id)} is now {order.status.value}")
    elif args.command == 'delete-order':
        store.delete_order(_resolve_order(store, args.order))
        print(f"{Fore.GREEN}Order deleted")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    init(autoreset=True)
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    setup_logging(args.log_level or config.log_level, config.log_file)
    logger.debug("Running %r against %s", args.command or 'board', config.data_path)
    try:
        return run(args, config)
    except GrindomError as e:
        print(f"{Fore.RED}Error: {e}")
        return 1
    except KeyboardInterrupt:
        print(f"\n{Fore.YELLOW}Interrupted.")
        return 130


if __name__ == '__main__':
    sys.exit(main())
