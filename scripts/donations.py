#!/usr/bin/env python3
"""
Operator CLI for the donation ledger.

Usage:
    python3 scripts/donations.py init-db
    python3 scripts/donations.py add-item "Apples" fruit --stock 40
    python3 scripts/donations.py set-stock 3 0
    python3 scripts/donations.py delete-item 3
    python3 scripts/donations.py list-items --name app --category fruit --in-stock
    python3 scripts/donations.py add-recipient "Alice Murphy" --class individual
    python3 scripts/donations.py assign --item 1 --recipient 1 --donation 1 --quantity 5
    python3 scripts/donations.py reverse --item 1 --recipient 1
    python3 scripts/donations.py list-distributions --recipient 1
    python3 scripts/donations.py list-distributions --item 1 --donation 2

Exit status is 0 on success, 1 when the request was rejected, 2 on usage errors.
"""

import argparse
import sys
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _print_items(items) -> None:
    if not items:
        print("  (no items)")
        return
    print(f"  {'ID':>5}  {'NAME':<30} {'CATEGORY':<10} {'STOCK':>6}")
    for item in items:
        print(f"  {item.id:>5}  {item.name:<30} {item.category_label:<10} {item.stock:>6}")


def _print_distributions(rows) -> None:
    if not rows:
        print("  (no distributions)")
        return
    print(f"  {'DATE':<10}  {'ITEM':<24} {'RECIPIENT':<24} {'DONATION':<28} {'QTY':>4}")
    for row in rows:
        print(
            f"  {row.distribution_date.isoformat():<10}  "
            f"{row.item_name:<24} {row.recipient_name:<24} "
            f"{row.donation_name:<28} {row.quantity:>4}"
        )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Food donation stock ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--set", dest="set_name", default="default",
                        help="Configuration set name (default: default)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables and seed the standard drives")

    p = sub.add_parser("add-item", help="Add an item to the catalog")
    p.add_argument("name")
    p.add_argument("category", help="beverage or fruit")
    p.add_argument("--stock", type=int, default=0)

    p = sub.add_parser("set-stock", help="Override an item's stock")
    p.add_argument("item_id", type=int)
    p.add_argument("stock", type=int)

    p = sub.add_parser("delete-item", help="Delete an item with no distributions")
    p.add_argument("item_id", type=int)

    p = sub.add_parser("list-items", help="List catalog items")
    p.add_argument("--name", default=None, help="Name or id substring")
    p.add_argument("--category", default=None)
    p.add_argument("--in-stock", action="store_true")

    p = sub.add_parser("add-recipient", help="Add a recipient")
    p.add_argument("name")
    p.add_argument("--class", dest="recipient_class", default="individual",
                   help="individual or organisation")
    p.add_argument("--address")
    p.add_argument("--gender")
    p.add_argument("--phone")
    p.add_argument("--email")
    p.add_argument("--emergency-contact")

    p = sub.add_parser("assign", help="Assign item stock to a recipient")
    p.add_argument("--item", type=int, required=True)
    p.add_argument("--recipient", type=int, required=True)
    p.add_argument("--donation", type=int, required=True)
    p.add_argument("--quantity", type=int, required=True)

    p = sub.add_parser("reverse", help="Reverse an assignment and restore stock")
    p.add_argument("--item", type=int, required=True)
    p.add_argument("--recipient", type=int, required=True)

    p = sub.add_parser("list-distributions", help="Show distributions")
    group = p.add_mutually_exclusive_group()
    group.add_argument("--recipient", type=int)
    group.add_argument("--item", type=int)
    p.add_argument("--donation", type=int, help="Filter by donation drive (not with --recipient)")

    return parser


def _run(args, kernel) -> int:
    cmd = args.command

    if cmd == "init-db":
        kernel.create_schema()
        with kernel.unit_of_work() as ws:
            created = ws.donations.seed_default_donations()
        print(f"  Schema ready. {len(created)} donation drive(s) created.")
        return 0

    if cmd in ("assign", "reverse"):
        if cmd == "assign":
            result = kernel.ledger.assign(args.item, args.recipient, args.donation, args.quantity)
        else:
            result = kernel.ledger.reverse(args.item, args.recipient)
        if not result.is_success:
            hint = " (retry)" if result.is_retryable else ""
            print(f"  REJECTED {result.error_kind.value}{hint}: {result.message}", file=sys.stderr)
            return 1
        d = result.distribution
        print(
            f"  {result.status.value.upper()} item {d.item_id} / recipient {d.recipient_id}"
            f" x{d.quantity}; stock now {result.stock_after}"
        )
        return 0

    if cmd == "list-distributions":
        if args.recipient is not None:
            rows = kernel.ledger.list_by_recipient(args.recipient)
        elif args.item is not None:
            rows = kernel.ledger.list_by_item(args.item, args.donation)
        else:
            rows = kernel.ledger.list_all(args.donation)
        _print_distributions(rows)
        return 0

    with kernel.unit_of_work() as ws:
        if cmd == "add-item":
            item = ws.catalog.create_item(args.name, args.category, args.stock)
            print(f"  Created item {item.id}: {item.name} [{item.category_label}] stock={item.stock}")
        elif cmd == "set-stock":
            item = ws.catalog.update_stock(args.item_id, args.stock)
            print(f"  Item {item.id} stock set to {item.stock}")
        elif cmd == "delete-item":
            ws.catalog.delete_item(args.item_id)
            print(f"  Deleted item {args.item_id}")
        elif cmd == "list-items":
            _print_items(ws.catalog.list_items(args.name, args.category, args.in_stock))
        elif cmd == "add-recipient":
            recipient = ws.recipients.create_recipient(
                args.name,
                recipient_class=args.recipient_class,
                address=args.address,
                gender=args.gender,
                phone=args.phone,
                email=args.email,
                emergency_contact=args.emergency_contact,
            )
            print(f"  Created recipient {recipient.id}: {recipient.name}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if (
        args.command == "list-distributions"
        and args.recipient is not None
        and args.donation is not None
    ):
        parser.error("--donation cannot be combined with --recipient")

    from donation_config import get_active_config
    from donation_kernel.bootstrap import build_kernel
    from donation_kernel.exceptions import DonationKernelError

    kernel = build_kernel(get_active_config(set_name=args.set_name))
    try:
        return _run(args, kernel)
    except DonationKernelError as exc:
        hint = " (retry)" if exc.retryable else ""
        print(f"  ERROR {exc.code}{hint}: {exc}", file=sys.stderr)
        if args.command == "delete-item" and exc.code == "ITEM_IN_USE":
            print("  Set stock to 0 instead.", file=sys.stderr)
        return 1
    finally:
        kernel.dispose()


if __name__ == "__main__":
    sys.exit(main())
