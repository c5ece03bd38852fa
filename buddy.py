#!/usr/bin/env python3
"""
Command line access to a user's vehicle records.

Commands:
  list  - Show all vehicles of a user
  show  - Show one vehicle and its tyre record
  add   - Create (or replace) a vehicle record
"""

import argparse
import os
import sys
from pathlib import Path
from typing import List

from tabulate import tabulate

from autobuddy import (
    AutoBuddyError,
    DocumentStore,
    Tyre,
    Vehicle,
    TYRE_TYPES,
    VEHICLE_TYPES,
    create_vehicle,
    format_date_changed,
    get_vehicle,
    list_vehicles,
)
from autobuddy.vehicles import normalize_plate

DEFAULT_DATA_DIR = Path(os.environ.get("AUTOBUDDY_DATA_DIR", "data"))

# =============================================================================
# Formatting helpers
# =============================================================================


def dash(value: str) -> str:
    """Show empty fields as a dash."""
    return value if value else "-"


def make_vehicle_table(vehicles: List[Vehicle]) -> List[List[str]]:
    """Convert vehicles to list table rows."""
    return [
        [
            v.plate,
            dash(v.type),
            dash(v.current_mileage),
            dash(v.tyres.brand),
            dash(v.tyres.type),
        ]
        for v in vehicles
    ]


def make_detail_rows(vehicle: Vehicle) -> List[List[str]]:
    """Field/value rows for one vehicle; Notes only when there are notes."""
    tyre = vehicle.tyres
    rows = [
        ["Plate Number", vehicle.plate],
        ["Vehicle Type", dash(vehicle.type)],
        ["Current Mileage", dash(vehicle.current_mileage)],
        ["Tyre Brand", dash(tyre.brand)],
        ["Tyre Type", dash(tyre.type)],
        ["Size", tyre.size],
        ["Date Changed", dash(tyre.date_changed)],
        ["Max Mileage", dash(tyre.max_mileage)],
        ["Mileage When Changed", dash(tyre.vehicle_mileage_when_changed)],
    ]
    if tyre.has_notes:
        rows.append(["Notes", tyre.notes])
    return rows


# =============================================================================
# Commands
# =============================================================================


def cmd_list(store: DocumentStore, args) -> int:
    """Show all vehicles of a user."""
    vehicles = list_vehicles(store, args.user_id)
    if not vehicles:
        print("No vehicles.")
        return 0
    headers = ["Plate", "Type", "Current Mileage", "Tyre Brand", "Tyre Type"]
    print(tabulate(make_vehicle_table(vehicles), headers=headers, tablefmt="simple"))
    return 0


def cmd_show(store: DocumentStore, args) -> int:
    """Show one vehicle."""
    vehicle = get_vehicle(store, args.user_id, args.plate)
    if vehicle is None:
        print(f"Error: Vehicle not found: {args.plate}")
        return 1
    print(tabulate(make_detail_rows(vehicle), tablefmt="plain"))
    return 0


def cmd_add(store: DocumentStore, args) -> int:
    """Create or replace a vehicle record."""
    vehicle = Vehicle(
        plate=normalize_plate(args.plate),
        current_mileage=args.mileage,
        type=args.type,
        tyres=Tyre(
            width=args.width,
            aspect_ratio=args.aspect_ratio,
            rim_diameter=args.rim_diameter,
            brand=args.brand,
            type=args.tyre_type,
            date_changed=args.date_changed or format_date_changed(),
            max_mileage=args.max_mileage,
            vehicle_mileage_when_changed=args.changed_at or "",
            notes=args.notes or "",
        ),
    )

    print(tabulate(make_detail_rows(vehicle), tablefmt="plain"))
    if args.dry_run:
        print()
        print("(dry run - not saved)")
        return 0

    existing = get_vehicle(store, args.user_id, vehicle.plate)
    create_vehicle(store, args.user_id, vehicle)
    print()
    if existing is not None:
        print(f"Replaced existing record for {vehicle.plate}")
    else:
        print(f"Added {vehicle.plate}")
    return 0


# =============================================================================
# Main
# =============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Vehicle and tyre records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s u1 list
  %(prog)s u1 show ABC123
  %(prog)s u1 add ABC123 --mileage 10000 --brand Michelin \\
      --tyre-type "Summer Tyres" --width 205 --aspect-ratio 55 \\
      --rim-diameter 16 --max-mileage 60000 --changed-at 5000
""",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=DEFAULT_DATA_DIR,
        help="Data directory (default: $AUTOBUDDY_DATA_DIR or ./data)",
    )
    parser.add_argument("user_id", type=str, help="Owner user id")

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="Show all vehicles of the user")

    show_parser = subparsers.add_parser("show", help="Show one vehicle")
    show_parser.add_argument("plate", type=str, help="Plate number")

    add_parser = subparsers.add_parser("add", help="Create or replace a vehicle")
    add_parser.add_argument("plate", type=str, help="Plate number")
    add_parser.add_argument("--mileage", required=True, help="Current mileage")
    add_parser.add_argument("--type", choices=VEHICLE_TYPES, default=VEHICLE_TYPES[0])
    add_parser.add_argument("--brand", required=True, help="Tyre brand")
    add_parser.add_argument("--tyre-type", choices=TYRE_TYPES, default=TYRE_TYPES[0])
    add_parser.add_argument("--width", required=True)
    add_parser.add_argument("--aspect-ratio", required=True)
    add_parser.add_argument("--rim-diameter", required=True)
    add_parser.add_argument("--max-mileage", required=True)
    add_parser.add_argument("--changed-at", help="Vehicle mileage when the tyres were changed")
    add_parser.add_argument("--date-changed", help="Date the tyres were changed (default: today)")
    add_parser.add_argument("--notes", help="Notes about the tyres")
    add_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be added without saving",
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    store = DocumentStore(args.data_dir)

    commands = {"list": cmd_list, "show": cmd_show, "add": cmd_add}
    try:
        return commands[args.command](store, args)
    except AutoBuddyError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
