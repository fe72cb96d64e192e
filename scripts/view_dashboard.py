#!/usr/bin/env python3
"""
Compute the dashboard from an exported snapshot and print it.

Usage:
    python3 scripts/view_dashboard.py snapshot.json
    python3 scripts/view_dashboard.py snapshot.xlsx --currency UGX --month 3 --year 2024
    python3 scripts/view_dashboard.py snapshot.json --ranking-window specific:2024:1,2,3
    python3 scripts/view_dashboard.py snapshot.json --screen finance --json

Window arguments take a mode (year, quarter, month, all) or
``specific:YEAR:M1,M2,...``.
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fleetops_config import get_active_config  # noqa: E402
from fleetops_engines.conversion import CurrencyConverter  # noqa: E402
from fleetops_engines.time_window import ChartWindow, DashboardPeriod, TimeWindowMode  # noqa: E402
from fleetops_ingestion import load_snapshot  # noqa: E402
from fleetops_kernel.domain.clock import FixedClock, SystemClock  # noqa: E402
from fleetops_kernel.exceptions import FleetOpsError  # noqa: E402
from fleetops_kernel.logging_config import configure_logging  # noqa: E402
from fleetops_modules.dashboard import (  # noqa: E402
    DashboardConfig,
    DashboardQuery,
    DashboardService,
    render_rounded,
)
from fleetops_modules.finance import build_finance_summary  # noqa: E402
from fleetops_modules.safari import categorize_safaris  # noqa: E402

W = 72


def parse_window(text: str) -> ChartWindow:
    """``year`` / ``quarter`` / ``month`` / ``all`` or ``specific:2024:1,2,3``."""
    if not text.lower().startswith("specific"):
        return ChartWindow(TimeWindowMode.parse(text))
    parts = text.split(":")
    if len(parts) != 3:
        raise argparse.ArgumentTypeError("specific windows look like specific:YEAR:M1,M2")
    try:
        year = int(parts[1])
        months = tuple(int(m) for m in parts[2].split(",") if m.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"bad specific window {text!r}") from exc
    return ChartWindow.specific(months, year)


def banner(title: str) -> None:
    print()
    print("=" * W)
    print(title.center(W))
    print("=" * W)


def field(label: str, value: object, indent: int = 2) -> None:
    print(f"{' ' * indent}{label:<28} {value}")


def money(rendered: dict) -> str:
    return f"{rendered['amount']} {rendered['currency']}"


def print_dashboard(data: dict) -> None:
    kpis = data["kpis"]
    banner(f"DASHBOARD  (as of {data['as_of']}, {data['display_currency']})")
    field("total revenue", money(kpis["total_revenue"]))
    field("revenue MTD", money(kpis["revenue_mtd"]))
    field("revenue YTD", money(kpis["revenue_ytd"]))
    field("total expenses", money(kpis["total_expenses"]))
    field("active bookings", kpis["active_bookings"])
    field("fleet utilization", f"{kpis['fleet_utilization']}%")
    field("avg booking value", money(kpis["avg_booking_value"]))
    field(
        "outstanding payments",
        f"{money(kpis['outstanding_payments_total'])} ({kpis['outstanding_payments_count']})",
    )

    banner("REVENUE / EXPENSES BY MONTH")
    for point in data["monthly_revenue_expenses"]:
        print(
            f"  {point['label']} {point['year']}  "
            f"{money(point['revenue']):>22}  {money(point['expenses']):>22}"
        )

    banner("EXPENSE CATEGORIES")
    for row in data["expense_categories"]:
        field(row["category"], money(row["amount"]))

    banner("TOP VEHICLES")
    for row in data["top_vehicles"]:
        field(f"{row['name']} ({row['capacity']})", f"{money(row['revenue'])}  trips={row['trips']}")

    banner("FLEET STATUS")
    for row in data["fleet_status"]:
        field(row["status"], row["count"])

    banner("CAPACITY COMPARISON")
    for row in data["capacity_comparison"]["classes"]:
        field(
            row["capacity"],
            f"fleet={row['fleet_count']} revenue={money(row['total_revenue'])} "
            f"trips={row['total_trips']} avg_trips={row['avg_trips_per_vehicle']}",
        )

    banner("RECENT BOOKINGS")
    for row in data["recent_bookings"]:
        field(row["booking_number"] or row["booking_id"], f"{row['status']:<12} {money(row['amount'])}")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Compute the fleet and finance dashboard from a snapshot export.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("snapshot", type=Path, help="JSON or XLSX snapshot export")
    parser.add_argument(
        "--screen", choices=("dashboard", "finance", "safari"), default="dashboard",
    )
    parser.add_argument("--currency", default="USD", help="Display currency (default: USD)")
    parser.add_argument("--month", type=int, help="Restrict KPIs to one month (needs --year)")
    parser.add_argument("--year", type=int)
    parser.add_argument("--revenue-window", type=parse_window, default=ChartWindow(TimeWindowMode.YEAR))
    parser.add_argument("--category-window", type=parse_window, default=ChartWindow(TimeWindowMode.YEAR))
    parser.add_argument("--ranking-window", type=parse_window, default=ChartWindow(TimeWindowMode.MONTH))
    parser.add_argument("--capacity-window", type=parse_window, default=ChartWindow(TimeWindowMode.ALL))
    parser.add_argument("--capacity-filter", default="all", help="all, 7seater or 5seater")
    parser.add_argument("--as-of", type=datetime.fromisoformat, help="Pin 'now' (ISO timestamp)")
    parser.add_argument("--config", type=Path, help="Configuration YAML (default: built-in)")
    parser.add_argument("--json", action="store_true", help="Print the full result as JSON")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")

    args = parser.parse_args()

    if args.verbose:
        configure_logging()

    try:
        config = DashboardConfig.from_configuration(get_active_config(args.config))
        loaded = load_snapshot(
            args.snapshot, config.fallback_rates, base_currency=config.base_currency,
        )
        clock = FixedClock(args.as_of) if args.as_of else SystemClock()
        snapshot = loaded.snapshot

        if args.screen == "finance":
            converter = CurrencyConverter(snapshot.rates, args.currency)
            result = build_finance_summary(
                snapshot.financial_transactions,
                snapshot.cash_requisitions,
                converter,
                clock.now(),
            )
        elif args.screen == "safari":
            result = categorize_safaris(snapshot.safari_bookings, clock.today())
        else:
            query = DashboardQuery(
                display_currency=args.currency,
                period=DashboardPeriod(args.month, args.year),
                revenue_expense_window=args.revenue_window,
                expense_category_window=args.category_window,
                vehicle_ranking_window=args.ranking_window,
                capacity_comparison_window=args.capacity_window,
                capacity_filter=args.capacity_filter,
            )
            result = DashboardService(clock=clock, config=config).compute(snapshot, query)
    except (FleetOpsError, OSError) as exc:
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1

    if loaded.skipped:
        print(f"  {len(loaded.skipped)} malformed row(s) skipped", file=sys.stderr)

    data = render_rounded(result)
    if args.json or args.screen != "dashboard":
        print(json.dumps(data, indent=2))
    else:
        print_dashboard(data)
    return 0


if __name__ == "__main__":
    sys.exit(main())
