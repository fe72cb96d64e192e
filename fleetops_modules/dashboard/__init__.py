"""
Dashboard Module (``fleetops_modules.dashboard``).

Responsibility
--------------
The Financial & Fleet KPI aggregation: from one snapshot of raw
collections, one rate table and one query, produce the KPI bundle, the
five chart datasets and the two widget projections in the chosen display
currency.

Architecture position
---------------------
**Modules layer** -- pure builders plus a thin service facade.  Depends on
``fleetops_engines`` for conversion, eligibility, reconciliation and time
windows, and on ``fleetops_config`` for rule tables.

Invariants enforced
-------------------
* Deterministic: same snapshot, query and ``as_of`` give an equal result.
* The engine never mutates its inputs; the result is rebuilt wholesale.
* Currency errors abort the whole computation.
"""

from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.models import (
    BookingCounts,
    CapacityClassStats,
    CapacityComparison,
    CapacityFilter,
    CapacityVehicle,
    CategoryAmount,
    DashboardQuery,
    DashboardResult,
    DashboardSnapshot,
    FleetCounts,
    FleetStatusBucket,
    FleetStatusCount,
    KPIBundle,
    MonthlyPoint,
    OutstandingPayment,
    RecentBooking,
    RevenueBreakdown,
    VehicleRevenue,
)
from fleetops_modules.dashboard.render import render_rounded, render_to_dict
from fleetops_modules.dashboard.service import DashboardService, compute_dashboard

__all__ = [
    "BookingCounts",
    "CapacityClassStats",
    "CapacityComparison",
    "CapacityFilter",
    "CapacityVehicle",
    "CategoryAmount",
    "DashboardConfig",
    "DashboardQuery",
    "DashboardResult",
    "DashboardService",
    "DashboardSnapshot",
    "FleetCounts",
    "FleetStatusBucket",
    "FleetStatusCount",
    "KPIBundle",
    "MonthlyPoint",
    "OutstandingPayment",
    "RecentBooking",
    "RevenueBreakdown",
    "VehicleRevenue",
    "compute_dashboard",
    "render_rounded",
    "render_to_dict",
]
