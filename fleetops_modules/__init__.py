"""
FleetOps business modules.

- dashboard: fleet and financial KPI aggregation
- finance: ledger and cash-requisition summary
- safari: trip schedule buckets
"""
