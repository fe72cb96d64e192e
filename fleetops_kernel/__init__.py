"""
FleetOps Kernel

Pure domain layer of the fleet and finance KPI engine:
- Currency-tagged Money and an immutable exchange-rate snapshot
- Read-only typed records parsed from raw collection rows
- Injectable clock
- Typed exception hierarchy and structured logging
"""

__version__ = "0.1.0"
