"""Safari Module (``fleetops_modules.safari``): trip schedule buckets."""

from fleetops_modules.safari.schedule import SafariSchedule, categorize_safaris

__all__ = ["SafariSchedule", "categorize_safaris"]
