"""Tests for DashboardQuery validation and DashboardConfig construction."""

from decimal import Decimal

import pytest

from fleetops_config import get_active_config
from fleetops_engines.classification import CAPACITY_RULES, EXPENSE_CATEGORY_RULES
from fleetops_engines.time_window import ChartWindow, TimeWindowMode
from fleetops_kernel.domain.values import Currency
from fleetops_kernel.exceptions import InvalidCurrencyError, InvalidQueryError
from fleetops_modules.dashboard.config import DashboardConfig
from fleetops_modules.dashboard.models import CapacityFilter, DashboardQuery


class TestDashboardQuery:
    def test_defaults(self):
        query = DashboardQuery()
        assert query.display_currency == Currency("USD")
        assert query.period.is_all
        assert query.revenue_expense_window.mode is TimeWindowMode.YEAR
        assert query.vehicle_ranking_window.mode is TimeWindowMode.MONTH
        assert query.capacity_comparison_window.mode is TimeWindowMode.ALL

    def test_strings_are_parsed(self):
        query = DashboardQuery(display_currency="ugx", capacity_filter="7SEATER")
        assert query.display_currency == Currency("UGX")
        assert query.capacity_filter is CapacityFilter.SEVEN_SEATER

    def test_unknown_capacity_filter(self):
        with pytest.raises(InvalidQueryError):
            DashboardQuery(capacity_filter="9seater")

    @pytest.mark.parametrize("mode", [TimeWindowMode.YEAR, TimeWindowMode.QUARTER, TimeWindowMode.MONTH])
    def test_capacity_window_is_all_or_specific(self, mode):
        with pytest.raises(InvalidQueryError):
            DashboardQuery(capacity_comparison_window=ChartWindow(mode))

    def test_specific_capacity_window_allowed(self):
        query = DashboardQuery(capacity_comparison_window=ChartWindow.specific([1, 2], 2024))
        assert query.capacity_comparison_window.months == (1, 2)

    def test_bad_display_currency(self):
        with pytest.raises(InvalidCurrencyError):
            DashboardQuery(display_currency="dollars")


class TestDashboardConfig:
    def test_defaults(self):
        config = DashboardConfig.with_defaults()
        assert config.base_currency == "USD"
        assert config.expense_categories == EXPENSE_CATEGORY_RULES
        assert config.vehicle_capacity == CAPACITY_RULES
        assert config.recent_bookings_limit == 10

    def test_from_dict(self):
        config = DashboardConfig.from_dict(
            {
                "recent_bookings_limit": 3,
                "fallback_rates": {"ugx": 3800},
                "vehicle_capacity": {"default": "Other", "rules": [{"value": "Bus", "contains": ["bus"]}]},
            }
        )
        assert config.recent_bookings_limit == 3
        assert config.fallback_rates == {"UGX": Decimal("3800")}
        assert config.vehicle_capacity("minibus") == "Bus"

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError):
            DashboardConfig(recent_bookings_limit=-1)

    def test_from_default_configuration_matches_builtin_rules(self):
        config = DashboardConfig.from_configuration(get_active_config())
        assert config.expense_categories == EXPENSE_CATEGORY_RULES
        assert config.vehicle_capacity == CAPACITY_RULES
        assert config.fallback_rates["UGX"] == Decimal("3670")
