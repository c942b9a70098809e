"""Test scenario builders - order factory and fill scenarios."""

from exchange_fixtures.scenarios.order_factory import create_signed_order
from exchange_fixtures.scenarios.fill_scenarios import FillScenarios

__all__ = [
    "create_signed_order",
    "FillScenarios",
]
