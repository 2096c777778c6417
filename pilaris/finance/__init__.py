"""Financial calculation rules package."""

from pilaris.finance.calculations import (
    ESTIMATED_TAX_RATE,
    build_daily_report,
    calculate_estimated_tax,
    calculate_net_profit,
    calculate_total_expenses,
    calculate_total_revenue,
    calculate_yearly_summary,
)

__all__ = [
    "ESTIMATED_TAX_RATE",
    "build_daily_report",
    "calculate_estimated_tax",
    "calculate_net_profit",
    "calculate_total_expenses",
    "calculate_total_revenue",
    "calculate_yearly_summary",
]
