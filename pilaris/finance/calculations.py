"""
Financial Calculation Rules

Shared by the single-day report and the yearly summary:

- revenue of a day = sum over slots of (service price) x (students PRESENTE)
- expenses of a day = sum of its expense amounts
- net profit = revenue - expenses (may be negative)
- estimated tax = gross revenue x ESTIMATED_TAX_RATE

The tax figure is a flat-rate placeholder shown for orientation only; it
is not a tax computation. All arithmetic is Decimal.
"""

from collections.abc import Mapping
from decimal import Decimal

from pilaris.models.finance import (
    DailyReport,
    Expense,
    MonthlyTotals,
    Service,
    YearlySummary,
)
from pilaris.models.schedule import AttendanceStatus, DailySchedule


ESTIMATED_TAX_RATE = Decimal("0.06")

ZERO = Decimal("0")


def _price_index(services: list[Service]) -> dict[str, Decimal]:
    return {service.id: service.price for service in services}


def calculate_total_revenue(schedule: DailySchedule, services: list[Service]) -> Decimal:
    """
    Revenue earned by one day's schedule.

    Only PRESENTE students are billed. A slot whose service id is no
    longer in the catalog contributes nothing.
    """
    prices = _price_index(services)
    total = ZERO
    for slot in schedule:
        price = prices.get(slot.service_id)
        if price is None:
            continue
        total += price * slot.present_count
    return total


def calculate_total_expenses(expenses: list[Expense]) -> Decimal:
    """Sum of a day's expense amounts."""
    return sum((expense.amount for expense in expenses), ZERO)


def calculate_net_profit(revenue: Decimal, expenses: Decimal) -> Decimal:
    return revenue - expenses


def calculate_estimated_tax(revenue: Decimal) -> Decimal:
    """Flat-rate estimate over gross revenue (never over net profit)."""
    return revenue * ESTIMATED_TAX_RATE


def build_daily_report(
    day: str,
    schedule: DailySchedule,
    expenses: list[Expense],
    services: list[Service],
) -> DailyReport:
    """Revenue, expenses, profit and attendance counts for one day."""
    revenue = calculate_total_revenue(schedule, services)
    total_expenses = calculate_total_expenses(expenses)

    attended = 0
    absent = 0
    for slot in schedule:
        for student in slot.students:
            if student.status == AttendanceStatus.PRESENTE:
                attended += 1
            elif student.status == AttendanceStatus.FALTOU:
                absent += 1

    return DailyReport(
        date=day,
        revenue=revenue,
        expenses=total_expenses,
        net_profit=calculate_net_profit(revenue, total_expenses),
        estimated_tax=calculate_estimated_tax(revenue),
        attended_count=attended,
        absent_count=absent,
    )


def calculate_yearly_summary(
    year: int,
    schedules_by_date: Mapping[str, DailySchedule],
    expenses_by_date: Mapping[str, list[Expense]],
    services: list[Service],
) -> YearlySummary:
    """
    Fold every day of a year into a YearlySummary.

    Dates are the textual date segments of the store keys; the month
    breakdown groups them by their first seven characters ('YYYY-MM').
    """
    months: dict[str, MonthlyTotals] = {}

    def month_of(day: str) -> MonthlyTotals:
        key = day[:7]
        if key not in months:
            months[key] = MonthlyTotals()
        return months[key]

    total_revenue = ZERO
    for day, schedule in schedules_by_date.items():
        revenue = calculate_total_revenue(schedule, services)
        total_revenue += revenue
        totals = month_of(day)
        totals.revenue = totals.revenue + revenue

    total_expenses = ZERO
    for day, expenses in expenses_by_date.items():
        spent = calculate_total_expenses(expenses)
        total_expenses += spent
        totals = month_of(day)
        totals.expenses = totals.expenses + spent

    return YearlySummary(
        year=year,
        total_revenue=total_revenue,
        total_expenses=total_expenses,
        net_profit=calculate_net_profit(total_revenue, total_expenses),
        estimated_tax=calculate_estimated_tax(total_revenue),
        tax_rate=ESTIMATED_TAX_RATE,
        schedule_days=len(schedules_by_date),
        expense_days=len(expenses_by_date),
        months=dict(sorted(months.items())),
    )
