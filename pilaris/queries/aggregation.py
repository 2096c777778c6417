"""
Annual Aggregation Engine

There is no index by year: a year's records are found by enumerating
every key of the medium and keeping the ones whose text starts with
`pilaris_control_<year>-`. Matching is purely textual, not a date-range
comparison.

GUARANTEES:
- Never fails on bad data; unreadable records and malformed keys are
  skipped and the summary reflects only what could be read
- An empty schedule or an empty expense list counts as "no record"
- Nothing is cached; every call rescans the medium
"""

from typing import Optional

from pydantic import BaseModel, Field

from pilaris.finance.calculations import calculate_yearly_summary
from pilaris.models.finance import Expense, Service, YearlySummary
from pilaris.models.schedule import DailySchedule
from pilaris.services.storage import (
    KEY_PREFIX,
    PartitionedRecordStore,
    RecordKind,
    parse_record_key,
    year_prefix,
)


class AnnualData(BaseModel):
    """Every usable per-date record of one year, keyed by date text."""

    year: int
    schedules: dict[str, DailySchedule] = Field(default_factory=dict)
    expenses: dict[str, list[Expense]] = Field(default_factory=dict)


class AnnualAggregator:
    """
    Builds yearly summaries by scanning the record store's key space.
    """

    def __init__(self, store: PartitionedRecordStore):
        self._store = store
        self._audit = store.audit_logger

    def collect_year(self, year: int) -> AnnualData:
        """
        Gather the schedules and expense lists stored for a year.

        Args:
            year: Calendar year; matched against the key text

        Returns:
            AnnualData with date -> record mappings
        """
        data = AnnualData(year=year)
        prefix = year_prefix(year)

        for key in self._store.keys():
            if not key.startswith(prefix):
                continue

            partition = parse_record_key(key)
            if partition is None:
                self._audit.log_key_skipped(key, "malformed key")
                continue

            if partition.kind == RecordKind.SCHEDULE:
                schedule = self._store.read_schedule_record(key)
                if not schedule:
                    self._audit.log_key_skipped(key, "empty or unreadable schedule")
                    continue
                data.schedules[partition.date] = schedule
            else:
                expenses = self._store.read_expenses_record(key)
                if not expenses:
                    self._audit.log_key_skipped(key, "empty or unreadable expenses")
                    continue
                data.expenses[partition.date] = expenses

        return data

    def summarize(
        self,
        year: int,
        services: Optional[list[Service]] = None,
    ) -> YearlySummary:
        """
        Compute the yearly summary.

        Args:
            year: Calendar year to summarize
            services: Catalog used to price attendance; defaults to the
                stored catalog

        Returns:
            Totals for revenue, expenses, net profit and estimated tax
        """
        if services is None:
            services = self._store.load_settings().services

        data = self.collect_year(year)
        summary = calculate_yearly_summary(
            year,
            data.schedules,
            data.expenses,
            services,
        )
        self._audit.log_summary_computed(
            year,
            schedule_days=summary.schedule_days,
            expense_days=summary.expense_days,
        )
        return summary

    def years_with_data(self) -> list[int]:
        """Years that have at least one per-date key, ascending."""
        years: set[int] = set()
        for key in self._store.keys():
            if not key.startswith(f"{KEY_PREFIX}_"):
                continue
            partition = parse_record_key(key)
            if partition is None:
                continue
            head = partition.date[:5]
            if len(head) == 5 and head[:4].isdigit() and head[4] == "-":
                years.add(int(head[:4]))
        return sorted(years)
