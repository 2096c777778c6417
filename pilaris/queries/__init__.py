"""Annual aggregation package."""

from pilaris.queries.aggregation import AnnualAggregator, AnnualData

__all__ = ["AnnualAggregator", "AnnualData"]
