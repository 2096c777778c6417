"""
Pilaris - Source Package

Scheduling and finance tracker for a small studio: appointment slots,
student attendance, daily expenses and yearly summaries.

DESIGN PRINCIPLES:
1. Records are partitioned by date on a flat key/value medium
2. Bad persisted data never crashes a read; it is logged and replaced
3. Every change is written immediately, whole record at a time
4. Yearly figures are recomputed from stored records on every request
"""

__version__ = "1.0.0"
__author__ = "Pilaris Team"
