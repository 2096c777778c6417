"""Audit logging package."""

from pilaris.audit.logger import AuditLogger

__all__ = ["AuditLogger"]
