"""Audit log package."""

from .service import AuditAction, AuditLogger

__all__ = [
    "AuditAction",
    "AuditLogger",
]
