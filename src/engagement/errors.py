"""Ledger error types.

InvalidInput is raised before any core computation runs and surfaces as a
400. Stored rows that break a ledger invariant are not an error: they are
clamped by ledger.reconcile_state() and logged.
"""

from __future__ import annotations


class InvalidInput(ValueError):
    """Malformed date or missing required identifier."""
