"""Greenfield gravity allocation services."""

from .gravity import allocate, gravity_score, new_usage_ledger
from .service import RunSettings, optimize_gfa, run_allocation

__all__ = ["allocate", "gravity_score", "new_usage_ledger", "optimize_gfa", "run_allocation", "RunSettings"]
