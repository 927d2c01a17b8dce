"""Utilities to serialize allocation results for dashboards and CSV export."""

from __future__ import annotations

import csv
import io
from typing import Any, Dict, List

from ...schemas.allocation import GFAResponse, KPIModel

CSV_FIELDS = [
    "customer_id",
    "customer_name",
    "facility_id",
    "facility_name",
    "product_id",
    "quantity",
    "distance_km",
    "transport_cost",
]


def to_cost_breakdown(kpis: KPIModel) -> dict:
    """Planning dashboard naming for the cost KPIs."""
    return {
        "totalCost": kpis.total_cost,
        "transportationCost": kpis.transport_cost,
        "facilityCost": kpis.fixed_cost,
        "numSites": kpis.facilities_used,
    }


def summarize_sites(response: GFAResponse) -> dict:
    """Group allocations per facility and flag unmet demand."""

    sites: Dict[str, Dict[str, Any]] = {}
    for record in response.allocation:
        site = sites.setdefault(
            record.facility_id,
            {
                "id": record.facility_id,
                "name": record.facility_name,
                "assignedCustomers": [],
                "totalDemand": 0.0,
            },
        )
        if record.customer_id not in site["assignedCustomers"]:
            site["assignedCustomers"].append(record.customer_id)
        site["totalDemand"] += record.quantity

    warnings: List[str] = []
    if response.kpis.unmet_demand > 0:
        warnings.append(f"Unmet demand: {response.kpis.unmet_demand:.0f} units")

    return {
        "dcs": list(sites.values()),
        "feasible": response.success,
        "warnings": warnings,
        "costBreakdown": to_cost_breakdown(response.kpis),
    }


def allocation_to_csv(response: GFAResponse) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for record in response.allocation:
        writer.writerow(
            {
                "customer_id": record.customer_id,
                "customer_name": record.customer_name,
                "facility_id": record.facility_id,
                "facility_name": record.facility_name,
                "product_id": record.product_id,
                "quantity": record.quantity,
                "distance_km": round(record.distance, 3),
                "transport_cost": round(record.transport_cost, 2),
            }
        )
    return buffer.getvalue()
