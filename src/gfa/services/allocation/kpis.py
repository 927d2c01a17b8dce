"""KPI aggregation over a completed allocation run."""

from __future__ import annotations

from typing import List, Sequence

from ...models.domain import (
    AllocationKPIs,
    AllocationRecord,
    Customer,
    Facility,
    FacilityUsageSummary,
    FacilityUtilization,
    UsageLedger,
)


def total_demand(customers: Sequence[Customer]) -> float:
    # Non-positive demand is never allocated, so it is left out of the total too.
    return sum(qty for customer in customers for qty in customer.demand.values() if qty > 0)


def compute_kpis(
    allocations: Sequence[AllocationRecord],
    ledger: UsageLedger,
    customers: Sequence[Customer],
    *,
    fixed_cost_per_facility: float,
) -> AllocationKPIs:
    transport_cost = sum(record.transport_cost for record in allocations)
    facilities_used = sum(1 for usage in ledger.values() if usage.customers)
    fixed_cost = facilities_used * fixed_cost_per_facility

    demand = total_demand(customers)
    allocated = sum(record.quantity for record in allocations)
    total_distance = sum(record.distance_km for record in allocations)

    return AllocationKPIs(
        total_cost=transport_cost + fixed_cost,
        transport_cost=transport_cost,
        fixed_cost=fixed_cost,
        facilities_used=facilities_used,
        total_distance=total_distance,
        avg_distance=total_distance / len(allocations) if allocations else 0.0,
        service_level=(allocated / demand) * 100 if demand > 0 else 0.0,
        allocated_demand=allocated,
        unmet_demand=demand - allocated,
        total_demand=demand,
    )


def facility_utilization(facilities: Sequence[Facility], ledger: UsageLedger) -> List[FacilityUsageSummary]:
    """Per-facility used vs. declared capacity, one row per declared product."""

    summaries: list[FacilityUsageSummary] = []
    for facility in facilities:
        usage = ledger[facility.facility_id]
        rows: list[FacilityUtilization] = []
        for product_id, capacity in facility.capacity.items():
            used = usage.used.get(product_id, 0.0)
            rows.append(
                FacilityUtilization(
                    product=product_id,
                    used=used,
                    capacity=capacity,
                    percentage=(used / capacity) * 100 if capacity > 0 else 0.0,
                )
            )
        summaries.append(
            FacilityUsageSummary(
                id=facility.facility_id,
                name=facility.name,
                customers_served=len(usage.customers),
                utilization=rows,
            )
        )
    return summaries

