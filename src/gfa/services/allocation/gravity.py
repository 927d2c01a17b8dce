"""Greedy gravity-model allocation of customer demand to facilities."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Literal, Sequence, Tuple

from ...models.domain import AllocationRecord, Customer, Facility, FacilityUsage, Product, UsageLedger
from ..geospatial import floored_distance_km, haversine_km

AllocationMode = Literal["greedy", "greedy-split"]
DistanceFn = Callable[[float, float, float, float], float]

ALLOCATION_MODES: tuple[str, ...] = ("greedy", "greedy-split")

logger = logging.getLogger(__name__)


def gravity_score(declared_capacity: float, demand: float, distance_km: float) -> float:
    """Attractiveness of a facility: (capacity * demand) / distance^2."""

    return (declared_capacity * demand) / floored_distance_km(distance_km) ** 2


def new_usage_ledger(facilities: Sequence[Facility], products: Iterable[Product] = ()) -> UsageLedger:
    """Create a zeroed usage ledger keyed by facility id."""

    product_ids = [product.id for product in products]
    ledger: UsageLedger = {}
    for facility in facilities:
        if facility.facility_id in ledger:
            raise ValueError(f"Duplicate facility id '{facility.facility_id}'")
        used = {pid: 0.0 for pid in product_ids}
        for pid in facility.capacity:
            used.setdefault(pid, 0.0)
        ledger[facility.facility_id] = FacilityUsage(facility_id=facility.facility_id, name=facility.name, used=used)
    return ledger


def _is_candidate(available: float, demand: float, mode: AllocationMode) -> bool:
    if mode == "greedy-split":
        return available > 0
    return available >= demand


def allocate(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    *,
    transport_cost_per_km: float,
    ledger: UsageLedger | None = None,
    mode: AllocationMode = "greedy",
    distance_fn: DistanceFn = haversine_km,
) -> Tuple[List[AllocationRecord], UsageLedger]:
    """Assign each (customer, product) demand to the best-scoring feasible facility.

    Customers are visited in order and, within a customer, products in the
    order of its demand mapping. In ``greedy`` mode a facility is feasible
    only when its remaining capacity covers the whole demand, otherwise the
    demand is left unmet. ``greedy-split`` is a partial-fill greedy: it accepts
    any facility with spare capacity and ships ``min(demand, remaining)``.
    Scoring, the distance floor and iteration order are the same in both modes.

    The ledger is updated in place and returned alongside the records.
    """

    if mode not in ALLOCATION_MODES:
        raise ValueError(f"Unsupported allocation mode '{mode}'")
    if ledger is None:
        ledger = new_usage_ledger(facilities)
    else:
        missing = [f.facility_id for f in facilities if f.facility_id not in ledger]
        if missing:
            raise ValueError(f"Usage ledger has no entry for facilities: {', '.join(missing)}")

    allocations: list[AllocationRecord] = []

    for customer in customers:
        for product_id, demand in customer.demand.items():
            if demand <= 0:
                continue

            best_facility: Facility | None = None
            best_score = float("-inf")
            best_distance = 0.0
            best_available = 0.0

            for facility in facilities:
                usage = ledger[facility.facility_id]
                available = usage.remaining(facility, product_id)
                if not _is_candidate(available, demand, mode):
                    continue

                distance = distance_fn(customer.latitude, customer.longitude, facility.latitude, facility.longitude)
                score = gravity_score(facility.capacity.get(product_id, 0.0), demand, distance)
                if score > best_score:
                    best_score = score
                    best_facility = facility
                    best_distance = distance
                    best_available = available

            if best_facility is None:
                logger.debug(f"No feasible facility for customer {customer.customer_id} product {product_id} ({demand})")
                continue

            quantity = min(demand, best_available) if mode == "greedy-split" else demand
            allocations.append(
                AllocationRecord(
                    customer_id=customer.customer_id,
                    customer_name=customer.name,
                    facility_id=best_facility.facility_id,
                    facility_name=best_facility.name,
                    product_id=product_id,
                    quantity=quantity,
                    distance_km=best_distance,
                    transport_cost=best_distance * transport_cost_per_km * quantity,
                )
            )

            usage = ledger[best_facility.facility_id]
            usage.used[product_id] = usage.used.get(product_id, 0.0) + quantity
            if customer.customer_id not in usage.customers:
                usage.customers.append(customer.customer_id)

    return allocations, ledger
