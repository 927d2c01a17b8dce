"""Greenfield allocation orchestration shared by the API and in-process callers."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from ...config import settings
from ...data.network_repository import build_request, single_product_customers, sites_to_facilities
from ...models.domain import AllocationResult, Customer, Facility, Product
from ...schemas.allocation import (
    AllocationRecordModel,
    FacilityUsageModel,
    GFARequest,
    GFAResponse,
    KPIModel,
    SiteAllocationRequest,
    UtilizationModel,
)
from .gravity import AllocationMode, DistanceFn, allocate, new_usage_ledger
from .kpis import compute_kpis, facility_utilization
from ..geospatial import haversine_km
from ..outputs.formatter import summarize_sites

logger = logging.getLogger(__name__)


def _round_half_up(value: float) -> float:
    """Round to a whole number with halves going up, as dashboards expect."""
    return math.floor(value + 0.5)


def _round_one_decimal(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


@dataclass(slots=True)
class RunSettings:
    transport_cost_per_km: float
    fixed_cost_per_facility: float
    mode: AllocationMode = "greedy"


def run_allocation(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    products: Sequence[Product],
    run_settings: RunSettings,
    *,
    distance_fn: DistanceFn = haversine_km,
) -> AllocationResult:
    """Run one allocation with a fresh ledger and derive its KPIs."""

    ledger = new_usage_ledger(facilities, products)
    allocations, ledger = allocate(
        customers,
        facilities,
        transport_cost_per_km=run_settings.transport_cost_per_km,
        ledger=ledger,
        mode=run_settings.mode,
        distance_fn=distance_fn,
    )
    kpis = compute_kpis(
        allocations,
        ledger,
        customers,
        fixed_cost_per_facility=run_settings.fixed_cost_per_facility,
    )
    return AllocationResult(
        allocation=allocations,
        kpis=kpis,
        facility_usage=facility_utilization(facilities, ledger),
        mode=run_settings.mode,
    )


def network_from_request(request: GFARequest) -> tuple[list[Customer], list[Facility], list[Product]]:
    data = request.data
    customers = [
        Customer(
            customer_id=item.id,
            name=item.name,
            latitude=item.latitude,
            longitude=item.longitude,
            demand=dict(item.demand),
        )
        for item in data.customers
    ]
    facilities = [
        Facility(
            facility_id=item.id,
            name=item.name,
            latitude=item.latitude,
            longitude=item.longitude,
            capacity=dict(item.capacity),
        )
        for item in data.facilities
    ]
    products = [Product(id=item.id, name=item.name or item.id) for item in data.products]
    return customers, facilities, products


def settings_from_request(request: GFARequest) -> RunSettings:
    """Fill request settings gaps from application defaults."""

    options = request.settings
    return RunSettings(
        transport_cost_per_km=(
            options.transport_cost_per_km if options.transport_cost_per_km is not None else settings.transport_cost_per_km
        ),
        fixed_cost_per_facility=(
            options.fixed_cost_per_facility
            if options.fixed_cost_per_facility is not None
            else settings.fixed_cost_per_facility
        ),
        mode=options.mode or settings.allocation_mode,
    )


def to_response(result: AllocationResult, elapsed_ms: float = 0.0) -> GFAResponse:
    """Convert a domain result to the wire shape, rounding KPIs for display."""

    kpis = result.kpis
    return GFAResponse(
        success=result.success,
        mode=result.mode,
        allocation=[
            AllocationRecordModel(
                customer_id=record.customer_id,
                customer_name=record.customer_name,
                facility_id=record.facility_id,
                facility_name=record.facility_name,
                product_id=record.product_id,
                quantity=record.quantity,
                distance=record.distance_km,
                transport_cost=record.transport_cost,
            )
            for record in result.allocation
        ],
        kpis=KPIModel(
            total_cost=_round_half_up(kpis.total_cost),
            transport_cost=_round_half_up(kpis.transport_cost),
            fixed_cost=kpis.fixed_cost,
            facilities_used=kpis.facilities_used,
            total_distance=_round_half_up(kpis.total_distance),
            avg_distance=_round_half_up(kpis.avg_distance),
            service_level=_round_one_decimal(kpis.service_level),
            allocated_demand=_round_half_up(kpis.allocated_demand),
            unmet_demand=_round_half_up(kpis.unmet_demand),
            total_demand=_round_half_up(kpis.total_demand),
        ),
        facility_usage=[
            FacilityUsageModel(
                id=usage.id,
                name=usage.name,
                customers_served=usage.customers_served,
                utilization=[
                    UtilizationModel(product=row.product, used=row.used, capacity=row.capacity, percentage=row.percentage)
                    for row in usage.utilization
                ],
            )
            for usage in result.facility_usage
        ],
        elapsed_ms=elapsed_ms,
    )


def optimize_gfa(request: GFARequest) -> GFAResponse:
    customers, facilities, products = network_from_request(request)
    run_settings = settings_from_request(request)

    logger.info(
        f"Starting GFA optimization: {len(customers)} customers, {len(facilities)} facilities, "
        f"{len(products)} products (mode={run_settings.mode})"
    )
    start_time = time.perf_counter()
    result = run_allocation(customers, facilities, products, run_settings)
    elapsed_ms = (time.perf_counter() - start_time) * 1000
    logger.info(
        f"GFA optimization completed in {elapsed_ms:.1f}ms: {len(result.allocation)} allocations, "
        f"service level {result.kpis.service_level:.1f}%"
    )
    return to_response(result, elapsed_ms=elapsed_ms)


def optimize_sites(request: SiteAllocationRequest) -> dict:
    """Optimize dashboard-shaped input and return per-site summaries.

    Runs on the remote optimizer when one is configured and falls back to
    the local allocator otherwise; ``usedRemote`` reports which one ran.
    """
    # Lazy import: remote depends on this module.
    from .remote import run_with_fallback

    products = [Product(id=item.id, name=item.name or item.id) for item in request.products]
    customers = single_product_customers(item.model_dump() for item in request.customers)
    facilities = sites_to_facilities((item.model_dump() for item in request.sites), products)
    response, used_remote = run_with_fallback(
        build_request(customers, facilities, products).model_copy(update={"settings": request.settings})
    )
    return {**summarize_sites(response), "usedRemote": used_remote}
