"""Cost sensitivity sweeps over facility cost and transport rate."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Sequence

from ...config import settings
from ...models.domain import Customer, Facility, Product
from ...schemas.allocation import GFARequest, SensitivityResponse, SensitivityScenario
from .service import RunSettings, network_from_request, run_allocation, settings_from_request

logger = logging.getLogger(__name__)


def _scenario(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    products: Sequence[Product],
    run_settings: RunSettings,
) -> SensitivityScenario:
    kpis = run_allocation(customers, facilities, products, run_settings).kpis
    return SensitivityScenario(
        facility_cost=run_settings.fixed_cost_per_facility,
        transportation_rate=run_settings.transport_cost_per_km,
        total_cost=kpis.total_cost,
        transportation_cost=kpis.transport_cost,
        facility_cost_total=kpis.fixed_cost,
        num_sites=kpis.facilities_used,
    )


def sweep_facility_cost(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    products: Sequence[Product],
    base: RunSettings,
    facility_costs: Iterable[float],
) -> List[SensitivityScenario]:
    return [
        _scenario(customers, facilities, products, replace(base, fixed_cost_per_facility=cost))
        for cost in facility_costs
    ]


def sweep_transport_rate(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    products: Sequence[Product],
    base: RunSettings,
    rates: Iterable[float],
) -> List[SensitivityScenario]:
    return [
        _scenario(customers, facilities, products, replace(base, transport_cost_per_km=rate))
        for rate in rates
    ]


def run_sensitivity(
    request: GFARequest,
    *,
    facility_costs: Sequence[float] | None = None,
    transport_rates: Sequence[float] | None = None,
) -> SensitivityResponse:
    """Re-run the allocation for each facility cost and each transport rate.

    Each sweep varies one parameter and holds the other at the request value.
    """

    customers, facilities, products = network_from_request(request)
    base = settings_from_request(request)
    facility_costs = facility_costs if facility_costs is not None else settings.sensitivity_fixed_costs
    transport_rates = transport_rates if transport_rates is not None else settings.sensitivity_transport_rates

    logger.info(
        f"Running sensitivity analysis: {len(facility_costs)} facility costs, {len(transport_rates)} transport rates"
    )
    return SensitivityResponse(
        facility_cost=sweep_facility_cost(customers, facilities, products, base, facility_costs),
        transportation_rate=sweep_transport_rate(customers, facilities, products, base, transport_rates),
    )
