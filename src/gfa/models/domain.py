"""Domain models for the greenfield allocation network."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(slots=True)
class Product:
    id: str
    name: str


@dataclass(slots=True)
class Customer:
    """Represents a demand point; demand maps product id to quantity."""

    customer_id: str
    name: str
    latitude: float
    longitude: float
    demand: Dict[str, float] = field(default_factory=dict)


@dataclass(slots=True)
class Facility:
    """Represents a candidate or existing distribution center.

    A product absent from ``capacity`` has a capacity of zero.
    """

    facility_id: str
    name: str
    latitude: float
    longitude: float
    capacity: Dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class AllocationRecord:
    customer_id: str
    customer_name: str
    facility_id: str
    facility_name: str
    product_id: str
    quantity: float
    distance_km: float
    transport_cost: float


@dataclass(slots=True)
class FacilityUsage:
    """Run-scoped consumed capacity and served customers for one facility."""

    facility_id: str
    name: str
    used: Dict[str, float] = field(default_factory=dict)
    customers: List[str] = field(default_factory=list)

    def remaining(self, facility: Facility, product_id: str) -> float:
        return facility.capacity.get(product_id, 0.0) - self.used.get(product_id, 0.0)


UsageLedger = Dict[str, FacilityUsage]


@dataclass(slots=True)
class AllocationKPIs:
    total_cost: float
    transport_cost: float
    fixed_cost: float
    facilities_used: int
    total_distance: float
    avg_distance: float
    service_level: float
    allocated_demand: float
    unmet_demand: float
    total_demand: float


@dataclass(slots=True)
class FacilityUtilization:
    product: str
    used: float
    capacity: float
    percentage: float


@dataclass(slots=True)
class FacilityUsageSummary:
    id: str
    name: str
    customers_served: int
    utilization: List[FacilityUtilization]


@dataclass(slots=True)
class AllocationResult:
    allocation: List[AllocationRecord]
    kpis: AllocationKPIs
    facility_usage: List[FacilityUsageSummary]
    mode: str
    success: bool = True
