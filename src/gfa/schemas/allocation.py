"""Greenfield allocation request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductModel(CamelModel):
    id: str
    name: Optional[str] = None


class CustomerModel(CamelModel):
    id: str
    name: str = ""
    latitude: float
    longitude: float
    demand: Dict[str, float] = Field(default_factory=dict)


class FacilityModel(CamelModel):
    id: str
    name: str = ""
    latitude: float
    longitude: float
    capacity: Dict[str, float] = Field(default_factory=dict)


class NetworkData(CamelModel):
    customers: List[CustomerModel] = Field(default_factory=list)
    facilities: List[FacilityModel] = Field(default_factory=list)
    products: List[ProductModel] = Field(default_factory=list)


class GFASettings(CamelModel):
    transport_cost_per_km: Optional[float] = Field(
        default=None,
        ge=0,
        validation_alias=AliasChoices("transportCostPerKm", "transportCostPerDistanceUnit", "transport_cost_per_km"),
        serialization_alias="transportCostPerKm",
    )
    fixed_cost_per_facility: Optional[float] = Field(default=None, ge=0)
    mode: Optional[Literal["greedy", "greedy-split"]] = Field(
        default=None,
        description="Allocator variant. 'greedy' is all-or-nothing per demand; 'greedy-split' allows partial fills.",
    )


class GFARequest(CamelModel):
    data: NetworkData
    settings: GFASettings = Field(default_factory=GFASettings)


class AllocationRecordModel(CamelModel):
    customer_id: str
    customer_name: str
    facility_id: str
    facility_name: str
    product_id: str
    quantity: float
    distance: float
    transport_cost: float


class KPIModel(CamelModel):
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


class UtilizationModel(CamelModel):
    product: str
    used: float
    capacity: float
    percentage: float


class FacilityUsageModel(CamelModel):
    id: str
    name: str
    customers_served: int
    utilization: List[UtilizationModel]


class GFAResponse(CamelModel):
    success: bool
    mode: str
    allocation: List[AllocationRecordModel]
    kpis: KPIModel
    facility_usage: List[FacilityUsageModel]
    elapsed_ms: float = 0.0


class SensitivityScenario(CamelModel):
    facility_cost: float
    transportation_rate: float
    total_cost: float
    transportation_cost: float
    facility_cost_total: float
    num_sites: int


class SensitivityResponse(CamelModel):
    facility_cost: List[SensitivityScenario]
    transportation_rate: List[SensitivityScenario]


class SingleProductCustomerModel(CamelModel):
    """Dashboard customer row: one product and its demand."""

    id: str
    name: str = ""
    latitude: float
    longitude: float
    product: Optional[str] = None
    demand: Optional[float] = None


class SiteModel(CamelModel):
    """Existing site with a single total capacity."""

    id: str
    name: str = ""
    latitude: float
    longitude: float
    capacity: float = 0.0


class SiteAllocationRequest(CamelModel):
    customers: List[SingleProductCustomerModel] = Field(default_factory=list)
    sites: List[SiteModel] = Field(default_factory=list)
    products: List[ProductModel] = Field(default_factory=list)
    settings: GFASettings = Field(default_factory=GFASettings)
