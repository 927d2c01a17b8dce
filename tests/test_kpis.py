import pytest

from src.gfa.models.domain import AllocationRecord, Customer, Facility, FacilityUsage
from src.gfa.services.allocation.kpis import compute_kpis, facility_utilization, total_demand


def _record(cid: str, fid: str, quantity: float, distance: float, rate: float = 1.0) -> AllocationRecord:
    return AllocationRecord(
        customer_id=cid,
        customer_name=cid,
        facility_id=fid,
        facility_name=fid,
        product_id="P1",
        quantity=quantity,
        distance_km=distance,
        transport_cost=distance * rate * quantity,
    )


def test_compute_kpis_folds_allocations():
    customers = [
        Customer(customer_id="C1", name="C1", latitude=0, longitude=0, demand={"P1": 10}),
        Customer(customer_id="C2", name="C2", latitude=0, longitude=0, demand={"P1": 20}),
        Customer(customer_id="C3", name="C3", latitude=0, longitude=0, demand={"P1": 10}),
    ]
    allocations = [_record("C1", "F1", 10, 5.0), _record("C2", "F2", 20, 15.0)]
    ledger = {
        "F1": FacilityUsage(facility_id="F1", name="F1", used={"P1": 10}, customers=["C1"]),
        "F2": FacilityUsage(facility_id="F2", name="F2", used={"P1": 20}, customers=["C2"]),
        "F3": FacilityUsage(facility_id="F3", name="F3", used={"P1": 0}, customers=[]),
    }

    kpis = compute_kpis(allocations, ledger, customers, fixed_cost_per_facility=1000)

    assert kpis.transport_cost == 50 + 300
    assert kpis.facilities_used == 2
    assert kpis.fixed_cost == 2000
    assert kpis.total_cost == 2350
    assert kpis.total_distance == 20.0
    assert kpis.avg_distance == 10.0
    assert kpis.total_demand == 40
    assert kpis.allocated_demand == 30
    assert kpis.unmet_demand == 10
    assert kpis.service_level == pytest.approx(75.0)


def test_compute_kpis_guards_empty_inputs():
    kpis = compute_kpis([], {}, [], fixed_cost_per_facility=500)

    assert kpis.service_level == 0.0
    assert kpis.avg_distance == 0.0
    assert kpis.total_cost == 0.0
    assert kpis.facilities_used == 0


def test_total_demand_ignores_non_positive_values():
    customers = [Customer(customer_id="C", name="C", latitude=0, longitude=0, demand={"P1": 5, "P2": 0, "P3": -2})]
    assert total_demand(customers) == 5


def test_facility_utilization_guards_zero_capacity():
    facility = Facility(facility_id="F", name="Hub", latitude=0, longitude=0, capacity={"P1": 200, "P2": 0})
    ledger = {"F": FacilityUsage(facility_id="F", name="Hub", used={"P1": 50}, customers=["C1", "C2"])}

    (summary,) = facility_utilization([facility], ledger)

    assert summary.id == "F"
    assert summary.customers_served == 2
    rows = {row.product: row for row in summary.utilization}
    assert rows["P1"].percentage == 25.0
    assert rows["P2"].used == 0.0
    assert rows["P2"].percentage == 0.0
