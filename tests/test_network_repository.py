from pathlib import Path

import pytest
from openpyxl import Workbook

from src.gfa.data.network_repository import (
    build_request,
    collect_products,
    load_customers,
    load_dataset_request,
    load_facilities,
    single_product_customers,
    sites_to_facilities,
)
from src.gfa.models.domain import Product


def _write_csv(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_load_customers_from_csv(tmp_path: Path):
    source = _write_csv(
        tmp_path / "customers.csv",
        "ID,Name,Latitude,Longitude,P1,P2\n"
        "C1,Alpha,21.5,39.2,10,\n"
        "C2,,21.6,39.3,\"1,200\",5\n"
        "C3,No coords,,,4,4\n",
    )

    customers = load_customers(source)

    assert [c.customer_id for c in customers] == ["C1", "C2"]
    assert customers[0].demand == {"P1": 10.0}
    assert customers[1].name == "C2"
    assert customers[1].demand == {"P1": 1200.0, "P2": 5.0}


def test_load_facilities_from_xlsx(tmp_path: Path):
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["id", "name", "latitude", "longitude", "P1", "P2"])
    sheet.append(["F1", "Jeddah DC", 21.5, 39.2, 500, 250])
    sheet.append([None, None, None, None, None, None])
    sheet.append(["F2", "Riyadh DC", 24.7, 46.7, 300, None])
    source = tmp_path / "facilities.xlsx"
    workbook.save(source)

    facilities = load_facilities(source)

    assert [f.facility_id for f in facilities] == ["F1", "F2"]
    assert facilities[0].capacity == {"P1": 500.0, "P2": 250.0}
    assert facilities[1].capacity == {"P1": 300.0}


def test_missing_columns_rejected(tmp_path: Path):
    source = _write_csv(tmp_path / "bad.csv", "id,name,P1\nC1,Alpha,3\n")
    with pytest.raises(ValueError):
        load_customers(source)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_facilities(tmp_path / "absent.csv")


def test_collect_products_preserves_first_seen_order(tmp_path: Path):
    customers = load_customers(_write_csv(tmp_path / "c.csv", "id,name,latitude,longitude,B,A\nC1,x,1,1,1,1\n"))
    facilities = load_facilities(_write_csv(tmp_path / "f.csv", "id,name,latitude,longitude,C,A\nF1,y,1,1,1,1\n"))

    assert [p.id for p in collect_products(customers, facilities)] == ["B", "A", "C"]


def test_sites_split_capacity_equally():
    products = [Product(id="P1", name="P1"), Product(id="P2", name="P2")]
    facilities = sites_to_facilities(
        [{"id": "S1", "name": "Site", "latitude": 1.0, "longitude": 2.0, "capacity": 1000}], products
    )

    assert facilities[0].capacity == {"P1": 500.0, "P2": 500.0}


def test_single_product_customers():
    customers = single_product_customers(
        [
            {"id": "C1", "name": "A", "latitude": 1, "longitude": 2, "product": "P1", "demand": 7},
            {"id": "C2", "name": "", "latitude": 1, "longitude": 2, "product": None, "demand": None},
        ]
    )

    assert customers[0].demand == {"P1": 7.0}
    assert customers[1].demand == {}
    assert customers[1].name == "C2"


def test_load_dataset_request(tmp_path: Path):
    customers = _write_csv(tmp_path / "c.csv", "id,name,latitude,longitude,P1\nC1,x,21.5,39.2,10\n")
    facilities = _write_csv(tmp_path / "f.csv", "id,name,latitude,longitude,P1\nF1,y,21.5,39.2,50\n")

    request = load_dataset_request(customers, facilities)

    assert request.data.customers[0].demand == {"P1": 10.0}
    assert [p.id for p in request.data.products] == ["P1"]
    assert request == build_request(load_customers(customers), load_facilities(facilities))
