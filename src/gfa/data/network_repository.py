"""Data access helpers for loading customers and facilities from CSV or Excel files."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from openpyxl import load_workbook

from ..config import settings
from ..models.domain import Customer, Facility, Product
from ..schemas.allocation import CustomerModel, FacilityModel, GFARequest, NetworkData, ProductModel

BASE_COLUMNS = ("id", "name", "latitude", "longitude")

logger = logging.getLogger(__name__)


def _coerce_float(value: object) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = str(value).strip()
    if not text:
        return None
    try:
        return float(text.replace(",", ""))
    except ValueError as exc:
        raise ValueError(f"Unable to parse float from value '{value}'") from exc


def _read_rows(path: Path) -> List[Dict[str, object]]:
    """Read a CSV or XLSX sheet into dict rows keyed by header."""

    if not path.exists():
        raise FileNotFoundError(f"Network file not found: {path}")

    if path.suffix.lower() in {".xlsx", ".xlsm"}:
        wb = load_workbook(path, data_only=True, read_only=True)
        try:
            rows = wb.active.iter_rows(min_row=1, values_only=True)
            header = next(rows, None)
            if header is None:
                raise ValueError(f"Workbook '{path}' is empty.")
            names = [str(cell).strip() if cell is not None else "" for cell in header]
            return [dict(zip(names, row)) for row in rows if any(cell is not None for cell in row)]
        finally:
            wb.close()

    with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise ValueError(f"Network file '{path}' is missing a header row.")
        return [dict(row) for row in reader]


def _split_row(row: Dict[str, object], path: Path) -> tuple[Dict[str, object], Dict[str, float]]:
    base: Dict[str, object] = {}
    quantities: Dict[str, float] = {}
    for column, value in row.items():
        if not column:
            continue
        key = column.strip()
        if key.lower() in BASE_COLUMNS:
            base[key.lower()] = value
            continue
        quantity = _coerce_float(value)
        if quantity is not None:
            quantities[key] = quantity
    missing = {"id", "latitude", "longitude"} - set(base)
    if missing:
        raise ValueError(f"'{path}' missing columns: {', '.join(sorted(missing))}")
    return base, quantities


def _iter_points(path: Path) -> Iterator[tuple[str, str, float, float, Dict[str, float]]]:
    for row in _read_rows(path):
        base, quantities = _split_row(row, path)
        lat = _coerce_float(base.get("latitude"))
        lon = _coerce_float(base.get("longitude"))
        point_id = str(base.get("id") or "").strip()
        if lat is None or lon is None or not point_id:
            continue  # ignore records without identity or coordinates
        name = str(base.get("name") or "").strip() or point_id
        yield point_id, name, lat, lon, quantities


def load_customers(source: Optional[Path] = None) -> tuple[Customer, ...]:
    """Load customers; every non-base column is demand for that product."""

    path = source or settings.customers_file
    customers = tuple(
        Customer(customer_id=cid, name=name, latitude=lat, longitude=lon, demand=demand)
        for cid, name, lat, lon, demand in _iter_points(path)
    )
    logger.info(f"Loaded {len(customers)} customers from {path}")
    return customers


def load_facilities(source: Optional[Path] = None) -> tuple[Facility, ...]:
    """Load facilities; every non-base column is capacity for that product."""

    path = source or settings.facilities_file
    facilities = tuple(
        Facility(facility_id=fid, name=name, latitude=lat, longitude=lon, capacity=capacity)
        for fid, name, lat, lon, capacity in _iter_points(path)
    )
    logger.info(f"Loaded {len(facilities)} facilities from {path}")
    return facilities


def collect_products(customers: Iterable[Customer], facilities: Iterable[Facility]) -> List[Product]:
    seen: Dict[str, Product] = {}
    for customer in customers:
        for pid in customer.demand:
            seen.setdefault(pid, Product(id=pid, name=pid))
    for facility in facilities:
        for pid in facility.capacity:
            seen.setdefault(pid, Product(id=pid, name=pid))
    return list(seen.values())


def single_product_customers(rows: Iterable[dict]) -> List[Customer]:
    """Convert rows carrying one ``product``/``demand`` pair into demand mappings."""

    customers: list[Customer] = []
    for row in rows:
        demand: Dict[str, float] = {}
        product = row.get("product")
        quantity = _coerce_float(row.get("demand"))
        if product and quantity:
            demand[str(product)] = quantity
        customers.append(
            Customer(
                customer_id=str(row["id"]),
                name=str(row.get("name") or row["id"]),
                latitude=float(row["latitude"]),
                longitude=float(row["longitude"]),
                demand=demand,
            )
        )
    return customers


def sites_to_facilities(sites: Iterable[dict], products: Sequence[Product]) -> List[Facility]:
    """Spread each site's single total capacity equally across the products."""

    facilities: list[Facility] = []
    for site in sites:
        total = _coerce_float(site.get("capacity")) or 0.0
        share = total / len(products) if products else 0.0
        facilities.append(
            Facility(
                facility_id=str(site["id"]),
                name=str(site.get("name") or site["id"]),
                latitude=float(site["latitude"]),
                longitude=float(site["longitude"]),
                capacity={product.id: share for product in products},
            )
        )
    return facilities


def build_request(
    customers: Sequence[Customer],
    facilities: Sequence[Facility],
    products: Sequence[Product] | None = None,
) -> GFARequest:
    """Package domain objects as an optimizer request with default settings."""

    products = list(products) if products is not None else collect_products(customers, facilities)
    return GFARequest(
        data=NetworkData(
            customers=[
                CustomerModel(id=c.customer_id, name=c.name, latitude=c.latitude, longitude=c.longitude, demand=c.demand)
                for c in customers
            ],
            facilities=[
                FacilityModel(id=f.facility_id, name=f.name, latitude=f.latitude, longitude=f.longitude, capacity=f.capacity)
                for f in facilities
            ],
            products=[ProductModel(id=p.id, name=p.name) for p in products],
        )
    )


def load_dataset_request(
    customers_source: Optional[Path] = None,
    facilities_source: Optional[Path] = None,
) -> GFARequest:
    return build_request(load_customers(customers_source), load_facilities(facilities_source))
