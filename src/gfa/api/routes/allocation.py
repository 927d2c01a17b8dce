"""Greenfield allocation endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import PlainTextResponse

from ...data.network_repository import load_dataset_request
from ...schemas.allocation import GFARequest, GFAResponse, GFASettings, SensitivityResponse, SiteAllocationRequest
from ...services.allocation.sensitivity import run_sensitivity
from ...services.allocation.service import optimize_gfa, optimize_sites
from ...services.outputs.formatter import allocation_to_csv

router = APIRouter(tags=["gfa"])

logger = logging.getLogger(__name__)


def _server_error(action: str, exc: Exception) -> HTTPException:
    logger.exception(f"Error during {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(exc)}",
    )


@router.post("/optimize-gfa", response_model=GFAResponse, status_code=status.HTTP_200_OK)
def optimize(payload: GFARequest) -> GFAResponse:
    try:
        return optimize_gfa(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _server_error("optimize allocation", exc) from exc


@router.post("/gfa/optimize/csv", response_class=PlainTextResponse, status_code=status.HTTP_200_OK)
def optimize_csv(payload: GFARequest) -> PlainTextResponse:
    """Run the optimizer and return the allocation records as CSV."""
    try:
        response = optimize_gfa(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _server_error("export allocation", exc) from exc
    return PlainTextResponse(
        allocation_to_csv(response),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="allocation.csv"'},
    )


@router.post("/gfa/sites/optimize", status_code=status.HTTP_200_OK)
def optimize_site_network(payload: SiteAllocationRequest) -> dict:
    """Optimize single-product customers against single-capacity sites."""
    try:
        return optimize_sites(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _server_error("optimize sites", exc) from exc


@router.post("/gfa/sensitivity", response_model=SensitivityResponse, status_code=status.HTTP_200_OK)
def sensitivity(payload: GFARequest) -> SensitivityResponse:
    try:
        return run_sensitivity(payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        raise _server_error("run sensitivity analysis", exc) from exc


def _dataset_request() -> GFARequest:
    try:
        return load_dataset_request()
    except FileNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get("/gfa/dataset", response_model=GFARequest, status_code=status.HTTP_200_OK)
def get_dataset() -> GFARequest:
    """Return the configured customer/facility files as an optimizer request."""
    return _dataset_request()


@router.post("/gfa/dataset/optimize", response_model=GFAResponse, status_code=status.HTTP_200_OK)
def optimize_dataset(options: GFASettings | None = None) -> GFAResponse:
    request = _dataset_request()
    if options is not None:
        request = request.model_copy(update={"settings": options})
    return optimize(request)
