from typing import Optional
import os
import time
from datetime import date

from fastapi import FastAPI, APIRouter, HTTPException
from fastapi.responses import ORJSONResponse
from prometheus_client import Counter, Histogram, make_asgi_app

from ..db import init_db
from ..search.catalog import CatalogService, DEFAULT_PAGE_SIZE
from ..utils.log import setup_logger
from ..utils.schemas import (
    AvailabilityRequest,
    AvailabilityResult,
    CatalogPage,
    RoomTypeDetails,
    RoomTypeSummary,
)

logger = setup_logger(__name__)

# --- Feature flags ---
OBS_ON = os.getenv("OBS_ON", "on") == "on"  # turn off if metrics cause issues

# --- Metrics ---
requests_total = Counter("catalog_requests_total", "Total catalog requests", ["op"])
latency_seconds = Histogram("catalog_request_latency_seconds", "Catalog request latency")
request_fail = Counter("catalog_request_fail_total", "Failed catalog requests", ["op"])
availability_checks = Counter(
    "availability_checks_total", "Availability checks", ["available"]
)

# --- FastAPI App Setup ---
app = FastAPI(title="Hotel Catalog", default_response_class=ORJSONResponse)

service = CatalogService()

router = APIRouter(prefix="/rooms")


def _parse_iso_date(s: str, field: str) -> date:
    try:
        return date.fromisoformat(s)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=400, detail=f"{field} must be ISO date YYYY-MM-DD"
        )


def _observe(op: str, start: float) -> None:
    if not OBS_ON:
        return
    requests_total.labels(op=op).inc()
    latency_seconds.observe(time.perf_counter() - start)


@router.get("/catalog", response_model=CatalogPage)
def catalog(
    search_term: str = "",
    room_type_id: Optional[int] = None,
    max_price: Optional[float] = None,
    check_in: Optional[str] = None,
    guests: Optional[int] = None,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
):
    start = time.perf_counter()
    cin = _parse_iso_date(check_in, "check_in") if check_in else None
    try:
        return service.catalog(
            search_term=search_term,
            room_type_id=room_type_id,
            max_price=max_price,
            check_in=cin,
            guests=guests,
            page=page,
            page_size=page_size,
        )
    except Exception:
        request_fail.labels(op="catalog").inc()
        logger.exception("catalog query failed")
        raise
    finally:
        _observe("catalog", start)


@router.get("/search", response_model=list[RoomTypeSummary])
def search(
    term: str = "",
    room_type_id: Optional[int] = None,
    max_price: Optional[float] = None,
    guests: Optional[int] = None,
):
    start = time.perf_counter()
    try:
        return service.typeahead_search(
            term=term, room_type_id=room_type_id, max_price=max_price, guests=guests
        )
    except Exception:
        request_fail.labels(op="search").inc()
        logger.exception("typeahead search failed")
        raise
    finally:
        _observe("search", start)


@router.post("/check-availability", response_model=AvailabilityResult)
def check_availability(req: AvailabilityRequest):
    start = time.perf_counter()
    check_in = _parse_iso_date(req.check_in, "check_in")
    check_out = _parse_iso_date(req.check_out, "check_out")
    try:
        result = service.check_availability(req.room_type_id, check_in, check_out)
    except Exception:
        request_fail.labels(op="check_availability").inc()
        logger.exception("availability check failed")
        raise
    finally:
        _observe("check_availability", start)

    if OBS_ON:
        availability_checks.labels(available=str(result.available).lower()).inc()
    return result


@router.get("/{room_type_id}", response_model=RoomTypeDetails)
def details(room_type_id: int, review_page: int = 1, review_page_size: int = DEFAULT_PAGE_SIZE):
    start = time.perf_counter()
    try:
        out = service.room_type_details(
            room_type_id, review_page=review_page, review_page_size=review_page_size
        )
    except Exception:
        request_fail.labels(op="details").inc()
        logger.exception("room type details failed")
        raise
    finally:
        _observe("details", start)
    if out is None:
        raise HTTPException(status_code=404, detail="Room type not found")
    return out


app.include_router(router)


@app.on_event("startup")
def on_start() -> None:
    init_db()


# Expose /metrics for Prometheus (only if enabled)
if OBS_ON:
    metrics_app = make_asgi_app()
    app.mount("/metrics", metrics_app)
