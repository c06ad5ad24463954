from __future__ import annotations

import asyncio
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest
from sqlalchemy.orm import Session
from starlette.middleware.base import BaseHTTPMiddleware

from doctor_directory.core.config import settings
from doctor_directory.core.exceptions import DirectoryError
from doctor_directory.db.session import get_db
from doctor_directory.logging_utils import _request_id_ctx_var, configure_logging
from doctor_directory.models import DoctorType, Gender, WaitTime
from doctor_directory.schemas import (
    DirectoryEntry,
    DirectoryFilter,
    OfficeCreate,
    OfficeRead,
    ReferralRead,
    ReferralSubmission,
    ReviewDecision,
)
from doctor_directory.services import (
    create_office,
    list_offices,
    list_pending,
    list_with_locations,
    query_directory,
    review_referral,
    search_directory,
    submit_referral,
)

configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")

logger = logging.getLogger(__name__)

REQUEST_COUNTER = Counter(
    "doctor_directory_requests_total",
    "Total number of processed HTTP requests.",
    ["method", "path", "status"],
)
REQUEST_LATENCY = Histogram(
    "doctor_directory_request_duration_seconds",
    "HTTP request latency in seconds.",
    ["method", "path"],
)


class SimpleRateLimiter:
    """In-memory rate limiter keyed by client address."""

    def __init__(
        self,
        limit: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = max(1, limit)
        self.window_seconds = max(1, window_seconds)
        self._clock = clock
        self._entries: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def allow(self, key: str) -> bool:
        now = self._clock()
        async with self._lock:
            expired = [
                entry_key
                for entry_key, (_, started) in self._entries.items()
                if now - started >= self.window_seconds
            ]
            for entry_key in expired:
                del self._entries[entry_key]

            count, window_start = self._entries.get(key, (0, now))
            if count >= self.limit:
                return False
            self._entries[key] = (count + 1, window_start)
            return True


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Populate the request id used by structured logs."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request_id_token = _request_id_ctx_var.set(request_id)

        try:
            response = await call_next(request)
        finally:
            _request_id_ctx_var.reset(request_id_token)

        response.headers["X-Request-ID"] = request_id
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a coarse rate limit per client address."""

    def __init__(self, app: FastAPI, limiter: SimpleRateLimiter) -> None:  # type: ignore[override]
        super().__init__(app)
        self.limiter = limiter

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        if request.method == "OPTIONS":
            return await call_next(request)

        client_host = request.client.host if request.client else "unknown"

        allowed = await self.limiter.allow(client_host)
        if not allowed:
            logger.warning("rate limit exceeded", extra={"client_ip": client_host})
            return JSONResponse(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                content={"detail": "Rate limit exceeded"},
            )

        return await call_next(request)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Emit structured access logs and feed metrics."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        start_time = time.perf_counter()
        path = request.scope.get("root_path", "") + request.scope.get("path", request.url.path)
        method = request.method

        try:
            response = await call_next(request)
        except Exception:
            elapsed = time.perf_counter() - start_time
            REQUEST_COUNTER.labels(method=method, path=path, status="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)
            logger.exception(
                "request failed",
                extra={
                    "method": method,
                    "path": path,
                    "duration_ms": round(elapsed * 1000, 2),
                },
            )
            raise

        elapsed = time.perf_counter() - start_time
        status_code = response.status_code

        REQUEST_COUNTER.labels(method=method, path=path, status=str(status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(elapsed)

        logger.info(
            "request completed",
            extra={
                "method": method,
                "path": path,
                "status_code": status_code,
                "duration_ms": round(elapsed * 1000, 2),
            },
        )

        return response


rate_limiter = SimpleRateLimiter(
    settings.rate_limit_requests, settings.rate_limit_window_seconds
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RateLimitMiddleware, limiter=rate_limiter)
app.add_middleware(AccessLogMiddleware)
# last added runs outermost; the access log reads the request id it binds
app.add_middleware(RequestContextMiddleware)


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    """Render directory errors with the status mapped to their kind."""

    log = logger.error if exc.http_status >= 500 else logger.info
    log(
        "directory error",
        extra={"error": exc.code, "path": request.url.path, "details": exc.details},
    )
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def _entries(entries: list[DirectoryEntry]) -> list[dict[str, Any]]:
    return [entry.model_dump(mode="json") for entry in entries]


@app.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics for scraping."""

    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check endpoint used by infrastructure probes."""

    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.post("/api/v1/offices", status_code=status.HTTP_201_CREATED)
def create_office_endpoint(
    payload: OfficeCreate,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Register a medical office."""

    office = create_office(db, payload.name)
    return {"office": OfficeRead.model_validate(office).model_dump(mode="json")}


@app.get("/api/v1/offices")
def list_offices_endpoint(db: Session = Depends(get_db)) -> dict[str, Any]:
    """List every office in creation order."""

    offices = list_offices(db)
    return {
        "offices": [OfficeRead.model_validate(o).model_dump(mode="json") for o in offices]
    }


@app.post("/api/v1/referrals", status_code=status.HTTP_201_CREATED)
def submit_referral_endpoint(
    payload: ReferralSubmission,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Submit a doctor referral; it stays pending until reviewed."""

    referral = submit_referral(db, payload)
    return {"referral": ReferralRead.model_validate(referral).model_dump(mode="json")}


@app.get("/api/v1/referrals/pending")
def list_pending_endpoint(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Moderation queue, newest submission first."""

    return {"referrals": _entries(list_pending(db))}


@app.patch("/api/v1/referrals/{referral_id}")
def review_referral_endpoint(
    referral_id: int,
    payload: ReviewDecision,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Approve or reject a referral."""

    referral = review_referral(
        db, referral_id, payload.approval_status, payload.approved_by
    )
    return {"referral": ReferralRead.model_validate(referral).model_dump(mode="json")}


@app.get("/api/v1/doctors")
def query_directory_endpoint(
    office_id: int | None = None,
    doctor_name: str | None = None,
    type: DoctorType | None = None,
    gender: Gender | None = None,
    wait_time: WaitTime | None = None,
    online_appointments: bool | None = None,
    same_day_service: bool | None = None,
    search: str | None = None,
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Public directory of approved doctors, filtered by any supplied option."""

    filters = DirectoryFilter(
        office_id=office_id,
        doctor_name=doctor_name,
        type=type,
        gender=gender,
        wait_time=wait_time,
        online_appointments=online_appointments,
        same_day_service=same_day_service,
        search=search,
    )
    return {"doctors": _entries(query_directory(db, filters))}


@app.get("/api/v1/doctors/search")
def search_directory_endpoint(
    q: str = Query(default=""),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    """Free-text search of the public directory."""

    return {"query": q, "doctors": _entries(search_directory(db, q))}


@app.get("/api/v1/doctors/locations")
def list_with_locations_endpoint(db: Session = Depends(get_db)) -> dict[str, Any]:
    """Approved doctors with an address, for the map view."""

    return {"doctors": _entries(list_with_locations(db))}
