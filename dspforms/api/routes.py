"""Root API routers."""

from fastapi import APIRouter, Depends, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlmodel import Session

from dspforms.api.deps import get_db, require_admin
from dspforms.core.identity import Identity
from dspforms.services.review import dashboard_stats

health_router = APIRouter(tags=["system"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@health_router.get("/health", summary="Service health check")
async def healthcheck() -> dict[str, str]:
    """Return a simple heartbeat for orchestration layers."""

    return {"status": "ok"}


@health_router.get("/metrics", summary="Prometheus metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@admin_router.get("/stats", summary="Dashboard counters")
def stats(
    session: Session = Depends(get_db), _: Identity = Depends(require_admin)
) -> dict[str, int]:
    result = dashboard_stats(session)
    return {
        "total_forms": result.total_forms,
        "total_submissions": result.total_submissions,
        "pending": result.pending,
    }
