"""Log buffer endpoints for the admin dashboard."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query

from dspforms.api.deps import require_admin
from dspforms.core.identity import Identity
from dspforms.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
def list_logs(
    limit: int = Query(100, ge=1, le=500),
    form_id: Optional[str] = None,
    submission_id: Optional[str] = None,
    level: Optional[str] = None,
    _: Identity = Depends(require_admin),
) -> dict[str, list[dict[str, Any]]]:
    entries = get_log_buffer(
        limit=limit, form_id=form_id, submission_id=submission_id, level=level
    )
    return {"logs": entries}


__all__ = ["router"]
