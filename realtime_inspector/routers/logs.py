"""API router for listing and reconstructing realtime session logs."""
from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from realtime_inspector import config
from realtime_inspector.services.log_files import list_log_files, resolve_log_path
from realtime_inspector.services.log_processor import process_log_content, process_log_file

logger = logging.getLogger("realtime_inspector.logs")

logs_router = APIRouter(prefix="/api/logs", tags=["logs"])


class PastedLogRequest(BaseModel):
    content: Optional[str] = None
    sessionId: Optional[str] = None


@logs_router.get("")
def get_logs(
    file: Optional[str] = Query(None, description="Log file name inside the log directory"),
    session: Optional[str] = Query(None, description="Restrict reconstruction to one session id"),
) -> dict[str, Any]:
    """List available log files, or reconstruct one when `file` is given."""
    log_dir = config.LOG_DIR
    if not file:
        return {"success": True, "files": list_log_files(log_dir, config.LOG_SUFFIX)}

    try:
        path = resolve_log_path(file, log_dir)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except FileNotFoundError as exc:
        raise HTTPException(status_code=404, detail="File not found") from exc

    try:
        result = process_log_file(path, session or None)
    except (OSError, UnicodeDecodeError) as exc:
        logger.error("Error processing log file %s: %s", file, exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"success": True, "fileName": file, **result.model_dump()}


@logs_router.post("")
def post_logs(req: PastedLogRequest) -> dict[str, Any]:
    """Reconstruct pasted log content."""
    if not req.content or not req.content.strip():
        raise HTTPException(status_code=400, detail="Content is required")

    result = process_log_content(req.content, req.sessionId or None, origin="pasted")
    return {"success": True, "fileName": "pasted-content", **result.model_dump()}
