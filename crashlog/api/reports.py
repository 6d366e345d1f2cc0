"""
POST /reports, POST /reports/preview
=====================================
HTTP relay in front of the upload pipeline.

/reports          parses, formats and forwards one crash log to the endpoint
/reports/preview  parses and formats only, returning the payload

Parse and format failures answer 422; a rejected or failed delivery answers 502.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator

from crashlog.core import config
from crashlog.core.errors import DeliveryError, FormatError, MalformedReportError
from crashlog.core.notifier import NotifierInfo
from crashlog.services.upload_service import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reports", tags=["Crash Reports"])


# ---------------------------------------------------------------------------
# Request / Response schemas
# ---------------------------------------------------------------------------
class CrashLogRequest(BaseModel):
    crash_log: str
    api_key: Optional[str] = None

    @field_validator("crash_log")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("crash_log must not be empty")
        return value


class UploadResponse(BaseModel):
    status: str
    threads: int
    images: int


def get_service() -> UploadService:
    return UploadService(config.CRASHLOG_ENDPOINT, NotifierInfo.from_config())


@router.post("", response_model=UploadResponse)
def upload_report(request: CrashLogRequest) -> UploadResponse:
    api_key = request.api_key or config.CRASHLOG_API_KEY
    if not api_key:
        raise HTTPException(status_code=400, detail="api_key is required")

    try:
        result = get_service().upload_text(request.crash_log, api_key)
    except (MalformedReportError, FormatError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DeliveryError as e:
        logger.error("Relay delivery failed (status=%s)", e.status_code)
        raise HTTPException(status_code=502, detail=str(e))

    return UploadResponse(
        status="sent",
        threads=len(result.report.backtraces),
        images=len(result.report.binary_images),
    )


@router.post("/preview")
def preview_report(request: CrashLogRequest) -> dict[str, Any]:
    try:
        result = get_service().upload_text(request.crash_log, api_key="", dry_run=True)
    except (MalformedReportError, FormatError) as e:
        raise HTTPException(status_code=422, detail=str(e))
    return result.payload
