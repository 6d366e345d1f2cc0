"""
Upload Service
==============
One parse → format → deliver cycle, shared by the CLI and the HTTP relay.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from crashlog.core.notifier import NotifierInfo
from crashlog.core.payload_formatter import PayloadFormatter
from crashlog.models.report import Report
from crashlog.parser.crash_parser import parse, parse_file
from crashlog.services.delivery import ReportDelivery

logger = logging.getLogger(__name__)


@dataclass
class UploadResult:
    report: Report
    payload: dict[str, Any]
    sent: bool


class UploadService:
    """Holds the formatter and delivery collaborators for repeated single-shot uploads."""

    def __init__(
        self,
        endpoint: str,
        notifier: NotifierInfo,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.formatter = PayloadFormatter(notifier)
        self.delivery = ReportDelivery(endpoint, transport=transport)

    def build_payload(self, report: Report) -> dict[str, Any]:
        return self.formatter.format(report)

    def upload_report(self, report: Report, api_key: str, dry_run: bool = False) -> UploadResult:
        payload = self.build_payload(report)
        if dry_run:
            logger.info("Dry run: payload built, nothing sent")
            return UploadResult(report=report, payload=payload, sent=False)

        self.delivery.deliver(payload, api_key)
        return UploadResult(report=report, payload=payload, sent=True)

    def upload_text(self, text: str, api_key: str, dry_run: bool = False) -> UploadResult:
        return self.upload_report(parse(text), api_key, dry_run=dry_run)

    def upload_file(self, path: str, api_key: str, dry_run: bool = False) -> UploadResult:
        logger.info("Reading crash log %s", path)
        return self.upload_report(parse_file(path), api_key, dry_run=dry_run)
