"""
Request lifecycles for one view session: loading the report and asking for commentary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pandas as pd

from pnl_report.client import ReportClient
from pnl_report.logging_utils import DiagnosticsLog
from pnl_report.report.errors import ReportError
from pnl_report.report.expansion import ExpansionState, ExpansionStatus
from pnl_report.report.exporter import ExportFile, csv_export_file, json_export_file
from pnl_report.report.models import ReportDocument
from pnl_report.report.renderer import DisplayRow, render_report, rows_to_frame

logger = logging.getLogger(__name__)


class RequestStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


def _new_diagnostics() -> DiagnosticsLog:
    return DiagnosticsLog("pnl_report.session")


@dataclass
class ReportSession:
    """
    Holds the fetched document and the expansion state for as long as the view is open.
    """

    client: ReportClient
    strict_values: bool = True
    status: RequestStatus = RequestStatus.IDLE
    document: Optional[ReportDocument] = None
    expansion: Optional[ExpansionState] = None
    error: Optional[str] = None
    diagnostics: DiagnosticsLog = field(default_factory=_new_diagnostics, repr=False)

    @property
    def loading(self) -> bool:
        return self.status is RequestStatus.LOADING

    def load(self) -> bool:
        self.status = RequestStatus.LOADING
        self.error = None
        try:
            document = self.client.fetch_report()
        except ReportError as exc:
            self.status = RequestStatus.ERROR
            self.error = exc.message
            self.diagnostics.error("Report load failed", error_type=exc.error_type.value, details=exc.details)
            return False
        except Exception:
            self.status = RequestStatus.ERROR
            self.error = "Unexpected error while loading the report."
            raise

        self.document = document
        self.expansion = ExpansionState.from_document(document)
        self.status = RequestStatus.SUCCESS
        self.diagnostics.info("Report loaded", company=document.company.name, columns=len(document.columns))
        return True

    def retry(self) -> bool:
        logger.info("Retrying report load")
        return self.load()

    def _require_document(self) -> ReportDocument:
        if self.document is None or self.expansion is None:
            raise RuntimeError("Report has not been loaded.")
        return self.document

    def rows(self) -> List[DisplayRow]:
        document = self._require_document()
        return render_report(
            document,
            self.expansion,
            strict=self.strict_values,
            diagnostics=self.diagnostics,
        )

    def frame(self) -> pd.DataFrame:
        """
        The currently visible rows as a formatted table.
        """

        return rows_to_frame(self.rows(), self._require_document().columns)

    def toggle(self, section_id: str) -> ExpansionStatus:
        self._require_document()
        return self.expansion.toggle(section_id)

    def expand_all(self) -> None:
        self._require_document()
        self.expansion.expand_all()

    def collapse_all(self) -> None:
        self._require_document()
        self.expansion.collapse_all()

    def csv_file(self) -> ExportFile:
        return csv_export_file(self._require_document())

    def json_file(self) -> ExportFile:
        return json_export_file(self._require_document())


@dataclass
class CommentarySession:
    """
    One commentary panel. A submit while a request is in flight is ignored rather than queued.
    """

    client: ReportClient
    csrf_token: Optional[str] = None
    status: RequestStatus = RequestStatus.IDLE
    response: Optional[str] = None
    error: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.status is RequestStatus.LOADING

    def submit(self, prompt: str, document: Optional[ReportDocument] = None) -> bool:
        if self.loading:
            logger.info("Commentary request ignored; another request is in flight")
            return False
        if not prompt.strip():
            self.error = "Please enter a prompt."
            self.status = RequestStatus.ERROR
            return False

        self.status = RequestStatus.LOADING
        self.error = None
        try:
            if not self.csrf_token:
                self.csrf_token = self.client.fetch_csrf_token()
            self.response = self.client.request_commentary(prompt, self.csrf_token, document)
            self.status = RequestStatus.SUCCESS
        except ReportError as exc:
            self.status = RequestStatus.ERROR
            self.error = exc.message
        finally:
            if self.status is RequestStatus.LOADING:
                self.status = RequestStatus.ERROR
        return self.status is RequestStatus.SUCCESS


__all__ = ["CommentarySession", "ReportSession", "RequestStatus"]
