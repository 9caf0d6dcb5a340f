"""
FastAPI service serving the report document, the commentary endpoint and file exports.
"""

from __future__ import annotations

import secrets
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Literal

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from pnl_report.commentary import CommentaryService
from pnl_report.config import get_settings
from pnl_report.data_layer import load_report, summarize_report
from pnl_report.logging_utils import DiagnosticsLog, setup_logging
from pnl_report.report.errors import ErrorType, ReportError
from pnl_report.report.exporter import csv_export_file, json_export_file
from pnl_report.report.models import ReportDocument, parse_report_document

setup_logging(get_settings().log_level)

CSRF_MISMATCH_STATUS = 419

report_document: ReportDocument | None = None
commentary_service: CommentaryService | None = None

_STATUS_BY_ERROR = {
    ErrorType.INVALID_DOCUMENT: 422,
    ErrorType.COMMENTARY_FAILURE: 502,
    ErrorType.FETCH_FAILURE: 503,
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    global report_document, commentary_service
    report_document = load_report(refresh=True)
    commentary_service = CommentaryService()
    yield
    report_document = None
    commentary_service = None


app = FastAPI(title="Profit & Loss Report API", version="0.1.0", lifespan=lifespan)


class CommentaryRequest(BaseModel):
    prompt: str = Field(min_length=1)
    report: Dict[str, Any] | None = None


class CommentaryResponse(BaseModel):
    response: str
    logs: list[str] = Field(default_factory=list)


@app.exception_handler(ReportError)
async def report_error_handler(_: Request, exc: ReportError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(exc.error_type, 500)
    return JSONResponse(status_code=status_code, content={"detail": exc.to_payload()})


def _require_document() -> ReportDocument:
    if report_document is None:
        raise HTTPException(status_code=503, detail="Report document is not loaded.")
    return report_document


def verify_csrf_token(x_csrf_token: str | None = Header(default=None)) -> None:
    expected = get_settings().csrf_token
    if not x_csrf_token or not secrets.compare_digest(x_csrf_token, expected):
        raise HTTPException(status_code=CSRF_MISMATCH_STATUS, detail="CSRF token mismatch.")


@app.get("/health", response_model=dict)
async def health() -> dict:
    if report_document is None:
        return {"status": "starting"}
    return {"status": "ok", "report": summarize_report(report_document)}


@app.get("/api/session", response_model=dict)
async def session_metadata() -> dict:
    return {"csrf_token": get_settings().csrf_token}


@app.get("/api/profit-loss")
async def profit_loss_report() -> JSONResponse:
    return JSONResponse(content=_require_document().to_wire())


@app.post(
    "/api/profit-loss/commentary",
    response_model=CommentaryResponse,
    dependencies=[Depends(verify_csrf_token)],
)
def commentary_endpoint(payload: CommentaryRequest) -> CommentaryResponse:
    if commentary_service is None:
        raise HTTPException(status_code=503, detail="Commentary service is not initialized.")

    diagnostics = DiagnosticsLog("api.commentary", context={"request_id": str(uuid.uuid4())})
    if payload.report is not None:
        document = parse_report_document(payload.report)
        diagnostics.info("Using report supplied with the request", company=document.company.name)
    else:
        document = _require_document()
        diagnostics.info("Using served report", company=document.company.name)

    try:
        text = commentary_service.generate(payload.prompt, document)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    diagnostics.info("Commentary generated", llm=commentary_service.uses_llm, characters=len(text))
    return CommentaryResponse(response=text, logs=diagnostics.as_text_lines())


@app.get("/api/profit-loss/export")
async def export_report(format: Literal["csv", "json"] = Query(default="csv")) -> Response:
    document = _require_document()
    export = csv_export_file(document) if format == "csv" else json_export_file(document)
    return Response(
        content=export.data,
        media_type=export.mime_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
