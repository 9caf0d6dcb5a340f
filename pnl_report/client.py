"""
HTTP client for the report and commentary endpoints.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from pnl_report.config import get_settings
from pnl_report.report.errors import ErrorType, ReportError
from pnl_report.report.models import ReportDocument, parse_report_document

logger = logging.getLogger(__name__)

CSRF_HEADER = "X-CSRF-TOKEN"
SESSION_PATH = "/api/session"
REPORT_PATH = "/api/profit-loss"
COMMENTARY_PATH = "/api/profit-loss/commentary"

FETCH_FAILURE_MESSAGE = "Failed to load the profit and loss report."
COMMENTARY_FAILURE_MESSAGE = "Failed to generate commentary."


class ReportClient:
    """
    Thin wrapper over httpx; every transport or status failure surfaces as a ReportError.

    No timeout is applied: a request ends only when the server answers or the connection fails.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.base_url = (base_url or get_settings().api_url).rstrip("/")
        self._transport = transport
        self._timeout = timeout

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, transport=self._transport, timeout=self._timeout)

    def _get_json(self, path: str, error_type: ErrorType, message: str) -> Any:
        try:
            with self._client() as client:
                response = client.get(path, headers={"Accept": "application/json"})
                response.raise_for_status()
                return response.json()
        except httpx.RequestError as exc:
            logger.warning("GET %s failed: %s", path, exc)
            raise ReportError(error_type, message, {"reason": str(exc)}) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("GET %s returned %s", path, exc.response.status_code)
            raise ReportError(error_type, message, {"status_code": exc.response.status_code}) from exc
        except ValueError as exc:
            logger.warning("GET %s returned a body that is not JSON", path)
            raise ReportError(error_type, message, {"reason": "invalid_json"}) from exc

    def fetch_report(self) -> ReportDocument:
        payload = self._get_json(REPORT_PATH, ErrorType.FETCH_FAILURE, FETCH_FAILURE_MESSAGE)
        if not isinstance(payload, dict):
            raise ReportError(ErrorType.FETCH_FAILURE, FETCH_FAILURE_MESSAGE, {"reason": "unexpected_payload"})
        return parse_report_document(payload)

    def fetch_csrf_token(self) -> str:
        payload = self._get_json(SESSION_PATH, ErrorType.COMMENTARY_FAILURE, COMMENTARY_FAILURE_MESSAGE)
        token = payload.get("csrf_token") if isinstance(payload, dict) else None
        if not token:
            raise ReportError(ErrorType.COMMENTARY_FAILURE, COMMENTARY_FAILURE_MESSAGE, {"reason": "missing_csrf_token"})
        return str(token)

    def request_commentary(
        self,
        prompt: str,
        csrf_token: str,
        document: Optional[ReportDocument] = None,
    ) -> str:
        body: Dict[str, Any] = {"prompt": prompt}
        if document is not None:
            body["report"] = document.to_wire()
        try:
            with self._client() as client:
                response = client.post(COMMENTARY_PATH, json=body, headers={CSRF_HEADER: csrf_token})
                response.raise_for_status()
                data = response.json()
        except httpx.RequestError as exc:
            logger.warning("Commentary request failed: %s", exc)
            raise ReportError(ErrorType.COMMENTARY_FAILURE, COMMENTARY_FAILURE_MESSAGE, {"reason": str(exc)}) from exc
        except httpx.HTTPStatusError as exc:
            logger.warning("Commentary request returned %s", exc.response.status_code)
            raise ReportError(
                ErrorType.COMMENTARY_FAILURE,
                COMMENTARY_FAILURE_MESSAGE,
                {"status_code": exc.response.status_code},
            ) from exc
        except ValueError as exc:
            raise ReportError(ErrorType.COMMENTARY_FAILURE, COMMENTARY_FAILURE_MESSAGE, {"reason": "invalid_json"}) from exc

        text = data.get("response") if isinstance(data, dict) else None
        if not isinstance(text, str):
            raise ReportError(ErrorType.COMMENTARY_FAILURE, COMMENTARY_FAILURE_MESSAGE, {"reason": "missing_response"})
        return text


__all__ = ["CSRF_HEADER", "COMMENTARY_PATH", "REPORT_PATH", "ReportClient", "SESSION_PATH"]
