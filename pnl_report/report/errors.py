"""
Error taxonomy shared by the client, the sessions and the API.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(str, Enum):
    FETCH_FAILURE = "fetch_failure"
    COMMENTARY_FAILURE = "commentary_failure"
    INVALID_DOCUMENT = "invalid_document"


@dataclass(frozen=True)
class ReportError(Exception):
    error_type: ErrorType
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"message": self.message, "error_type": self.error_type.value}
        if self.details:
            payload["details"] = self.details
        return payload


__all__ = ["ErrorType", "ReportError"]
