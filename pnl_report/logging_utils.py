"""
Helpers for consistent logging across the API, the client sessions, and the UI.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set, Tuple

from pydantic import BaseModel, ConfigDict

_LOGGING_CONFIGURED = False


def setup_logging(level: str | None = None) -> None:
    """
    Configure the root logger once.
    """

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    env_level = level or os.getenv("LOG_LEVEL", "INFO")
    try:
        parsed_level = getattr(logging, env_level.upper())
    except AttributeError:
        parsed_level = logging.INFO

    logging.basicConfig(
        level=parsed_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    _LOGGING_CONFIGURED = True


class DiagnosticEntry(BaseModel):
    """
    One data-quality or request event, kept for display next to the report.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: str
    level: str
    message: str
    section_id: Optional[str] = None
    metadata: Dict[str, Any] | None = None

    def as_text(self) -> str:
        parts = [f"{self.timestamp} [{self.level}] {self.message}"]
        if self.section_id:
            parts.append(f"section={self.section_id}")
        if self.metadata:
            parts.append(str(self.metadata))
        return " | ".join(parts)

    @property
    def key(self) -> Tuple[str, str, Optional[str], str]:
        return (self.level, self.message, self.section_id, repr(sorted((self.metadata or {}).items())))


class DiagnosticsLog:
    """
    Data-quality and request events for one view session.

    Every entry is mirrored to the stdlib logger under ``name``. The view re-renders the report
    on each interaction, so an entry identical to one already recorded is dropped.
    """

    def __init__(
        self,
        name: str,
        *,
        level: str | None = None,
        context: Dict[str, Any] | None = None,
    ) -> None:
        setup_logging(level)
        self._logger = logging.getLogger(name)
        self._context = dict(context or {})
        self._entries: List[DiagnosticEntry] = []
        self._seen: Set[Tuple[str, str, Optional[str], str]] = set()

    def info(self, message: str, **metadata: Any) -> None:
        self._record(logging.INFO, message, metadata)

    def warning(self, message: str, **metadata: Any) -> None:
        self._record(logging.WARNING, message, metadata)

    def error(self, message: str, **metadata: Any) -> None:
        self._record(logging.ERROR, message, metadata)

    def debug(self, message: str, **metadata: Any) -> None:
        self._record(logging.DEBUG, message, metadata)

    def _record(self, level: int, message: str, metadata: Dict[str, Any]) -> None:
        section_id = metadata.pop("section_id", None)
        details = {**self._context, **metadata}
        entry = DiagnosticEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            level=logging.getLevelName(level),
            message=message,
            section_id=section_id,
            metadata=details or None,
        )
        if entry.key in self._seen:
            return
        self._seen.add(entry.key)
        self._entries.append(entry)

        suffix = f" | section={section_id}" if section_id else ""
        if details:
            suffix += f" | {details}"
        self._logger.log(level, "%s%s", message, suffix)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def warning_count(self) -> int:
        return sum(1 for entry in self._entries if entry.level in ("WARNING", "ERROR"))

    def as_entries(self) -> List[DiagnosticEntry]:
        return list(self._entries)

    def for_section(self, section_id: str) -> List[DiagnosticEntry]:
        return [entry for entry in self._entries if entry.section_id == section_id]

    def as_text_lines(self) -> List[str]:
        return [entry.as_text() for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()
        self._seen.clear()


__all__ = ["DiagnosticEntry", "DiagnosticsLog", "setup_logging"]
