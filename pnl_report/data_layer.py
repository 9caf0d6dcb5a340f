import copy
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from .config import get_settings, require_file
from .report.models import ReportDocument, parse_report_document

logger = logging.getLogger(__name__)


@lru_cache(maxsize=4)
def _read_report_payload(path: Path) -> Dict[str, Any]:
    """
    Internal cached reader for the raw report JSON.
    """

    require_file(path)
    logger.info("Reading report document from %s", path)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Failed to parse report document {path}") from exc


def load_report_payload(path: Optional[Path] = None, refresh: bool = False) -> Dict[str, Any]:
    """
    Raw report payload as served over HTTP. A fresh copy is returned on every call.
    """

    if refresh:
        logger.info("Clearing cached report payload")
        _read_report_payload.cache_clear()

    target = path or get_settings().report_path
    return copy.deepcopy(_read_report_payload(Path(target)))


def load_report(path: Optional[Path] = None, refresh: bool = False) -> ReportDocument:
    """
    Load and validate the report document.
    """

    document = parse_report_document(load_report_payload(path, refresh=refresh))
    logger.info("Loaded report for %s (%s)", document.company.name, document.company.period)
    return document


def summarize_report(document: ReportDocument) -> dict:
    """
    Return high level stats for diagnostics.
    """

    sections = list(document.iter_sections())
    summary = {
        "sections": len(sections),
        "line_items": sum(len(section.items) for section in sections),
        "columns": document.column_labels,
        "summary_rows": [item.name for item in document.summary],
    }
    logger.info("Report summary generated: %s", summary)
    return summary


__all__ = ["load_report", "load_report_payload", "summarize_report"]
