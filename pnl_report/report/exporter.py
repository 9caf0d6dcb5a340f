"""
CSV and JSON downloads of the already-fetched report document.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Sequence

from .models import ReportDocument, Section

logger = logging.getLogger(__name__)

CSV_FILENAME = "profit-loss-report.csv"
JSON_FILENAME = "profit-loss-report.json"
CSV_MIME_TYPE = "text/csv"
JSON_MIME_TYPE = "application/json"

_INDENT = "  "


@dataclass(frozen=True)
class ExportFile:
    filename: str
    mime_type: str
    content: str

    @property
    def data(self) -> bytes:
        return self.content.encode("utf-8")


def _csv_number(value: float) -> float | int:
    if float(value).is_integer():
        return int(value)
    return float(value)


def _csv_values(values: Optional[Sequence[float]], width: int) -> List[Any]:
    if values is None:
        return [None] * width
    return [_csv_number(value) for value in values]


def _section_records(section: Section, width: int) -> Iterator[List[Any]]:
    indent = _INDENT * max(section.level - 1, 0)
    stated = section.total.values if section.total is not None else None
    yield [f"{indent}{section.name}", *_csv_values(stated, width)]
    for child in section.children:
        yield from _section_records(child, width)
    item_indent = _INDENT * section.level
    for item in section.items:
        yield [f"{item_indent}{item.name}", *_csv_values(item.values, width)]


def csv_records(document: ReportDocument) -> List[List[Any]]:
    """
    Header plus one record per section (any depth), line item and summary row.
    """

    width = len(document.columns)
    records: List[List[Any]] = [["Account", *document.column_labels]]
    for section in document.sections:
        records.extend(_section_records(section, width))
    for item in document.summary:
        records.append([item.name, *_csv_values(item.values, width)])
    return records


def export_csv(document: ReportDocument) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    records = csv_records(document)
    writer.writerows(records)
    logger.info("Exported report as CSV (%s rows)", len(records))
    return buffer.getvalue()


def export_json(document: ReportDocument) -> str:
    payload = document.model_dump_json(indent=2, by_alias=True, exclude_none=True)
    logger.info("Exported report as JSON (%s bytes)", len(payload))
    return payload


def csv_export_file(document: ReportDocument) -> ExportFile:
    return ExportFile(filename=CSV_FILENAME, mime_type=CSV_MIME_TYPE, content=export_csv(document))


def json_export_file(document: ReportDocument) -> ExportFile:
    return ExportFile(filename=JSON_FILENAME, mime_type=JSON_MIME_TYPE, content=export_json(document))


__all__ = [
    "CSV_FILENAME",
    "CSV_MIME_TYPE",
    "ExportFile",
    "JSON_FILENAME",
    "JSON_MIME_TYPE",
    "csv_export_file",
    "csv_records",
    "export_csv",
    "export_json",
    "json_export_file",
]
