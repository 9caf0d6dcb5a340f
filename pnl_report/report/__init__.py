"""
Report document model, tree aggregation, rendering and export.
"""

from .aggregator import aggregate, find_section, pct_change, resolve_category, section_value, section_values
from .errors import ErrorType, ReportError
from .expansion import ExpansionState, ExpansionStatus
from .exporter import ExportFile, csv_export_file, export_csv, export_json, json_export_file
from .formatting import ZERO_PLACEHOLDER, format_cell, format_currency
from .models import (
    Column,
    ColumnKind,
    Company,
    LineItem,
    ReportDocument,
    Section,
    SectionCategory,
    SectionShape,
    SummaryItem,
    parse_report_document,
)
from .renderer import DisplayCell, DisplayRow, RowKind, iter_section_rows, render_report, rows_to_frame

__all__ = [
    "Column",
    "ColumnKind",
    "Company",
    "DisplayCell",
    "DisplayRow",
    "ErrorType",
    "ExpansionState",
    "ExpansionStatus",
    "ExportFile",
    "LineItem",
    "ReportDocument",
    "ReportError",
    "RowKind",
    "Section",
    "SectionCategory",
    "SectionShape",
    "SummaryItem",
    "ZERO_PLACEHOLDER",
    "aggregate",
    "csv_export_file",
    "export_csv",
    "export_json",
    "find_section",
    "format_cell",
    "format_currency",
    "iter_section_rows",
    "json_export_file",
    "parse_report_document",
    "pct_change",
    "render_report",
    "resolve_category",
    "rows_to_frame",
    "section_value",
    "section_values",
]
