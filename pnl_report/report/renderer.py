"""
Projection of the report tree into display rows.

Rows are produced lazily and depend only on the section, the expansion state and the column list, so
the projection can be re-run after every toggle.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional, Sequence

import pandas as pd

from pnl_report.logging_utils import DiagnosticsLog

from .aggregator import resolve_category, section_values
from .expansion import ExpansionState
from .formatting import Tone, Trend, format_cell, trend_for, value_tone
from .models import Column, LineItem, ReportDocument, Section, SectionCategory, SummaryItem

logger = logging.getLogger(__name__)

INDENT = "  "


class RowKind(str, Enum):
    SECTION = "section"
    LINE_ITEM = "line_item"
    GROSS_PROFIT = "gross_profit"
    SUMMARY = "summary"


@dataclass(frozen=True)
class DisplayCell:
    column: str
    value: Optional[float]
    text: str
    tone: Tone
    trend: Optional[Trend] = None


@dataclass(frozen=True)
class DisplayRow:
    kind: RowKind
    key: str
    label: str
    depth: int
    category: SectionCategory
    cells: List[DisplayCell] = field(default_factory=list)
    section_id: Optional[str] = None
    collapsible: bool = False
    expanded: Optional[bool] = None

    @property
    def is_expense(self) -> bool:
        return self.category is SectionCategory.EXPENSE

    @property
    def values(self) -> List[Optional[float]]:
        return [cell.value for cell in self.cells]

    @property
    def indented_label(self) -> str:
        return f"{INDENT * max(self.depth - 1, 0)}{self.label}"


def build_cells(
    values: Sequence[float],
    columns: Sequence[Column],
    *,
    invert: bool = False,
    leaf: bool = False,
) -> List[DisplayCell]:
    cells: List[DisplayCell] = []
    for index, column in enumerate(columns):
        if index >= len(values):
            cells.append(DisplayCell(column=column.label, value=None, text="", tone=Tone.NEUTRAL))
            continue
        value = float(values[index])
        cells.append(
            DisplayCell(
                column=column.label,
                value=value,
                text=format_cell(value, leaf=leaf),
                tone=value_tone(value, invert=invert),
                trend=trend_for(values, index, invert=invert),
            )
        )
    return cells


def _line_item_row(item: LineItem, section: Section, category: SectionCategory, columns: Sequence[Column]) -> DisplayRow:
    return DisplayRow(
        kind=RowKind.LINE_ITEM,
        key=item.account_id,
        label=item.name,
        depth=section.level + 1,
        category=category,
        cells=build_cells(item.values, columns, invert=category is SectionCategory.EXPENSE, leaf=True),
        section_id=section.id,
    )


def iter_section_rows(
    section: Section,
    expansion: ExpansionState,
    columns: Sequence[Column],
    *,
    inherited: Optional[SectionCategory] = None,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> Iterator[DisplayRow]:
    """
    Yield the header row for `section`, then, when it is open, its children, line items and
    gross-profit row.
    """

    category = resolve_category(section, inherited)
    invert = category is SectionCategory.EXPENSE
    values = section_values(section, len(columns), strict=strict, diagnostics=diagnostics)
    is_open = not section.collapsible or expansion.is_expanded(section.id)

    yield DisplayRow(
        kind=RowKind.SECTION,
        key=section.id,
        label=section.name,
        depth=section.level,
        category=category,
        cells=build_cells(values, columns, invert=invert),
        section_id=section.id,
        collapsible=section.collapsible,
        expanded=is_open,
    )
    if not is_open:
        return

    for child in section.children:
        yield from iter_section_rows(
            child,
            expansion,
            columns,
            inherited=category,
            strict=strict,
            diagnostics=diagnostics,
        )
    for item in section.items:
        yield _line_item_row(item, section, category, columns)
    if section.gross_profit is not None:
        yield DisplayRow(
            kind=RowKind.GROSS_PROFIT,
            key=f"{section.id}:gross_profit",
            label=section.gross_profit.name,
            depth=section.level,
            category=SectionCategory.INCOME,
            cells=build_cells(section.gross_profit.values, columns),
            section_id=section.id,
        )


def summary_row(item: SummaryItem, columns: Sequence[Column]) -> DisplayRow:
    return DisplayRow(
        kind=RowKind.SUMMARY,
        key=f"summary:{item.name}",
        label=item.name,
        depth=1,
        category=SectionCategory.OTHER,
        cells=build_cells(item.values, columns),
    )


def render_report(
    document: ReportDocument,
    expansion: ExpansionState,
    *,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> List[DisplayRow]:
    """
    All visible rows for the document: every top-level section in order, then the summary rows.
    """

    rows: List[DisplayRow] = []
    for section in document.sections:
        rows.extend(
            iter_section_rows(
                section,
                expansion,
                document.columns,
                strict=strict,
                diagnostics=diagnostics,
            )
        )
    rows.extend(summary_row(item, document.columns) for item in document.summary)
    logger.debug("Rendered %s rows (%s expanded sections)", len(rows), len(expansion.expanded_ids))
    return rows


def rows_to_frame(rows: Sequence[DisplayRow], columns: Sequence[Column]) -> pd.DataFrame:
    """
    Formatted table of the rows, one column per report column plus the account label.
    """

    labels = [column.label for column in columns]
    records = []
    for row in rows:
        record = {"Account": row.indented_label}
        for label, cell in zip(labels, row.cells):
            record[label] = cell.text
        records.append(record)
    return pd.DataFrame.from_records(records, columns=["Account", *labels])


__all__ = [
    "DisplayCell",
    "DisplayRow",
    "RowKind",
    "build_cells",
    "iter_section_rows",
    "render_report",
    "rows_to_frame",
    "summary_row",
]
