"""
Tree aggregation over report sections.

A section's stated `total` (or, for income/cost pairings, its `grossProfit`) is always used verbatim.
Only when neither is present is a figure reconstructed from the line items underneath it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from pnl_report.logging_utils import DiagnosticsLog

from .errors import ErrorType, ReportError
from .models import ReportDocument, Section, SectionCategory, SectionShape

logger = logging.getLogger(__name__)

_EXPENSE_MARKERS = ("cost", "expense")
_INCOME_MARKERS = ("income", "revenue", "sales")


def value_at(
    values: Sequence[float],
    index: int,
    *,
    strict: bool = True,
    owner: str = "",
    section_id: Optional[str] = None,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> float:
    """
    Read one cell. A short array is rejected in strict mode and read as zero otherwise.
    """

    if 0 <= index < len(values):
        return float(values[index])
    if strict:
        raise ReportError(
            ErrorType.INVALID_DOCUMENT,
            f"Missing value at column {index} for '{owner}'.",
            {"owner": owner, "column_index": index, "length": len(values)},
        )
    logger.warning("Missing value at column %s for '%s'; treating as 0", index, owner)
    if diagnostics is not None:
        diagnostics.warning(
            "Missing value coerced to zero",
            section_id=section_id,
            column_index=index,
            owner=owner,
            length=len(values),
        )
    return 0.0


def _line_items_sum(
    section: Section,
    index: int,
    strict: bool,
    diagnostics: Optional[DiagnosticsLog],
) -> float:
    return sum(
        value_at(
            item.values,
            index,
            strict=strict,
            owner=item.account_id or item.name,
            section_id=section.id,
            diagnostics=diagnostics,
        )
        for item in section.items
    )


def descendant_total(
    section: Section,
    index: int,
    *,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> float:
    """
    Sum line items of every descendant at `index`, never reading the section's own line items.
    """

    total = 0.0
    for child in section.children:
        total += _line_items_sum(child, index, strict, diagnostics)
        total += descendant_total(child, index, strict=strict, diagnostics=diagnostics)
    return total


def aggregate(
    section: Section,
    index: int,
    *,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> float:
    """
    Reconstruct a section's figure at one column from the line items in its sub-tree.

    Header sections sum their descendants only. Sections carrying their own line items (leaves, and
    headers that also carry items) add those items to the descendant sum.
    """

    total = descendant_total(section, index, strict=strict, diagnostics=diagnostics)
    if section.shape in (SectionShape.LEAF, SectionShape.HEADER_WITH_LEAVES):
        total += _line_items_sum(section, index, strict, diagnostics)
    return total


def has_stated_value(section: Section) -> bool:
    return section.total is not None or section.gross_profit is not None


def section_value(
    section: Section,
    index: int,
    *,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> float:
    """
    Figure shown for a section at one column: stated total, then gross profit, then reconstruction.
    """

    for stated in (section.total, section.gross_profit):
        if stated is not None:
            return value_at(
                stated.values,
                index,
                strict=strict,
                owner=f"{section.id}.{stated.name}",
                section_id=section.id,
                diagnostics=diagnostics,
            )
    return aggregate(section, index, strict=strict, diagnostics=diagnostics)


def section_values(
    section: Section,
    column_count: int,
    *,
    strict: bool = True,
    diagnostics: Optional[DiagnosticsLog] = None,
) -> List[float]:
    if not has_stated_value(section):
        logger.debug("Reconstructing values for section '%s' from line items", section.id)
    return [
        section_value(section, index, strict=strict, diagnostics=diagnostics)
        for index in range(column_count)
    ]


def pct_change(current: float, previous: float) -> float:
    """
    Percentage change from `previous` to `current`.

    A zero baseline reports 0 when nothing changed and a flat +100 otherwise.
    """

    if previous == 0:
        return 0.0 if current == 0 else 100.0
    return (current - previous) / abs(previous) * 100.0


def find_section(document: ReportDocument, section_id: str) -> Optional[Section]:
    """
    First section (depth-first, document order) carrying `section_id`.
    """

    for section in document.iter_sections():
        if section.id == section_id:
            return section
    return None


def _category_from_text(section: Section) -> Optional[SectionCategory]:
    haystack = f"{section.id} {section.name}".lower()
    if any(marker in haystack for marker in _EXPENSE_MARKERS):
        return SectionCategory.EXPENSE
    if any(marker in haystack for marker in _INCOME_MARKERS):
        return SectionCategory.INCOME
    return None


def resolve_category(section: Section, inherited: Optional[SectionCategory] = None) -> SectionCategory:
    """
    Classify a section as income, expense or other.

    The explicit `category` field wins. Without it the id/name are matched against cost and
    expense markers, then the parent's category applies.
    """

    if section.category is not None:
        return section.category
    guessed = _category_from_text(section)
    if guessed is not None:
        logger.debug("Section '%s' has no category; inferred %s from its id/name", section.id, guessed.value)
        return guessed
    return inherited or SectionCategory.OTHER


__all__ = [
    "aggregate",
    "descendant_total",
    "find_section",
    "has_stated_value",
    "pct_change",
    "resolve_category",
    "section_value",
    "section_values",
    "value_at",
]
