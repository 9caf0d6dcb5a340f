"""
Typed view of the pre-computed profit & loss report document.

The document is produced upstream and trusted for its accounting content. The only checks applied
here are structural: value arrays must line up with the column list, and sibling ids must be unique
because they key the expansion state.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic.alias_generators import to_camel

from .errors import ErrorType, ReportError

logger = logging.getLogger(__name__)


class ColumnKind(str, Enum):
    ACTUAL = "Actual"
    FORECAST = "Forecast"
    TOTAL = "Total"


class SectionCategory(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    OTHER = "other"


class SectionShape(str, Enum):
    """
    Structural variant of a section, derived from which child collections it carries.
    """

    HEADER = "header"
    LEAF = "leaf"
    HEADER_WITH_LEAVES = "header_with_leaves"
    EMPTY = "empty"


# amounts keep the numeric type they were fetched with
Amount = Union[int, float]


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Company(_WireModel):
    name: str
    report_type: str = ""
    basis: str = ""
    period: str = ""
    actuals_to: str = ""


class Column(_WireModel):
    label: str = Field(validation_alias=AliasChoices("label", "month"), serialization_alias="month")
    kind: str = Field(validation_alias=AliasChoices("kind", "type"), serialization_alias="type")

    @property
    def is_total(self) -> bool:
        return self.kind == ColumnKind.TOTAL.value


class LineItem(_WireModel):
    name: str
    account_id: str
    values: List[Amount]


class DerivedRow(_WireModel):
    name: str
    values: List[Amount]


class SummaryItem(_WireModel):
    name: str
    values: List[Amount]


class Section(_WireModel):
    id: str
    name: str
    level: int = 1
    collapsible: bool = True
    expanded: bool = False
    category: Optional[SectionCategory] = None
    subsections: Optional[List["Section"]] = None
    line_items: Optional[List[LineItem]] = None
    gross_profit: Optional[DerivedRow] = None
    total: Optional[DerivedRow] = None

    @property
    def children(self) -> List["Section"]:
        return list(self.subsections or [])

    @property
    def items(self) -> List[LineItem]:
        return list(self.line_items or [])

    @property
    def shape(self) -> SectionShape:
        has_children = bool(self.subsections)
        has_items = bool(self.line_items)
        if has_children and has_items:
            return SectionShape.HEADER_WITH_LEAVES
        if has_children:
            return SectionShape.HEADER
        if has_items:
            return SectionShape.LEAF
        return SectionShape.EMPTY

    def walk(self) -> Iterator["Section"]:
        """Yield this section and every descendant, depth-first in document order."""
        yield self
        for child in self.children:
            yield from child.walk()


class ReportDocument(_WireModel):
    company: Company
    columns: List[Column]
    sections: List[Section] = Field(default_factory=list)
    summary: List[SummaryItem] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_structure(self) -> "ReportDocument":
        problems = collect_structure_problems(self)
        if problems:
            raise ValueError("; ".join(problems))
        return self

    @property
    def column_labels(self) -> List[str]:
        return [column.label for column in self.columns]

    def iter_sections(self) -> Iterator[Section]:
        for section in self.sections:
            yield from section.walk()

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def collect_structure_problems(document: ReportDocument) -> List[str]:
    """
    Return human-readable descriptions of every structural violation in the document.
    """

    expected = len(document.columns)
    problems: List[str] = []

    def _check_values(path: str, values: List[float]) -> None:
        if len(values) != expected:
            problems.append(f"{path}: expected {expected} values, found {len(values)}")

    def _check_siblings(path: str, sections: List[Section]) -> None:
        seen: set[str] = set()
        for section in sections:
            if section.id in seen:
                problems.append(f"{path}: duplicate section id '{section.id}'")
            seen.add(section.id)

    def _check_section(path: str, section: Section) -> None:
        here = f"{path}/{section.id}"
        if section.level < 1:
            problems.append(f"{here}: level must be >= 1, found {section.level}")
        for item in section.items:
            _check_values(f"{here}/lineItems/{item.account_id}", item.values)
        if section.gross_profit is not None:
            _check_values(f"{here}/grossProfit", section.gross_profit.values)
        if section.total is not None:
            _check_values(f"{here}/total", section.total.values)
        _check_siblings(here, section.children)
        for child in section.children:
            _check_section(here, child)

    _check_siblings("sections", document.sections)
    for section in document.sections:
        _check_section("sections", section)
    for item in document.summary:
        _check_values(f"summary/{item.name}", item.values)
    return problems


def parse_report_document(payload: Mapping[str, Any]) -> ReportDocument:
    """
    Validate a fetched payload and return the immutable document.

    Raises ReportError(INVALID_DOCUMENT) describing every problem found.
    """

    try:
        document = ReportDocument.model_validate(payload)
    except ValidationError as exc:
        errors = [
            f"{'.'.join(str(part) for part in error['loc']) or 'document'}: {error['msg']}"
            for error in exc.errors()
        ]
        logger.warning("Rejected report document with %s problem(s)", len(errors))
        raise ReportError(
            ErrorType.INVALID_DOCUMENT,
            "The report document is malformed and cannot be displayed.",
            {"errors": errors},
        ) from exc

    logger.info(
        "Report document accepted: %s sections, %s columns, %s summary rows",
        len(document.sections),
        len(document.columns),
        len(document.summary),
    )
    return document


__all__ = [
    "ColumnKind",
    "Column",
    "Company",
    "DerivedRow",
    "LineItem",
    "ReportDocument",
    "Section",
    "SectionCategory",
    "SectionShape",
    "SummaryItem",
    "collect_structure_problems",
    "parse_report_document",
]
