"""
Per-section expand/collapse state owned by one view session.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

from .models import ReportDocument

logger = logging.getLogger(__name__)


class ExpansionStatus(str, Enum):
    COLLAPSED = "collapsed"
    EXPANDED = "expanded"

    def flipped(self) -> "ExpansionStatus":
        if self is ExpansionStatus.EXPANDED:
            return ExpansionStatus.COLLAPSED
        return ExpansionStatus.EXPANDED


class ExpansionState:
    """
    Explicit map from section id to its expansion status.

    Every known id is seeded once when the document loads; looking up an id that was never seeded
    is an error rather than an implicit "collapsed".
    """

    def __init__(self, statuses: Optional[Mapping[str, ExpansionStatus]] = None) -> None:
        self._statuses: Dict[str, ExpansionStatus] = dict(statuses or {})

    @classmethod
    def from_document(cls, document: ReportDocument) -> "ExpansionState":
        statuses: Dict[str, ExpansionStatus] = {}
        for section in document.iter_sections():
            if section.id in statuses:
                logger.debug("Section id '%s' appears more than once; keeping first seed", section.id)
                continue
            statuses[section.id] = ExpansionStatus.EXPANDED if section.expanded else ExpansionStatus.COLLAPSED
        logger.info("Seeded expansion state for %s sections", len(statuses))
        return cls(statuses)

    @classmethod
    def from_ids(cls, known: Iterable[str], expanded: Iterable[str] = ()) -> "ExpansionState":
        opened = set(expanded)
        return cls(
            {
                section_id: ExpansionStatus.EXPANDED if section_id in opened else ExpansionStatus.COLLAPSED
                for section_id in known
            }
        )

    def __contains__(self, section_id: object) -> bool:
        return section_id in self._statuses

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ExpansionState):
            return NotImplemented
        return self._statuses == other._statuses

    def __repr__(self) -> str:
        return f"ExpansionState(expanded={sorted(self.expanded_ids)!r})"

    def status(self, section_id: str) -> ExpansionStatus:
        try:
            return self._statuses[section_id]
        except KeyError:
            raise KeyError(f"Unknown section id '{section_id}'") from None

    def is_expanded(self, section_id: str) -> bool:
        return self.status(section_id) is ExpansionStatus.EXPANDED

    def toggle(self, section_id: str) -> ExpansionStatus:
        updated = self.status(section_id).flipped()
        self._statuses[section_id] = updated
        logger.debug("Section '%s' is now %s", section_id, updated.value)
        return updated

    def expand_all(self) -> None:
        for section_id in self._statuses:
            self._statuses[section_id] = ExpansionStatus.EXPANDED

    def collapse_all(self) -> None:
        for section_id in self._statuses:
            self._statuses[section_id] = ExpansionStatus.COLLAPSED

    @property
    def expanded_ids(self) -> FrozenSet[str]:
        return frozenset(
            section_id for section_id, status in self._statuses.items() if status is ExpansionStatus.EXPANDED
        )

    def copy(self) -> "ExpansionState":
        return ExpansionState(self._statuses)


__all__ = ["ExpansionState", "ExpansionStatus"]
