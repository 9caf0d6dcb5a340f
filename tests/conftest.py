from typing import Any, Dict, List, Optional

import pytest

from pnl_report.config import REPORT_DATA_PATH
from pnl_report.data_layer import load_report_payload
from pnl_report.report.models import ReportDocument, parse_report_document


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    return load_report_payload(REPORT_DATA_PATH)


@pytest.fixture
def sample_document(sample_payload) -> ReportDocument:
    return parse_report_document(sample_payload)


def _payload(
    sections: List[Dict[str, Any]],
    *,
    columns: int = 3,
    summary: Optional[List[Dict[str, Any]]] = None,
) -> Dict[str, Any]:
    labels = [f"M{index + 1}" for index in range(columns - 1)] + ["Total"]
    kinds = ["Actual"] * (columns - 1) + ["Total"]
    return {
        "company": {"name": "Test Co", "reportType": "Profit and Loss", "period": "Q1"},
        "columns": [{"label": label, "kind": kind} for label, kind in zip(labels, kinds)],
        "sections": sections,
        "summary": summary or [],
    }


@pytest.fixture
def build_payload():
    return _payload


@pytest.fixture
def build_document():
    def _build(sections, **kwargs) -> ReportDocument:
        return parse_report_document(_payload(sections, **kwargs))

    return _build
