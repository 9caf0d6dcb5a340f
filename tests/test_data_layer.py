import json

import pytest

from pnl_report.data_layer import load_report, load_report_payload, summarize_report
from pnl_report.report.errors import ErrorType, ReportError


def test_load_report_from_default_path():
    document = load_report(refresh=True)
    assert document.company.name == "Demo Company (AU)"
    assert len(document.sections) == 3


def test_payload_copies_are_independent():
    first = load_report_payload()
    first["company"]["name"] = "Changed"
    assert load_report_payload()["company"]["name"] == "Demo Company (AU)"


def test_summarize_report(sample_document):
    summary = summarize_report(sample_document)
    assert summary["sections"] == 8
    assert summary["line_items"] == 9
    assert summary["summary_rows"] == ["Operating Surplus", "Net Profit"]


def test_load_report_rejects_malformed_file(tmp_path, sample_payload):
    sample_payload["columns"].pop()
    path = tmp_path / "report.json"
    path.write_text(json.dumps(sample_payload))
    with pytest.raises(ReportError) as excinfo:
        load_report(path)
    assert excinfo.value.error_type is ErrorType.INVALID_DOCUMENT


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_report(tmp_path / "missing.json")
