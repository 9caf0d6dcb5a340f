import csv
import io
import json

from pnl_report.report.exporter import (
    CSV_FILENAME,
    JSON_FILENAME,
    csv_export_file,
    csv_records,
    export_csv,
    export_json,
    json_export_file,
)
from pnl_report.report.models import parse_report_document


def _parse(text):
    return list(csv.reader(io.StringIO(text)))


def test_csv_header_has_account_plus_columns(sample_document):
    rows = _parse(export_csv(sample_document))
    assert rows[0] == ["Account", "Jan-25", "Feb-25", "Mar-25", "Total"]
    assert len(rows[0]) == len(sample_document.columns) + 1


def test_csv_row_count(sample_document):
    rows = _parse(export_csv(sample_document))
    sections = list(sample_document.iter_sections())
    line_items = sum(len(section.items) for section in sections)
    assert len(rows) == 1 + len(sections) + line_items + len(sample_document.summary)
    assert len(rows) == 20


def test_csv_rows_follow_document_order(sample_document):
    rows = _parse(export_csv(sample_document))
    labels = [row[0] for row in rows[1:]]
    assert labels[:5] == ["Income", "  Sales", "    Product Sales", "    Service Revenue", "Cost of Sales"]
    assert labels[-2:] == ["Operating Surplus", "Net Profit"]
    assert "      Wages and Salaries" in labels


def test_csv_values_and_empty_cells(sample_document):
    rows = {row[0].strip(): row for row in _parse(export_csv(sample_document))[1:]}
    assert rows["Income"][1:] == ["14000", "15500", "15500", "45000"]
    assert rows["Operating Expenses"][1:] == ["", "", "", ""]
    assert rows["Sales"][1:] == ["", "", "", ""]
    assert rows["Freight Inwards"][1:] == ["500", "0", "450", "950"]
    assert rows["Net Profit"][1:] == ["2980", "4160", "4020", "11160"]


def test_csv_quotes_account_names(build_document):
    document = build_document(
        [
            {
                "id": "opex",
                "name": "Light, Power, Heating",
                "total": {"name": "Total", "values": [1.5, 2, 3.5]},
            }
        ]
    )
    text = export_csv(document)
    assert '"Light, Power, Heating",1.5,2,3.5' in text.splitlines()
    assert csv_records(document)[1] == ["Light, Power, Heating", 1.5, 2, 3.5]


def test_json_export_round_trips_wire_names(sample_document):
    payload = json.loads(export_json(sample_document))
    assert payload["company"]["name"] == "Demo Company (AU)"
    assert payload["columns"][3] == {"month": "Total", "type": "Total"}
    assert "\n  " in export_json(sample_document)


def test_export_files(sample_document):
    csv_file = csv_export_file(sample_document)
    json_file = json_export_file(sample_document)
    assert (csv_file.filename, csv_file.mime_type) == (CSV_FILENAME, "text/csv")
    assert (json_file.filename, json_file.mime_type) == (JSON_FILENAME, "application/json")
    assert csv_file.data.decode("utf-8").startswith('"Account"')


def test_export_json_mirrors_fetched_document(build_payload):
    payload = build_payload(
        [
            {
                "id": "income",
                "name": "Income",
                "source": "ledger",
                "total": {"name": "Total Income", "values": [14000, 15500.25, 29500.25]},
            }
        ]
    )
    payload["company"]["currency"] = "AUD"
    document = parse_report_document(payload)

    text = export_json(document)
    assert "14000.0" not in text
    exported = json.loads(text)
    section = exported["sections"][0]
    assert section["total"]["values"] == [14000, 15500.25, 29500.25]
    assert isinstance(section["total"]["values"][0], int)
    assert section["source"] == "ledger"
    assert exported["company"]["currency"] == "AUD"
