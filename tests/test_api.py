import csv
import io
import json

import pytest
from fastapi.testclient import TestClient

from pnl_report.api import main as api_main
from pnl_report.commentary import CommentaryService


@pytest.fixture
def api_client(monkeypatch):
    with TestClient(api_main.app) as client:
        monkeypatch.setattr(api_main, "commentary_service", CommentaryService(enable_llm=False))
        yield client


def _token(client: TestClient) -> str:
    return client.get("/api/session").json()["csrf_token"]


def test_health_reports_loaded_document(api_client):
    payload = api_client.get("/health").json()
    assert payload["status"] == "ok"
    assert payload["report"]["sections"] == 8
    assert payload["report"]["line_items"] == 9
    assert payload["report"]["columns"] == ["Jan-25", "Feb-25", "Mar-25", "Total"]
    assert payload["report"]["summary_rows"] == ["Operating Surplus", "Net Profit"]


def test_report_endpoint_serves_wire_document(api_client):
    response = api_client.get("/api/profit-loss")
    assert response.status_code == 200
    payload = response.json()
    assert payload["columns"][0] == {"month": "Jan-25", "type": "Actual"}
    assert payload["sections"][0]["subsections"][0]["lineItems"][0]["accountId"] == "200"
    assert payload["summary"][-1]["name"] == "Net Profit"


def test_commentary_requires_csrf_token(api_client):
    response = api_client.post("/api/profit-loss/commentary", json={"prompt": "Summarise"})
    assert response.status_code == 419

    response = api_client.post(
        "/api/profit-loss/commentary",
        json={"prompt": "Summarise"},
        headers={"X-CSRF-TOKEN": "wrong"},
    )
    assert response.status_code == 419


def test_commentary_with_token(api_client):
    response = api_client.post(
        "/api/profit-loss/commentary",
        json={"prompt": "Summarise the quarter"},
        headers={"X-CSRF-TOKEN": _token(api_client)},
    )
    assert response.status_code == 200
    body = response.json()
    assert "Net Profit (Total): $11,160." in body["response"]
    assert any("Commentary generated" in line for line in body["logs"])


def test_commentary_uses_supplied_report(api_client, build_payload):
    report = build_payload(
        [{"id": "income", "name": "Income", "total": {"name": "Total Income", "values": [1, 2, 3]}}],
        summary=[{"name": "Net Profit", "values": [1, 2, 3]}],
    )
    response = api_client.post(
        "/api/profit-loss/commentary",
        json={"prompt": "Summarise", "report": report},
        headers={"X-CSRF-TOKEN": _token(api_client)},
    )
    assert response.status_code == 200
    assert "Test Co" in response.json()["response"]


def test_commentary_rejects_malformed_report(api_client, build_payload):
    report = build_payload([{"id": "income", "name": "Income", "total": {"name": "Total", "values": [1]}}])
    response = api_client.post(
        "/api/profit-loss/commentary",
        json={"prompt": "Summarise", "report": report},
        headers={"X-CSRF-TOKEN": _token(api_client)},
    )
    assert response.status_code == 422
    assert response.json()["detail"]["error_type"] == "invalid_document"


def test_commentary_blank_prompt(api_client):
    headers = {"X-CSRF-TOKEN": _token(api_client)}
    assert api_client.post("/api/profit-loss/commentary", json={"prompt": ""}, headers=headers).status_code == 422
    assert api_client.post("/api/profit-loss/commentary", json={"prompt": "  "}, headers=headers).status_code == 422


def test_export_csv(api_client):
    response = api_client.get("/api/profit-loss/export", params={"format": "csv"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="profit-loss-report.csv"' in response.headers["content-disposition"]
    rows = list(csv.reader(io.StringIO(response.text)))
    assert rows[0] == ["Account", "Jan-25", "Feb-25", "Mar-25", "Total"]


def test_export_json(api_client):
    response = api_client.get("/api/profit-loss/export", params={"format": "json"})
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    assert 'filename="profit-loss-report.json"' in response.headers["content-disposition"]
    assert json.loads(response.text)["company"]["name"] == "Demo Company (AU)"


def test_export_unknown_format(api_client):
    assert api_client.get("/api/profit-loss/export", params={"format": "xlsx"}).status_code == 422
