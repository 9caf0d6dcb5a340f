import json

import httpx
import pytest

from pnl_report.client import COMMENTARY_PATH, CSRF_HEADER, REPORT_PATH, SESSION_PATH, ReportClient
from pnl_report.report.errors import ErrorType, ReportError


def _client(handler) -> ReportClient:
    return ReportClient("http://testserver", transport=httpx.MockTransport(handler))


def test_fetch_report_parses_document(sample_payload):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=sample_payload)

    document = _client(handler).fetch_report()
    assert document.company.name == "Demo Company (AU)"
    assert seen[0].method == "GET"
    assert seen[0].url.path == REPORT_PATH


def test_fetch_report_non_success_status():
    client = _client(lambda request: httpx.Response(500, text="boom"))
    with pytest.raises(ReportError) as excinfo:
        client.fetch_report()
    assert excinfo.value.error_type is ErrorType.FETCH_FAILURE
    assert excinfo.value.details == {"status_code": 500}


def test_fetch_report_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ReportError) as excinfo:
        _client(handler).fetch_report()
    assert excinfo.value.error_type is ErrorType.FETCH_FAILURE


def test_fetch_report_non_json_body():
    client = _client(lambda request: httpx.Response(200, text="<html>login</html>"))
    with pytest.raises(ReportError) as excinfo:
        client.fetch_report()
    assert excinfo.value.error_type is ErrorType.FETCH_FAILURE


def test_fetch_report_rejects_malformed_document(sample_payload):
    sample_payload["summary"][0]["values"] = [1, 2]
    client = _client(lambda request: httpx.Response(200, json=sample_payload))
    with pytest.raises(ReportError) as excinfo:
        client.fetch_report()
    assert excinfo.value.error_type is ErrorType.INVALID_DOCUMENT


def test_request_commentary_sends_token_and_context(sample_document):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"response": "Income is up."})

    text = _client(handler).request_commentary("How is income?", "token-123", sample_document)
    assert text == "Income is up."
    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == COMMENTARY_PATH
    assert request.headers[CSRF_HEADER] == "token-123"
    body = json.loads(request.content)
    assert body["prompt"] == "How is income?"
    assert body["report"]["company"]["name"] == "Demo Company (AU)"


def test_request_commentary_failure():
    client = _client(lambda request: httpx.Response(419, json={"detail": "CSRF token mismatch."}))
    with pytest.raises(ReportError) as excinfo:
        client.request_commentary("Hello", "bad")
    assert excinfo.value.error_type is ErrorType.COMMENTARY_FAILURE
    assert excinfo.value.details == {"status_code": 419}


def test_fetch_csrf_token():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == SESSION_PATH
        return httpx.Response(200, json={"csrf_token": "abc"})

    assert _client(handler).fetch_csrf_token() == "abc"
