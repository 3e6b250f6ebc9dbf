from __future__ import annotations

import json
import logging

import httpx
import pytest

from scatterview.errors import LoadError
from scatterview.loader import fetch_dataset, validate_payload

URL = "https://example.org/books/npr-2015.json"
ROWS = [{"ASIN": "1", "title": "T", "authors": ["A"], "url": "u", "pages": 10, "sales_rank": 100}]


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_fetch_dataset_reads_json_over_http(caplog) -> None:
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json=ROWS)

    with caplog.at_level(logging.INFO, logger="scatterview.loader"):
        rows = fetch_dataset(URL, client=_client(handler))

    assert rows == ROWS
    assert seen == [URL]
    assert "fetched 1 rows" in caplog.text


def test_http_error_status_becomes_load_error() -> None:
    client = _client(lambda request: httpx.Response(404, text="nope"))
    with pytest.raises(LoadError, match="HTTP 404") as info:
        fetch_dataset(URL, client=client)
    assert info.value.source == URL


def test_transport_failure_becomes_load_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(LoadError, match="request failed"):
        fetch_dataset(URL, client=_client(handler))


def test_invalid_json_becomes_load_error() -> None:
    client = _client(lambda request: httpx.Response(200, text="{not json"))
    with pytest.raises(LoadError, match="not valid JSON"):
        fetch_dataset(URL, client=client)


def test_fetch_dataset_reads_local_file(tmp_path) -> None:
    path = tmp_path / "books.json"
    path.write_text(json.dumps(ROWS), encoding="utf-8")
    assert fetch_dataset(path) == ROWS
    assert fetch_dataset(str(path)) == ROWS


def test_missing_file_becomes_load_error(tmp_path) -> None:
    with pytest.raises(LoadError, match="Could not read"):
        fetch_dataset(tmp_path / "missing.json")


def test_non_utf8_file_becomes_load_error(tmp_path) -> None:
    path = tmp_path / "latin.json"
    path.write_bytes(b"[\xff\xfe]")
    with pytest.raises(LoadError, match="not valid UTF-8"):
        fetch_dataset(path)


@pytest.mark.parametrize("payload", [{"rows": []}, "text", [1, 2], [{"a": 1}, None]])
def test_payload_must_be_an_array_of_objects(payload) -> None:
    with pytest.raises(LoadError):
        validate_payload(payload, source="x.json")


def test_empty_array_is_a_valid_payload() -> None:
    assert validate_payload([]) == []
