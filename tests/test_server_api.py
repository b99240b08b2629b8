"""Integration tests for the HTTP API contract using requests."""

from __future__ import annotations

import socket
import threading
from http.server import ThreadingHTTPServer
from urllib.parse import urlparse

import pytest

requests = pytest.importorskip("requests")

from search_engine import DocumentStatus, SearchServer
from server import SearchRequestHandler


class DummyLogger:
    def info(self, _msg: str, *_args: object) -> None:
        return None

    def exception(self, _msg: str, *_args: object) -> None:
        return None


@pytest.fixture()
def api_base_url() -> str:
    engine = SearchServer("и в на")
    engine.add_document(0, "белый кот и модный ошейник", DocumentStatus.ACTUAL, [8, -3])
    engine.add_document(1, "пушистый кот пушистый хвост", DocumentStatus.ACTUAL, [7, 2, 7])
    engine.add_document(2, "ухоженный пёс выразительные глаза", DocumentStatus.ACTUAL, [5, -12, 2, 1])
    engine.add_document(3, "ухоженный скворец евгений", DocumentStatus.BANNED, [9])

    SearchRequestHandler.engine = engine
    SearchRequestHandler.logger = DummyLogger()

    server = ThreadingHTTPServer(("127.0.0.1", 0), SearchRequestHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address

    try:
        yield f"http://{host}:{port}/api/v1"
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=3)


def test_health_endpoint_returns_ok_status(api_base_url: str) -> None:
    """Health endpoint should return service status."""
    response = requests.get(f"{api_base_url}/health", timeout=3)

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_search_endpoint_returns_ranked_documents(api_base_url: str) -> None:
    """Search endpoint should return ranked document matches."""
    response = requests.get(
        f"{api_base_url}/search",
        params={"q": "пушистый ухоженный кот"},
        timeout=3,
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["query"] == "пушистый ухоженный кот"
    assert payload["total"] == 3
    assert [item["id"] for item in payload["items"]] == [1, 0, 2]
    assert [item["rating"] for item in payload["items"]] == [5, 2, -1]


def test_search_endpoint_filters_by_status(api_base_url: str) -> None:
    response = requests.get(
        f"{api_base_url}/search",
        params={"q": "ухоженный", "status": "banned"},
        timeout=3,
    )

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [3]


def test_search_endpoint_rejects_malformed_query(api_base_url: str) -> None:
    """Malformed minus words must not produce partial results."""
    response = requests.get(f"{api_base_url}/search", params={"q": "--кот"}, timeout=3)

    assert response.status_code == 400
    assert "items" not in response.json()


def test_search_endpoint_requires_query(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/search", timeout=3)

    assert response.status_code == 400


def test_search_endpoint_rejects_unknown_status(api_base_url: str) -> None:
    response = requests.get(
        f"{api_base_url}/search",
        params={"q": "кот", "status": "deleted"},
        timeout=3,
    )

    assert response.status_code == 400


def test_match_endpoint_reports_words(api_base_url: str) -> None:
    response = requests.get(
        f"{api_base_url}/match",
        params={"q": "пушистый кот -ошейник", "id": 1},
        timeout=3,
    )

    assert response.status_code == 200
    assert response.json() == {"id": 1, "status": "actual", "words": ["кот", "пушистый"]}


def test_match_endpoint_unknown_document_returns_404(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/match", params={"q": "кот", "id": 42}, timeout=3)

    assert response.status_code == 404


def test_match_endpoint_invalid_id_returns_400(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/match", params={"q": "кот", "id": "x"}, timeout=3)

    assert response.status_code == 400


def test_add_document_then_list_documents(api_base_url: str) -> None:
    response = requests.post(
        f"{api_base_url}/documents",
        json={"id": 9, "text": "пушистый пёс", "status": "actual", "ratings": [4, 5]},
        timeout=3,
    )
    assert response.status_code == 201

    listing = requests.get(f"{api_base_url}/documents", timeout=3).json()
    assert listing == {"total": 5, "ids": [0, 1, 2, 3, 9]}


def test_add_duplicate_document_returns_400(api_base_url: str) -> None:
    response = requests.post(
        f"{api_base_url}/documents",
        json={"id": 1, "text": "пёс"},
        timeout=3,
    )

    assert response.status_code == 400
    assert requests.get(f"{api_base_url}/documents", timeout=3).json()["total"] == 4


def test_unknown_path_returns_404(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/unknown", timeout=3)

    assert response.status_code == 404


def _post_with_content_length(api_base_url: str, content_length: str) -> bytes:
    parsed = urlparse(api_base_url)
    request = (
        f"POST {parsed.path}/documents HTTP/1.1\r\n"
        f"Host: {parsed.hostname}\r\n"
        f"Content-Length: {content_length}\r\n"
        "Connection: close\r\n"
        "\r\n"
    ).encode("ascii")

    with socket.create_connection((parsed.hostname, parsed.port), timeout=3) as conn:
        conn.sendall(request)
        chunks: list[bytes] = []
        while True:
            chunk = conn.recv(4096)
            if not chunk:
                break
            chunks.append(chunk)
    return b"".join(chunks)


@pytest.mark.parametrize("content_length", ["abc", "-1"])
def test_add_document_rejects_bad_content_length(api_base_url: str, content_length: str) -> None:
    response = _post_with_content_length(api_base_url, content_length)

    assert response.startswith(b"HTTP/1.0 400")
    assert b"Invalid Content-Length header" in response
    assert requests.get(f"{api_base_url}/documents", timeout=3).json()["total"] == 4


def test_search_endpoint_rejects_control_characters_in_query(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/search", params={"q": "кот\n"}, timeout=3)

    assert response.status_code == 400
    assert "items" not in response.json()


def test_search_endpoint_ignores_surrounding_spaces(api_base_url: str) -> None:
    response = requests.get(f"{api_base_url}/search", params={"q": "  кот -ошейник "}, timeout=3)

    assert response.status_code == 200
    assert [item["id"] for item in response.json()["items"]] == [1]
