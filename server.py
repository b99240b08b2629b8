"""Entry point for the search HTTP service."""

from __future__ import annotations

import json
import logging
import threading
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any, Callable
from urllib.parse import parse_qs, urlparse

from config_loader import load_config
from indexer import Indexer
from search_engine import (
    DocumentNotFoundError,
    DocumentStatus,
    SearchServer,
    SearchServerError,
)

LOGGER = logging.getLogger("search_server")

API_PREFIX = "/api/v1"


class SearchRequestHandler(BaseHTTPRequestHandler):
    """HTTP handler exposing health, search, match and document endpoints."""

    engine: SearchServer
    logger: logging.Logger
    # The engine has no internal locking; every call goes through this lock.
    engine_lock = threading.Lock()

    def do_GET(self) -> None:
        parsed = urlparse(self.path)
        path = _strip_prefix(parsed.path)
        params = parse_qs(parsed.query)

        if path == "/health":
            self._send_json(HTTPStatus.OK, {"status": "ok"})
        elif path == "/search":
            self._handle_search(params)
        elif path == "/match":
            self._handle_match(params)
        elif path == "/documents":
            self._handle_list_documents()
        else:
            self._send_json(
                HTTPStatus.NOT_FOUND,
                {"error": "Not found", "message": "Use GET /search?q=<text>"},
            )

    def do_POST(self) -> None:
        path = _strip_prefix(urlparse(self.path).path)
        if path != "/documents":
            self._send_json(
                HTTPStatus.NOT_FOUND,
                {"error": "Not found", "message": "Use POST /documents"},
            )
            return

        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            length = -1
        if length < 0:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid Content-Length header"})
            return

        try:
            payload = json.loads(self.rfile.read(length) or b"{}")
        except json.JSONDecodeError:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Request body must be JSON"})
            return
        if not isinstance(payload, dict):
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Request body must be a JSON object"})
            return

        try:
            document_id, text, status, ratings = _parse_new_document(payload)
        except ValueError as exc:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
            return

        added = self._call_engine(
            lambda engine: engine.add_document(document_id, text, status, ratings),
            context=f"add document {document_id}",
        )
        if added is _FAILED:
            return
        self._send_json(HTTPStatus.CREATED, {"id": document_id, "status": status.value})

    def _handle_search(self, params: dict[str, list[str]]) -> None:
        query = (params.get("q") or [""])[0].strip(" ")
        if not query:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Missing query parameter 'q'"})
            return

        status_raw = (params.get("status") or [DocumentStatus.ACTUAL.value])[0]
        try:
            status = DocumentStatus.from_name(status_raw)
        except ValueError as exc:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
            return

        results = self._call_engine(
            lambda engine: engine.find_top_documents(query, status),
            context=f"search query: {query}",
        )
        if results is _FAILED:
            return

        items = [
            {"id": item.id, "relevance": item.relevance, "rating": item.rating}
            for item in results
        ]
        self._send_json(HTTPStatus.OK, {"query": query, "total": len(items), "items": items})

    def _handle_match(self, params: dict[str, list[str]]) -> None:
        query = (params.get("q") or [""])[0].strip(" ")
        if not query:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Missing query parameter 'q'"})
            return

        id_raw = (params.get("id") or [""])[0].strip()
        try:
            document_id = int(id_raw)
        except ValueError:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Invalid query parameter 'id'"})
            return

        matched = self._call_engine(
            lambda engine: engine.match_document(query, document_id),
            context=f"match query: {query}",
        )
        if matched is _FAILED:
            return

        words, status = matched
        self._send_json(
            HTTPStatus.OK,
            {"id": document_id, "status": status.value, "words": words},
        )

    def _handle_list_documents(self) -> None:
        with self.engine_lock:
            count = self.engine.get_document_count()
            ids = [self.engine.get_document_id(index) for index in range(count)]
        self._send_json(HTTPStatus.OK, {"total": count, "ids": ids})

    def _call_engine(self, call: Callable[[SearchServer], Any], context: str) -> Any:
        try:
            with self.engine_lock:
                return call(self.engine)
        except DocumentNotFoundError as exc:
            self._send_json(HTTPStatus.NOT_FOUND, {"error": str(exc)})
        except SearchServerError as exc:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": str(exc)})
        except Exception as exc:
            self.logger.exception("Request failed (%s)", context)
            self._send_json(
                HTTPStatus.INTERNAL_SERVER_ERROR,
                {"error": "internal server error", "details": str(exc)},
            )
        return _FAILED

    def _send_json(self, status: HTTPStatus, payload: dict[str, object]) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self.send_response(status.value)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: object) -> None:
        self.logger.info("%s - %s", self.client_address[0], format % args)


_FAILED = object()


def _strip_prefix(path: str) -> str:
    if path.startswith(API_PREFIX + "/"):
        return path[len(API_PREFIX):]
    return path


def _parse_new_document(payload: dict[str, Any]) -> tuple[int, str, DocumentStatus, list[int]]:
    document_id = payload.get("id")
    if not isinstance(document_id, int) or isinstance(document_id, bool):
        raise ValueError("'id' must be an integer")

    text = payload.get("text")
    if not isinstance(text, str):
        raise ValueError("'text' must be a string")

    status_raw = payload.get("status", DocumentStatus.ACTUAL.value)
    if not isinstance(status_raw, str):
        raise ValueError("'status' must be a string")
    status = DocumentStatus.from_name(status_raw)

    ratings = payload.get("ratings", [])
    if not isinstance(ratings, list) or any(
        not isinstance(rating, int) or isinstance(rating, bool) for rating in ratings
    ):
        raise ValueError("'ratings' must be a list of integers")

    return document_id, text, status, ratings


def main() -> None:
    """Load configuration, build the index, and start HTTP server."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    base_dir = Path(__file__).resolve().parent
    config_path = base_dir / "config.yml"
    config = load_config(config_path)

    indexer = Indexer(
        stop_words=config.stop_words,
        documents=config.documents,
        logger=LOGGER,
    )

    SearchRequestHandler.engine = indexer.build()
    SearchRequestHandler.logger = LOGGER

    server_address = (config.host, config.port)
    httpd = ThreadingHTTPServer(server_address, SearchRequestHandler)

    LOGGER.info("Search service started on http://%s:%d", config.host, config.port)
    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        LOGGER.info("Shutdown signal received")
    finally:
        httpd.server_close()
        LOGGER.info("Server stopped")


if __name__ == "__main__":
    main()
