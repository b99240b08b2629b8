"""Builds a search server from configured document sources."""

from __future__ import annotations

import logging
from typing import Iterable

from config_loader import DocumentSource
from pdf_reader import extract_pdf_text
from search_engine import SearchServer, SearchServerError
from tokenizer import StopWords


class Indexer:
    """Creates the search server and indexes every readable, valid document."""

    def __init__(
        self,
        stop_words: str | Iterable[str],
        documents: list[DocumentSource],
        logger: logging.Logger,
    ) -> None:
        self._stop_words = StopWords.from_source(stop_words)
        self._documents = documents
        self._logger = logger

    def build(self) -> SearchServer:
        """Index configured documents, skipping the ones that cannot be added."""
        server = SearchServer(self._stop_words)
        self._logger.info(
            "Indexing %d documents with %d stop words",
            len(self._documents),
            len(self._stop_words),
        )

        skipped = 0
        for source in self._documents:
            if not self._add_document(server, source):
                skipped += 1

        self._logger.info(
            "Prepared search server with %d documents (skipped=%d)",
            server.get_document_count(),
            skipped,
        )
        return server

    def _add_document(self, server: SearchServer, source: DocumentSource) -> bool:
        text = self._read_text(source)
        if text is None:
            return False

        try:
            server.add_document(source.id, text, source.status, source.ratings)
        except SearchServerError as exc:
            self._logger.warning("Skipping document %d: %s", source.id, exc)
            return False

        self._logger.debug("Indexed document %d (%s)", source.id, source.status.value)
        return True

    def _read_text(self, source: DocumentSource) -> str | None:
        if source.text is not None:
            return source.text
        if source.pdf is None:
            self._logger.warning("Document %d has no text source", source.id)
            return None
        if not source.pdf.is_file():
            self._logger.warning("PDF for document %d does not exist: %s", source.id, source.pdf)
            return None
        return extract_pdf_text(source.pdf, self._logger)
