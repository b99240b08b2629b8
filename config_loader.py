"""Configuration loading utilities for the search server."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from search_engine import DocumentStatus
from tokenizer import split_into_words


@dataclass(frozen=True)
class DocumentSource:
    """Document to index at startup, given inline or as a PDF file."""

    id: int
    status: DocumentStatus = DocumentStatus.ACTUAL
    ratings: tuple[int, ...] = ()
    text: str | None = None
    pdf: Path | None = None


@dataclass(frozen=True)
class AppConfig:
    """Application configuration loaded from YAML."""

    stop_words: tuple[str, ...] = ()
    documents: list[DocumentSource] = field(default_factory=list)
    host: str = "127.0.0.1"
    port: int = 8000


def load_config(config_path: Path) -> AppConfig:
    """Load and validate configuration from a YAML file."""
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as file:
        raw: dict[str, Any] = yaml.safe_load(file) or {}

    stop_words = _parse_stop_words(raw.get("stop_words") or ())

    documents_raw = raw.get("documents") or []
    if not isinstance(documents_raw, list):
        raise ValueError("'documents' must be a list in config.yml")
    documents = [_parse_document(value, config_path.parent) for value in documents_raw]

    host = raw.get("host", "127.0.0.1")
    port = raw.get("port", 8000)

    if not isinstance(host, str) or not host:
        raise ValueError("'host' must be a non-empty string")
    if not isinstance(port, int) or isinstance(port, bool) or not (1 <= port <= 65535):
        raise ValueError("'port' must be an integer between 1 and 65535")

    return AppConfig(
        stop_words=stop_words,
        documents=documents,
        host=host,
        port=port,
    )


def _parse_stop_words(value: Any) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(split_into_words(value))
    if not isinstance(value, (list, tuple)):
        raise ValueError("'stop_words' must be a string or a list of strings")
    for word in value:
        if not isinstance(word, str):
            raise ValueError("Each entry in 'stop_words' must be a string")
    return tuple(value)


def _parse_document(value: Any, base_dir: Path) -> DocumentSource:
    if not isinstance(value, dict):
        raise ValueError("Each entry in 'documents' must be a mapping")

    document_id = value.get("id")
    if not isinstance(document_id, int) or isinstance(document_id, bool):
        raise ValueError("Each document needs an integer 'id'")

    text = value.get("text")
    pdf_raw = value.get("pdf")
    if (text is None) == (pdf_raw is None):
        raise ValueError(f"Document {document_id} must define exactly one of 'text' or 'pdf'")
    if text is not None and not isinstance(text, str):
        raise ValueError(f"Document {document_id}: 'text' must be a string")

    pdf: Path | None = None
    if pdf_raw is not None:
        if not isinstance(pdf_raw, str) or not pdf_raw.strip():
            raise ValueError(f"Document {document_id}: 'pdf' must be a non-empty string")
        pdf = Path(pdf_raw)
        if not pdf.is_absolute():
            pdf = (base_dir / pdf).resolve()

    status_raw = value.get("status", DocumentStatus.ACTUAL.value)
    if not isinstance(status_raw, str):
        raise ValueError(f"Document {document_id}: 'status' must be a string")
    status = DocumentStatus.from_name(status_raw)

    ratings = value.get("ratings", [])
    if not isinstance(ratings, list) or any(
        not isinstance(rating, int) or isinstance(rating, bool) for rating in ratings
    ):
        raise ValueError(f"Document {document_id}: 'ratings' must be a list of integers")

    return DocumentSource(
        id=document_id,
        status=status,
        ratings=tuple(ratings),
        text=text,
        pdf=pdf,
    )
