"""Демонстрация работы поисковой логики без запуска HTTP-сервера."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from config_loader import load_config
from indexer import Indexer
from search_engine import DocumentStatus, SearchServer

LOGGER = logging.getLogger("search_server.demo")


def run_demo() -> None:
    """Запускает демонстрацию индексации, поиска и сопоставления документов."""
    base_dir = Path(__file__).resolve().parent
    config = load_config(base_dir / "config.yml")

    indexer = Indexer(
        stop_words=config.stop_words,
        documents=config.documents,
        logger=LOGGER,
    )
    engine = indexer.build()

    demo_queries = [
        ("пушистый ухоженный кот", DocumentStatus.ACTUAL),
        ("кот -ошейник", DocumentStatus.ACTUAL),
        ("пушистый ухоженный кот", DocumentStatus.BANNED),
    ]

    for query, status in demo_queries:
        results = engine.find_top_documents(query, status)
        payload = {
            "query": query,
            "status": status.value,
            "results": [
                {"id": item.id, "relevance": item.relevance, "rating": item.rating}
                for item in results
            ],
        }
        print(json.dumps(payload, ensure_ascii=False, indent=2))

    even_ids = engine.find_top_documents(
        "пушистый ухоженный кот",
        lambda document_id, _status, _rating: document_id % 2 == 0,
    )
    print(json.dumps({"query": "чётные id", "ids": [item.id for item in even_ids]}, ensure_ascii=False))

    print_matches(engine, "пушистый -кот")


def print_matches(engine: SearchServer, query: str) -> None:
    """Печатает совпавшие слова запроса для каждого документа."""
    for index in range(engine.get_document_count()):
        document_id = engine.get_document_id(index)
        words, status = engine.match_document(query, document_id)
        payload = {"id": document_id, "status": status.value, "words": words}
        print(json.dumps(payload, ensure_ascii=False))


def main() -> None:
    """Точка входа демонстрационного режима."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_demo()


if __name__ == "__main__":
    main()
