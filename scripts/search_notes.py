"""CLI for searching a local notes file, optionally re-analyzing every note first"""

import argparse
import sys
from concurrent.futures import wait

from loguru import logger

from liquidnotes.config import settings
from liquidnotes.embedders.word_vectors import WordVectors
from liquidnotes.session import create_session
from liquidnotes.store.local_store import LocalNoteStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])


def main(
    query: str,
    notes_file: str,
    word_vectors_file: str,
    analyze: bool,
    semantic: bool,
) -> None:
    store = LocalNoteStore(filepath=notes_file)
    session = create_session(
        store=store, model_loader=lambda: WordVectors.load(word_vectors_file)
    )
    session.orchestrator.semantic_search_enabled = semantic

    try:
        if not session.engine.wait_until_loaded(timeout=300):
            logger.warning("Word vectors unavailable, semantic search will return no results")

        if analyze:
            notes = store.fetch_all_notes()
            logger.info(f"Analyzing {len(notes)} notes...")
            futures = [future for note in notes for future in session.analyze(note)]
            wait(futures)
            store.flush()
            if store.sync_status.state == "error":
                logger.error(f"Could not save analysis results: {store.sync_status.message}")

        results = session.search(query)
        logger.info(f"{len(results)} notes match '{query}'")
        for note in results:
            tags = " ".join(f"#{tag}" for tag in note.tags)
            print(f"{note.id}\t{note.title}\t{tags}")
    finally:
        session.close()
        store.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("query", type=str, help="Search query, e.g. '#work is:fav budget'")
    parser.add_argument(
        "--notes-file",
        type=str,
        required=False,
        help="Local notes store file",
        default=settings.notes_store_path,
    )
    parser.add_argument(
        "--word-vectors",
        type=str,
        required=False,
        help="Word vectors text file (GloVe / word2vec text format)",
        default=settings.word_vectors_path,
    )
    parser.add_argument(
        "--analyze",
        action="store_true",
        help="Recompute suggested tags and embeddings for every note before searching",
    )
    parser.add_argument(
        "--semantic",
        action="store_true",
        default=settings.semantic_search_enabled,
        help="Rank every query by semantic similarity",
    )

    args = parser.parse_args()

    main(
        query=args.query,
        notes_file=args.notes_file,
        word_vectors_file=args.word_vectors,
        analyze=args.analyze,
        semantic=args.semantic,
    )
