"""Markdown corpus loader feeding the knowledge index.

Architectural role:
    Converts a directory of markdown documents into `(content, source_id)` pairs
    consumed by `KnowledgeIndex.build()`.

Pipeline summary:
    1. List `*.md` files in the docs directory (sorted for stable corpus order).
    2. Split each file on blank lines into paragraphs.
    3. Strip paragraphs and drop fragments at or below `MIN_CHUNK_CHARS`.

Retrieval/ranking relation:
    This module does not embed or rank anything. It only controls what text
    becomes searchable.

Failure handling:
    - Missing or unreadable directory raises `CollaboratorUnavailable`; the index
      then falls back to its placeholder chunk.
    - A single unreadable file is logged and skipped.
"""

import logging
import os

from convo_agent.core.errors import CollaboratorUnavailable


logger = logging.getLogger(__name__)


MIN_CHUNK_CHARS = 50
MARKDOWN_EXTENSION = ".md"


def split_paragraphs(text: str, min_chars: int = MIN_CHUNK_CHARS) -> list[str]:
    """Split text on blank lines and keep paragraphs longer than `min_chars`.

    Args:
        text: Raw document text.
        min_chars: Length a stripped paragraph must exceed to be kept.

    Returns:
        Stripped paragraphs in document order.
    """
    normalized = text.replace("\r\n", "\n")
    paragraphs = (p.strip() for p in normalized.split("\n\n"))
    return [p for p in paragraphs if len(p) > min_chars]


def load_markdown_corpus(docs_path: str, min_chars: int = MIN_CHUNK_CHARS) -> list[tuple[str, str]]:
    """Load every markdown document under `docs_path` as paragraph chunks.

    Args:
        docs_path: Directory containing `.md` files (not searched recursively).
        min_chars: Minimum paragraph length, see `split_paragraphs`.

    Returns:
        List of `(content, filename)` pairs in sorted-filename, document order.

    Raises:
        CollaboratorUnavailable: When the directory does not exist or cannot be
            listed.
    """
    try:
        names = sorted(os.listdir(docs_path))
    except OSError as err:
        raise CollaboratorUnavailable(f"Docs directory unavailable: {docs_path}") from err

    chunks: list[tuple[str, str]] = []

    for name in names:
        if not name.endswith(MARKDOWN_EXTENSION):
            continue

        path = os.path.join(docs_path, name)
        if not os.path.isfile(path):
            continue

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError):
            logger.exception("Failed to read knowledge document %s", path)
            continue

        for paragraph in split_paragraphs(content, min_chars):
            chunks.append((paragraph, name))

    logger.info("Loaded %d chunk(s) from %s", len(chunks), docs_path)
    return chunks
