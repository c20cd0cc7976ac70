"""Sentence-boundary chunking for LLM-context-sized pieces"""
import re
from typing import List
import logging

logger = logging.getLogger(__name__)

# Split after ., ! or ? when followed by whitespace
SENTENCE_BOUNDARY = re.compile(r"(?<=[.!?])\s+")


def split_sentences(text: str) -> List[str]:
    """Split text into sentences using the terminal-punctuation heuristic"""
    return SENTENCE_BOUNDARY.split(text)


def chunk_text(text: str, max_chars: int = 8000) -> List[str]:
    """
    Split text into ordered chunks of whole sentences

    A chunk accumulates sentences until adding the next one would exceed
    ``max_chars``; the accumulated chunk is then emitted and a new one
    started. A single sentence longer than ``max_chars`` becomes its own
    oversized chunk rather than being truncated.

    Args:
        text: Full document text
        max_chars: Maximum characters per chunk

    Returns:
        List of non-empty, trimmed chunks (empty list for empty input)
    """
    chunks: List[str] = []
    current = ""

    for sentence in split_sentences(text):
        if len(current + sentence) > max_chars:
            if current.strip():
                chunks.append(current.strip())
            current = ""
        current += sentence + " "

    if current.strip():
        chunks.append(current.strip())

    return chunks


class SentenceChunker:
    """
    Chunk documents only when they are large enough to need it

    Documents up to ``threshold`` characters are passed through as a single
    chunk; longer ones are split with :func:`chunk_text`.
    """

    def __init__(self, max_chars: int = 8000, threshold: int = 10000):
        """
        Initialize sentence chunker

        Args:
            max_chars: Maximum characters per chunk
            threshold: Documents longer than this are split
        """
        self.max_chars = max_chars
        self.threshold = threshold

    def split(self, text: str) -> List[str]:
        """
        Split a document into chunks

        Args:
            text: Resolved document text

        Returns:
            Ordered list of chunks
        """
        if not text or not text.strip():
            return []

        if len(text) <= self.threshold:
            return [text.strip()]

        chunks = chunk_text(text, self.max_chars)
        logger.info(
            f"Split {len(text)} chars into {len(chunks)} chunks "
            f"(max_chars={self.max_chars})"
        )
        return chunks
