"""Tests for sentence-boundary chunking."""

import random
import re
import pytest

from orchestrator.utils.sentence_chunker import SentenceChunker, chunk_text, split_sentences
from conftest import make_document


def _squash(text: str) -> str:
    return re.sub(r"\s+", "", text)


def _random_document(seed: int) -> str:
    rng = random.Random(seed)
    words = ["audit", "record", "batch", "operator", "review", "control", "deviation", "sign-off"]
    sentences = []
    for _ in range(rng.randint(1, 400)):
        length = rng.randint(1, 40)
        body = " ".join(rng.choice(words) for _ in range(length))
        sentences.append(body.capitalize() + rng.choice([".", "!", "?"]))
    separators = [" ", "  ", "\n", "\n\n", "\t "]
    return "".join(s + rng.choice(separators) for s in sentences)


class TestChunkText:
    """Properties of chunk_text()."""

    def test_empty_input_yields_no_chunks(self):
        assert chunk_text("") == []
        assert chunk_text("   \n ") == []

    def test_short_input_is_single_trimmed_chunk(self):
        text = "  Hello world. Bye now.  "
        assert chunk_text(text, 100) == [text.strip()]

    def test_sentence_split_heuristic(self):
        assert split_sentences("One. Two! Three? Four") == ["One.", "Two!", "Three?", "Four"]
        # No whitespace after the period: not a boundary
        assert split_sentences("Version 1.2 is live.") == ["Version 1.2 is live."]

    def test_oversized_sentence_is_its_own_chunk(self):
        long_sentence = "x" * 50 + "."
        chunks = chunk_text(f"Short one. {long_sentence} Tail.", 20)
        assert chunks == ["Short one.", long_sentence, "Tail."]

    @pytest.mark.parametrize("seed", range(10))
    def test_chunks_reconstruct_original(self, seed):
        text = _random_document(seed)
        chunks = chunk_text(text, 500)
        assert _squash("".join(chunks)) == _squash(text)

    @pytest.mark.parametrize("seed", range(10))
    def test_chunks_respect_maximum(self, seed):
        max_chars = 300
        text = _random_document(seed)
        for chunk in chunk_text(text, max_chars):
            assert chunk
            assert chunk == chunk.strip()
            # Only a single over-long sentence may exceed the maximum
            if len(chunk) > max_chars:
                assert len(split_sentences(chunk)) == 1

    def test_deterministic(self):
        text = _random_document(42)
        assert chunk_text(text, 250) == chunk_text(text, 250)

    def test_order_preserved(self):
        text = make_document(5000)
        chunks = chunk_text(text, 1000)
        positions = [text.index(chunk[:60]) for chunk in chunks]
        assert positions == sorted(positions)


class TestSentenceChunker:
    """Threshold behaviour of SentenceChunker."""

    def test_below_threshold_is_single_chunk(self):
        text = make_document(9000)
        chunker = SentenceChunker(max_chars=8000, threshold=10000)
        assert chunker.split(text) == [text.strip()]

    def test_above_threshold_is_split(self):
        text = make_document(25000)
        chunker = SentenceChunker(max_chars=8000, threshold=10000)
        chunks = chunker.split(text)
        assert len(chunks) > 1
        assert all(len(chunk) <= 8000 for chunk in chunks)
        assert chunks == chunk_text(text, 8000)

    def test_blank_document(self):
        assert SentenceChunker().split("") == []
        assert SentenceChunker().split("  \n") == []
