"""Utility functions and helpers"""
from .sentence_chunker import SentenceChunker, chunk_text
from .pacing import FixedDelayPolicy, paced
from .json_recovery import recover_structured_list
from .helpers import (
    truncate,
    strip_code_fences,
    mask_key,
)

__all__ = [
    "SentenceChunker",
    "chunk_text",
    "FixedDelayPolicy",
    "paced",
    "recover_structured_list",
    "truncate",
    "strip_code_fences",
    "mask_key",
]
