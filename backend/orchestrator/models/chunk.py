"""Chunk data models"""
from pydantic import BaseModel


class ChunkSummary(BaseModel):
    """Bookkeeping for one creator pass over a chunk"""
    index: int
    input_chars: int
    output_chars: int
