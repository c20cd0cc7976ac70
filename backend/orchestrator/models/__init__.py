"""Data models for the application"""
from .document import (
    PlainTextInput,
    CompressedTextInput,
    UploadedDocumentInput,
    DocumentInput,
    ResolvedInput,
)
from .chunk import ChunkSummary
from .request import ProcessRequest, UploadedFile
from .response import (
    ProcessResponse,
    PipelineMetadata,
    ErrorResponse,
    EnvCheck,
    ProfileStatus,
)

__all__ = [
    "PlainTextInput",
    "CompressedTextInput",
    "UploadedDocumentInput",
    "DocumentInput",
    "ResolvedInput",
    "ChunkSummary",
    "ProcessRequest",
    "UploadedFile",
    "ProcessResponse",
    "PipelineMetadata",
    "ErrorResponse",
    "EnvCheck",
    "ProfileStatus",
]
