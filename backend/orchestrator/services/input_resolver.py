"""Resolve loosely-shaped request bodies into one normalized input"""
from typing import Optional, Tuple
import logging
from ..exceptions import ValidationError, ExtractionError
from ..models.request import ProcessRequest
from ..models.document import (
    DocumentInput,
    PlainTextInput,
    CompressedTextInput,
    UploadedDocumentInput,
    ResolvedInput,
)
from ..utils.compression import is_compressed, decompress_text
from ..utils.helpers import first_non_blank
from .document_processor import DocumentProcessor

logger = logging.getLogger(__name__)


class InputResolver:
    """
    Turn a ProcessRequest into (ResolvedInput, criteria)

    Resolution is two explicit steps:
    1. classify() picks the document variant (text, compressed or file) and
       validates that both a document and criteria were supplied
    2. resolve() decodes that variant into plain text

    Validation happens in step 1 so a bad request fails before any
    decompression, extraction or provider call.
    """

    def __init__(self, document_processor: DocumentProcessor, compression_marker: str = "LZ:"):
        self.document_processor = document_processor
        self.compression_marker = compression_marker

    def classify(self, request: ProcessRequest) -> Tuple[DocumentInput, str]:
        """
        Pick the document variant and the raw criteria string

        Raises:
            ValidationError: if the document or the criteria are missing
        """
        text = first_non_blank(request.document_text, request.source_wp, request.uploaded_wp)
        criteria = first_non_blank(request.user_inputs)

        document: Optional[DocumentInput] = None
        if text is not None:
            if is_compressed(text, self.compression_marker):
                document = CompressedTextInput(payload=text)
            else:
                document = PlainTextInput(text=text)
        elif request.uploaded_file is not None and request.uploaded_file.file_data:
            document = UploadedDocumentInput(
                file_type=request.uploaded_file.file_type,
                data_base64=request.uploaded_file.file_data,
                file_name=request.uploaded_file.file_name
            )

        if document is None or criteria is None:
            raise ValidationError(
                "Both user_inputs and document_text are required",
                details={
                    "has_user_inputs": criteria is not None,
                    "has_document": document is not None,
                    "accepted_document_fields": [
                        "document_text", "source_wp", "uploaded_wp", "uploaded_file"
                    ]
                }
            )

        logger.info(f"Classified request input as '{document.kind}'")
        return document, criteria

    def resolve(self, document: DocumentInput) -> ResolvedInput:
        """
        Decode a document variant into plain text

        Extraction failures are not fatal: they produce empty text and the
        error message is carried on the result.

        Raises:
            ValidationError: if a compressed payload cannot be decoded
        """
        if isinstance(document, PlainTextInput):
            return ResolvedInput(text=document.text, source_kind=document.kind)

        if isinstance(document, CompressedTextInput):
            text = decompress_text(document.payload, self.compression_marker)
            return ResolvedInput(text=text, source_kind=document.kind)

        if isinstance(document, UploadedDocumentInput):
            try:
                text = self.document_processor.extract_text(
                    document.data_base64,
                    document.file_type,
                    document.file_name
                )
            except ExtractionError as e:
                logger.warning(f"Document extraction failed, continuing with empty text: {e}")
                return ResolvedInput(text="", source_kind=document.kind, extraction_error=str(e))
            return ResolvedInput(text=text, source_kind=document.kind)

        raise ValidationError(f"Unsupported document input: {type(document).__name__}")

    def resolve_criteria(self, criteria: str) -> str:
        """Criteria may be compressed the same way as the document"""
        return decompress_text(criteria, self.compression_marker).strip()
