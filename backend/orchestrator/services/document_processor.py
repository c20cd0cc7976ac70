"""Text extraction from uploaded PDF and Word documents"""
import fitz  # PyMuPDF
from docx import Document
import base64
import binascii
import io
from typing import Optional
import logging
from ..exceptions import ExtractionError

logger = logging.getLogger(__name__)

PDF_TYPES = {"pdf", "application/pdf"}
WORD_TYPES = {
    "doc",
    "docx",
    "word",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
}


class DocumentProcessor:
    """Extract plain text from base64-encoded PDF and Word uploads"""

    def __init__(self, max_bytes: int = 20000000):
        """
        Initialize document processor

        Args:
            max_bytes: Largest decoded payload accepted
        """
        self.max_bytes = max_bytes

    @staticmethod
    def normalize_file_type(file_type: str, file_name: Optional[str] = None) -> str:
        """Map a MIME type, extension or loose label to "pdf" or "word" """
        label = (file_type or "").strip().lower().lstrip(".")
        if not label and file_name and "." in file_name:
            label = file_name.rsplit(".", 1)[-1].lower()
        if label in PDF_TYPES:
            return "pdf"
        if label in WORD_TYPES:
            return "word"
        return label

    def decode_payload(self, data_base64: str) -> bytes:
        """
        Decode a base64 payload, tolerating data-URI prefixes and missing padding

        Raises:
            ExtractionError: if the payload is not valid base64 or too large
        """
        encoded = (data_base64 or "").strip()
        if encoded.startswith("data:") and "," in encoded:
            encoded = encoded.split(",", 1)[1]

        # Add padding if needed
        missing_padding = len(encoded) % 4
        if missing_padding:
            encoded += "=" * (4 - missing_padding)

        try:
            content = base64.b64decode(encoded, validate=False)
        except (binascii.Error, ValueError) as e:
            raise ExtractionError("Uploaded file is not valid base64", details=str(e)) from e

        if not content:
            raise ExtractionError("Uploaded file is empty")
        if len(content) > self.max_bytes:
            raise ExtractionError(
                f"Uploaded file exceeds maximum of {self.max_bytes} bytes"
            )
        return content

    def extract_text(self, data_base64: str, file_type: str, file_name: Optional[str] = None) -> str:
        """
        Extract text from an uploaded document

        Args:
            data_base64: Base64-encoded file content
            file_type: "pdf", "doc", "docx", "word" or a MIME type
            file_name: Original filename, used when file_type is blank

        Returns:
            Extracted text

        Raises:
            ExtractionError: on unsupported type or unreadable content
        """
        kind = self.normalize_file_type(file_type, file_name)
        if kind not in ("pdf", "word"):
            raise ExtractionError(f"Unsupported file type: {file_type}")

        content = self.decode_payload(data_base64)
        logger.info(f"Extracting text from {kind} upload ({len(content)} bytes)")

        if kind == "pdf":
            text = self._extract_from_pdf(content)
        else:
            text = self._extract_from_word(content)

        logger.info(f"Extracted {len(text)} characters from {kind} upload")
        return text

    def _extract_from_pdf(self, content: bytes) -> str:
        try:
            with fitz.open(stream=content, filetype="pdf") as doc:
                pages = [page.get_text() for page in doc]
        except Exception as e:
            raise ExtractionError("PDF text extraction failed", details=str(e)) from e
        return "\n".join(pages).strip()

    def _extract_from_word(self, content: bytes) -> str:
        # python-docx reads the OOXML format; legacy binary .doc files fail here
        try:
            doc = Document(io.BytesIO(content))
        except Exception as e:
            raise ExtractionError("Word text extraction failed", details=str(e)) from e

        parts = [paragraph.text for paragraph in doc.paragraphs]
        for table in doc.tables:
            for row in table.rows:
                parts.append(" | ".join(cell.text for cell in row.cells))
        return "\n".join(parts).strip()
