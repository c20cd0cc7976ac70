"""LZ-String payload decompression for frontend-compressed text"""
from lzstring import LZString
import logging
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)


def is_compressed(text: str, marker: str) -> bool:
    """Check whether text carries the compression marker prefix"""
    return bool(text) and bool(marker) and text.startswith(marker)


def decompress_text(text: str, marker: str) -> str:
    """
    Decompress an LZ-String (Base64) payload prefixed with ``marker``

    Text without the marker is returned unchanged.

    Raises:
        ValidationError: if the payload carries the marker but cannot be decoded
    """
    if not is_compressed(text, marker):
        return text

    payload = text[len(marker):].strip()
    try:
        decoded = LZString().decompressFromBase64(payload)
    except Exception as e:
        raise ValidationError(
            "Compressed payload could not be decoded",
            details=str(e)
        ) from e

    if not decoded:
        raise ValidationError("Compressed payload could not be decoded")

    logger.info(f"Decompressed payload: {len(payload)} -> {len(decoded)} chars")
    return decoded
