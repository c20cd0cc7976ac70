"""Document input models"""
from pydantic import BaseModel, Field
from typing import Annotated, Literal, Optional, Union


class PlainTextInput(BaseModel):
    """Document supplied as raw text"""
    kind: Literal["text"] = "text"
    text: str


class CompressedTextInput(BaseModel):
    """Document supplied as a marker-prefixed LZ-String payload"""
    kind: Literal["compressed"] = "compressed"
    payload: str


class UploadedDocumentInput(BaseModel):
    """Document supplied as a base64-encoded PDF or Word file"""
    kind: Literal["file"] = "file"
    file_type: str
    data_base64: str
    file_name: Optional[str] = None


DocumentInput = Annotated[
    Union[PlainTextInput, CompressedTextInput, UploadedDocumentInput],
    Field(discriminator="kind")
]


class ResolvedInput(BaseModel):
    """Normalized document text that the pipeline runs on"""
    text: str
    source_kind: str = "text"  # "text", "compressed" or "file"
    extraction_error: Optional[str] = None

    @property
    def length(self) -> int:
        return len(self.text)
