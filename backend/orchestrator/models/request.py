"""API request models"""
from pydantic import BaseModel, Field, AliasChoices, field_validator
from typing import Any, Dict, List, Optional
import json


class UploadedFile(BaseModel):
    """Binary document attached to a request"""
    file_type: str
    file_data: str = Field(validation_alias=AliasChoices("file_data", "data", "base64"))
    file_name: Optional[str] = None


class ProcessRequest(BaseModel):
    """Request body for a review pipeline run"""
    # Source document (first non-blank wins)
    document_text: Optional[str] = None
    source_wp: Optional[str] = None
    uploaded_wp: Optional[str] = None
    uploaded_file: Optional[UploadedFile] = None

    # Review / generation criteria
    user_inputs: Optional[str] = None
    dropdown_selections: Dict[str, Any] = Field(default_factory=dict)

    # Structured extraction
    extract_procedures: bool = False
    structured_fields: Optional[List[str]] = None

    @field_validator("dropdown_selections", mode="before")
    @classmethod
    def parse_selections(cls, value: Any) -> Any:
        """No-code frontends often send the selections as a JSON string"""
        if value is None or value == "":
            return {}
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except ValueError:
                return {"selection": value}
            return parsed if isinstance(parsed, dict) else {"selection": parsed}
        return value

    @field_validator("uploaded_file", mode="before")
    @classmethod
    def parse_uploaded_file(cls, value: Any) -> Any:
        """URL-encoded bodies carry the file object as a JSON string"""
        if value == "":
            return None
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value

    @field_validator("structured_fields", mode="before")
    @classmethod
    def parse_fields(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [field.strip() for field in value.split(",") if field.strip()] or None
        return value
