"""API response models"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from .chunk import ChunkSummary


class PipelineMetadata(BaseModel):
    """Run details reported alongside the generated text"""
    profile: str
    document_length: int
    criteria_length: int
    source_kind: str = "text"
    processed_chunks: int = 0
    chunks: List[ChunkSummary] = Field(default_factory=list)
    models_used: Dict[str, str] = Field(default_factory=dict)
    drafting_pass: bool = False
    structured_output_status: Optional[str] = None  # parsed, extracted, repaired, line_fallback, unavailable
    extraction_error: Optional[str] = None
    elapsed_seconds: float = 0.0


class ProcessResponse(BaseModel):
    """Response for a review pipeline run"""
    success: bool = True
    ai_output: str
    ai_draft: str
    ai_output_html: str
    procedures: List[Dict[str, Any]] = Field(default_factory=list)
    chunks_processed: int
    timestamp: str
    metadata: PipelineMetadata


class ErrorResponse(BaseModel):
    """Error body returned for every failed request"""
    error: str
    details: Optional[Any] = None


class EnvCheck(BaseModel):
    """Masked provider key status"""
    openai_key_exists: bool
    openai_key_format: str
    anthropic_key_exists: bool
    anthropic_key_format: str


class ProfileStatus(BaseModel):
    """GET probe response for a pipeline endpoint"""
    status: str = "ok"
    message: str
    endpoint: str
    method_required: str = "POST"
    env_check: EnvCheck
