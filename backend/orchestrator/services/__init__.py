"""Service layer for business logic"""
from .document_processor import DocumentProcessor
from .input_resolver import InputResolver
from .llm_client import LLMClient, OpenAIClient, AnthropicClient, build_llm_client
from .profiles import PipelineProfile, StructuredSchema, get_profile
from .report_renderer import ReportRenderer
from .structured_extractor import StructuredExtractor
from .review_pipeline import ReviewPipeline

__all__ = [
    "DocumentProcessor",
    "InputResolver",
    "LLMClient",
    "OpenAIClient",
    "AnthropicClient",
    "build_llm_client",
    "PipelineProfile",
    "StructuredSchema",
    "get_profile",
    "ReportRenderer",
    "StructuredExtractor",
    "ReviewPipeline",
]
