"""Dependency injection for API routes"""
from typing import Dict
from fastapi import Depends
from ..config import Settings, get_settings
from ..services import (
    DocumentProcessor,
    InputResolver,
    LLMClient,
    ReportRenderer,
    ReviewPipeline,
    StructuredExtractor,
    build_llm_client,
)
from ..services.profiles import PipelineProfile
from ..utils import SentenceChunker, FixedDelayPolicy


# Singleton instances
_llm_clients = None
_report_renderer = None


def get_llm_clients(settings: Settings = Depends(get_settings)) -> Dict[str, LLMClient]:
    """Get provider clients keyed by provider name"""
    global _llm_clients
    if _llm_clients is None:
        _llm_clients = {
            provider: build_llm_client(provider, settings)
            for provider in ("openai", "anthropic")
        }
    return _llm_clients


def get_report_renderer() -> ReportRenderer:
    """Get ReportRenderer singleton"""
    global _report_renderer
    if _report_renderer is None:
        _report_renderer = ReportRenderer()
    return _report_renderer


def get_input_resolver(settings: Settings = Depends(get_settings)) -> InputResolver:
    """Input resolvers are cheap and carry no state between requests"""
    return InputResolver(
        document_processor=DocumentProcessor(max_bytes=settings.max_upload_bytes),
        compression_marker=settings.compression_marker
    )


def build_pipeline(
    profile: PipelineProfile,
    clients: Dict[str, LLMClient],
    settings: Settings,
    renderer: ReportRenderer
) -> ReviewPipeline:
    """Assemble a ReviewPipeline for a profile"""
    reviewer = clients[profile.reviewer_provider]
    return ReviewPipeline(
        profile=profile,
        creator=clients[profile.creator_provider],
        reviewer=reviewer,
        chunker=SentenceChunker(
            max_chars=settings.chunk_size,
            threshold=settings.chunk_threshold
        ),
        pacing=FixedDelayPolicy(settings.inter_call_delay),
        renderer=renderer,
        structured_extractor=StructuredExtractor(
            reviewer,
            max_document_chars=settings.source_excerpt_chars
        ),
        draft_excerpt_chars=settings.draft_excerpt_chars,
        source_excerpt_chars=settings.source_excerpt_chars
    )
