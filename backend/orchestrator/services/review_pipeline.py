"""Two-stage (creator → reviewer) pipeline orchestration"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import time
from ..models.chunk import ChunkSummary
from ..models.document import ResolvedInput
from ..models.response import ProcessResponse, PipelineMetadata
from ..utils.helpers import truncate
from ..utils.pacing import FixedDelayPolicy, paced
from ..utils.sentence_chunker import SentenceChunker
from .llm_client import LLMClient
from .profiles import PipelineProfile, StructuredSchema
from .report_renderer import ReportRenderer
from .structured_extractor import StructuredExtractor

logger = logging.getLogger(__name__)


def format_criteria(criteria: str, selections: Optional[Dict[str, Any]] = None) -> str:
    """Append dropdown selections to the free-text criteria"""
    if not selections:
        return criteria
    lines = [f"- {key}: {value}" for key, value in selections.items() if value not in (None, "")]
    if not lines:
        return criteria
    return f"{criteria}\n\nSELECTED OPTIONS:\n" + "\n".join(lines)


class ReviewPipeline:
    """Orchestrate the creator / reviewer workflow for one profile"""

    def __init__(
        self,
        profile: PipelineProfile,
        creator: LLMClient,
        reviewer: LLMClient,
        chunker: SentenceChunker,
        pacing: FixedDelayPolicy,
        renderer: ReportRenderer,
        structured_extractor: Optional[StructuredExtractor] = None,
        draft_excerpt_chars: int = 25000,
        source_excerpt_chars: int = 30000
    ):
        """
        Initialize review pipeline

        Args:
            profile: Prompts and provider roles
            creator: Client for the per-chunk (and drafting) stage
            reviewer: Client for the single review stage
            chunker: SentenceChunker instance
            pacing: Delay policy between sequential creator calls
            renderer: ReportRenderer instance
            structured_extractor: Extractor for the optional structured list
            draft_excerpt_chars: Merged text passed to the drafting pass
            source_excerpt_chars: Source text excerpt passed to the reviewer
        """
        self.profile = profile
        self.creator = creator
        self.reviewer = reviewer
        self.chunker = chunker
        self.pacing = pacing
        self.renderer = renderer
        self.structured_extractor = structured_extractor or StructuredExtractor(reviewer)
        self.draft_excerpt_chars = draft_excerpt_chars
        self.source_excerpt_chars = source_excerpt_chars

        logger.info(
            f"ReviewPipeline '{profile.name}' initialized "
            f"(creator={creator.provider_name}, reviewer={reviewer.provider_name})"
        )

    async def run(
        self,
        resolved: ResolvedInput,
        criteria: str,
        selections: Optional[Dict[str, Any]] = None,
        extract_structured: bool = False,
        schema: Optional[StructuredSchema] = None
    ) -> ProcessResponse:
        """
        Execute the pipeline

        Steps:
        1. Split the document into chunks (single chunk below the threshold)
        2. Run the creator on each chunk, in order, paced
        3. Merge chunk outputs; run the drafting pass if the profile has one
        4. Run the reviewer once
        5. Optionally extract a structured list (never fatal)
        6. Render the HTML report

        Args:
            resolved: Normalized document text
            criteria: User review/generation criteria
            selections: Free-form key/value constraints
            extract_structured: Whether to run structured extraction
            schema: Override for the profile's structured schema

        Returns:
            ProcessResponse

        Raises:
            ProviderError: if any creator, drafting or reviewer call fails
        """
        started = time.monotonic()
        profile = self.profile
        criteria_block = format_criteria(criteria, selections)

        # Step 1: Chunk
        chunks = self.chunker.split(resolved.text)
        logger.info(
            f"[{profile.name}] Processing {len(chunks)} chunk(s) from "
            f"{resolved.length} chars ({resolved.source_kind})"
        )

        # Step 2: Creator per chunk
        outputs, summaries = await self._run_creator(chunks, criteria_block)
        merged = profile.chunk_separator.join(outputs)
        logger.info(f"[{profile.name}] Chunks processed. Merged length: {len(merged)}")

        # Step 3: Optional drafting pass
        draft = merged
        if profile.has_drafting_pass:
            draft = await self._run_draft(criteria_block, merged)

        # Step 4: Reviewer
        source_section = ""
        if profile.include_source_excerpt and resolved.text:
            source_section = (
                "\n\nORIGINAL DOCUMENT:\n"
                f"{truncate(resolved.text, self.source_excerpt_chars)}"
            )
        logger.info(f"[{profile.name}] Sending to {self.reviewer.provider_name} for review...")
        final_output = await self.reviewer.generate(
            profile.reviewer_system,
            profile.render_reviewer(criteria_block, draft, source_section),
            max_tokens=profile.reviewer_max_tokens
        )
        logger.info(f"[{profile.name}] Review complete. Length: {len(final_output)}")

        # Step 5: Structured extraction
        schema = schema or profile.structured_schema
        structured_status = None
        items: List[Dict[str, Any]] = []
        if extract_structured:
            structured_status, items = await self.structured_extractor.extract(final_output, schema)

        # Step 6: Render
        timestamp = datetime.now(timezone.utc).isoformat()
        models_used = {
            "creator": self.creator.model,
            "reviewer": self.reviewer.model
        }
        html = self.renderer.render(
            title=profile.title,
            sections=[
                (profile.creator_label, draft),
                (profile.reviewer_label, final_output)
            ],
            metadata=[
                ("Generated", timestamp),
                ("Pipeline", profile.name),
                ("Chunks processed", len(chunks)),
                ("Creator model", models_used["creator"]),
                ("Reviewer model", models_used["reviewer"])
            ],
            items=items,
            columns=list(schema.fields) if items else None,
            items_heading=schema.name.replace("_", " ").title()
        )

        metadata = PipelineMetadata(
            profile=profile.name,
            document_length=resolved.length,
            criteria_length=len(criteria),
            source_kind=resolved.source_kind,
            processed_chunks=len(outputs),
            chunks=summaries,
            models_used=models_used,
            drafting_pass=profile.has_drafting_pass,
            structured_output_status=structured_status,
            extraction_error=resolved.extraction_error,
            elapsed_seconds=round(time.monotonic() - started, 3)
        )

        logger.info(f"[{profile.name}] Process complete in {metadata.elapsed_seconds}s")
        return ProcessResponse(
            success=True,
            ai_output=final_output,
            ai_draft=draft,
            ai_output_html=html,
            procedures=items,
            chunks_processed=len(chunks),
            timestamp=timestamp,
            metadata=metadata
        )

    async def _run_creator(self, chunks: List[str], criteria: str):
        """Call the creator once per chunk, strictly in order"""
        outputs: List[str] = []
        summaries: List[ChunkSummary] = []
        total = len(chunks)

        async for index, chunk in paced(chunks, self.pacing):
            logger.info(f"[{self.profile.name}] Chunk {index + 1}/{total} ({len(chunk)} chars)")
            result = await self.creator.generate(
                self.profile.creator_system,
                self.profile.render_creator(criteria, chunk, index + 1, total),
                max_tokens=self.profile.creator_max_tokens
            )
            outputs.append(result)
            summaries.append(ChunkSummary(index=index, input_chars=len(chunk), output_chars=len(result)))

        return outputs, summaries

    async def _run_draft(self, criteria: str, merged: str) -> str:
        """Drafting pass over the merged creator output"""
        document_section = ""
        if merged:
            document_section = (
                "\n\n# DOCUMENT CONTENT (Processed)\n"
                f"{truncate(merged, self.draft_excerpt_chars)}"
            )
        logger.info(f"[{self.profile.name}] Generating {self.creator.provider_name} main draft...")
        draft = await self.creator.generate(
            self.profile.draft_system,
            self.profile.render_draft(criteria, document_section),
            max_tokens=self.profile.draft_max_tokens
        )
        logger.info(f"[{self.profile.name}] Draft generated. Length: {len(draft)}")
        return draft
