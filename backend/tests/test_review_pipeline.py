"""Tests for the creator → reviewer orchestration."""

import asyncio

import pytest

from orchestrator.exceptions import ProviderError
from orchestrator.models.document import ResolvedInput
from orchestrator.services.profiles import AUDIT_ORCHESTRATOR, SOP_REVIEWER, StructuredSchema
from orchestrator.services.report_renderer import ReportRenderer
from orchestrator.services.review_pipeline import ReviewPipeline, format_criteria
from orchestrator.services.structured_extractor import StructuredExtractor
from orchestrator.utils.pacing import FixedDelayPolicy
from orchestrator.utils.sentence_chunker import SentenceChunker
from conftest import FakeLLMClient, make_document


def _pipeline(profile, creator, reviewer, sleeps=None, extractor=None):
    async def fake_sleep(seconds):
        if sleeps is not None:
            sleeps.append(seconds)

    return ReviewPipeline(
        profile=profile,
        creator=creator,
        reviewer=reviewer,
        chunker=SentenceChunker(max_chars=8000, threshold=10000),
        pacing=FixedDelayPolicy(0.5, sleep=fake_sleep),
        renderer=ReportRenderer(),
        structured_extractor=extractor
    )


def _run(pipeline, text, criteria="Check ISO 9001 clause 7.5", **kwargs):
    return asyncio.run(pipeline.run(ResolvedInput(text=text), criteria, **kwargs))


class TestFormatCriteria:

    def test_without_selections(self):
        assert format_criteria("Check it") == "Check it"
        assert format_criteria("Check it", {"region": ""}) == "Check it"

    def test_with_selections(self):
        result = format_criteria("Check it", {"standard": "ISO 13485", "depth": "full"})
        assert result == "Check it\n\nSELECTED OPTIONS:\n- standard: ISO 13485\n- depth: full"


class TestSopReviewer:
    """Anthropic creates per chunk, OpenAI reviews once."""

    def test_single_chunk(self, fake_anthropic, fake_openai, call_log):
        response = _run(_pipeline(SOP_REVIEWER, fake_anthropic, fake_openai), "Short SOP. Two sentences.")

        assert response.success is True
        assert response.chunks_processed == 1
        assert [call.provider for call in call_log] == ["anthropic", "openai"]
        assert response.ai_draft == "anthropic output 1"
        assert response.ai_output == "openai output 1"
        assert response.procedures == []
        assert response.metadata.structured_output_status is None

    def test_chunks_processed_in_order_and_merged(self, fake_anthropic, fake_openai, call_log):
        text = make_document(25000)
        sleeps = []
        response = _run(_pipeline(SOP_REVIEWER, fake_anthropic, fake_openai, sleeps=sleeps), text)

        expected_chunks = SentenceChunker(8000, 10000).split(text)
        total = len(expected_chunks)
        assert total >= 4
        assert response.chunks_processed == total

        creator_calls = [call for call in call_log if call.provider == "anthropic"]
        assert len(creator_calls) == total
        for number, (call, chunk) in enumerate(zip(creator_calls, expected_chunks), start=1):
            assert f"DOCUMENT SECTION ({number} of {total}):" in call.user
            assert chunk in call.user

        # Reviewer is called exactly once, after every creator call
        assert [call.provider for call in call_log] == ["anthropic"] * total + ["openai"]

        separator = "\n\n" + "=" * 51 + "\n\n"
        assert response.ai_draft == separator.join(f"anthropic output {n}" for n in range(1, total + 1))
        assert response.ai_draft in call_log[-1].user

        # Pacing waits between calls only
        assert sleeps == [0.5] * (total - 1)

        assert [summary.index for summary in response.metadata.chunks] == list(range(total))
        assert response.metadata.processed_chunks == total

    def test_reviewer_sees_criteria_selections_and_source(self, fake_anthropic, fake_openai):
        _run(
            _pipeline(SOP_REVIEWER, fake_anthropic, fake_openai),
            "Records are retained. Approvals are signed.",
            selections={"standard": "ISO 13485"}
        )
        reviewer_prompt = fake_openai.calls[0].user
        assert reviewer_prompt.startswith("ORIGINAL REQUIREMENTS:\nCheck ISO 9001 clause 7.5")
        assert "- standard: ISO 13485" in reviewer_prompt
        assert "ORIGINAL DOCUMENT:\nRecords are retained. Approvals are signed." in reviewer_prompt
        assert "PRIMARY REVIEW:\nanthropic output 1" in reviewer_prompt
        assert "- standard: ISO 13485" in fake_anthropic.calls[0].user

    def test_creator_failure_aborts_before_review(self, call_log):
        creator = FakeLLMClient(
            "anthropic",
            error=ProviderError("anthropic", "HTTP 529", upstream_status=529),
            fail_on_call=2,
            call_log=call_log
        )
        reviewer = FakeLLMClient("openai", call_log=call_log)

        with pytest.raises(ProviderError) as exc_info:
            _run(_pipeline(SOP_REVIEWER, creator, reviewer), make_document(25000))

        assert exc_info.value.upstream_status == 529
        assert len(creator.calls) == 2
        assert reviewer.calls == []

    def test_reviewer_failure_propagates(self, fake_anthropic):
        reviewer = FakeLLMClient("openai", error=ProviderError("openai", "HTTP 500"))
        with pytest.raises(ProviderError):
            _run(_pipeline(SOP_REVIEWER, fake_anthropic, reviewer), "A short SOP.")
        assert len(fake_anthropic.calls) == 1

    def test_empty_text_skips_creator(self, fake_anthropic, fake_openai):
        response = asyncio.run(
            _pipeline(SOP_REVIEWER, fake_anthropic, fake_openai).run(
                ResolvedInput(text="", source_kind="file", extraction_error="PDF text extraction failed"),
                "Check it"
            )
        )
        assert fake_anthropic.calls == []
        assert len(fake_openai.calls) == 1
        assert "ORIGINAL DOCUMENT" not in fake_openai.calls[0].user
        assert response.chunks_processed == 0
        assert response.metadata.extraction_error == "PDF text extraction failed"

    def test_html_report(self, fake_anthropic, fake_openai):
        response = _run(_pipeline(SOP_REVIEWER, fake_anthropic, fake_openai), "A short SOP.")
        html = response.ai_output_html
        assert html.startswith("<!DOCTYPE html>")
        assert "SOP Compliance Review" in html
        assert "<h2>Primary review</h2>" in html
        assert "<h2>QA review</h2>" in html
        assert "anthropic output 1" in html
        assert "openai output 1" in html
        assert html.index("Primary review") < html.index("QA review")


class TestOrchestrator:
    """OpenAI prepares chunks and drafts, Anthropic reviews."""

    def test_drafting_pass(self, fake_openai, fake_anthropic, call_log):
        response = _run(_pipeline(AUDIT_ORCHESTRATOR, fake_openai, fake_anthropic), "Audit the purchasing process.")

        assert [call.provider for call in call_log] == ["openai", "openai", "anthropic"]
        chunk_call, draft_call, review_call = call_log
        assert chunk_call.max_tokens == 3000
        assert draft_call.max_tokens == 4000
        assert "# DOCUMENT CONTENT (Processed)\nopenai output 1" in draft_call.user
        assert "# DRAFT TO REVIEW AND ENHANCE\nopenai output 2" in review_call.user
        # No source excerpt for this profile
        assert "ORIGINAL DOCUMENT" not in review_call.user

        assert response.ai_draft == "openai output 2"
        assert response.ai_output == "anthropic output 1"
        assert response.metadata.drafting_pass is True
        assert response.metadata.models_used == {"creator": "gpt-test", "reviewer": "claude-test"}

    def test_html_output_embedded_unescaped(self, fake_openai):
        reviewer = FakeLLMClient("anthropic", responses=["```html\n<h1>Audit Program</h1><p>Scope</p>\n```"])
        response = _run(_pipeline(AUDIT_ORCHESTRATOR, fake_openai, reviewer), "Audit it.")
        assert "<h1>Audit Program</h1><p>Scope</p>" in response.ai_output_html
        assert "```" not in response.ai_output_html

    def test_injected_script_does_not_reach_report(self, fake_openai):
        reviewer = FakeLLMClient("anthropic", responses=[
            '<h1>Audit Program</h1><script>fetch("https://evil.test")</script><p onmouseover="x()">Scope</p>'
        ])
        response = _run(_pipeline(AUDIT_ORCHESTRATOR, fake_openai, reviewer), "Audit it.")
        assert "<h1>Audit Program</h1>" in response.ai_output_html
        assert "<p>Scope</p>" in response.ai_output_html
        assert "<script" not in response.ai_output_html
        assert "onmouseover" not in response.ai_output_html
        # Raw model text is returned unchanged
        assert "<script>" in response.ai_output


class TestStructuredExtraction:

    def test_parsed_items(self, fake_anthropic):
        reviewer = FakeLLMClient("openai", responses=[
            "Final review text.",
            '[{"condition": "No sign-off", "recommendation": "Add approval step"}]'
        ])
        response = _run(
            _pipeline(SOP_REVIEWER, fake_anthropic, reviewer),
            "A short SOP.",
            extract_structured=True
        )
        assert response.metadata.structured_output_status == "parsed"
        assert response.procedures == [{"condition": "No sign-off", "recommendation": "Add approval step"}]
        assert "Final review text." in reviewer.calls[1].user
        assert '"condition"' in reviewer.calls[1].user
        assert '<table class="structured">' in response.ai_output_html
        assert "No sign-off" in response.ai_output_html

    def test_line_fallback(self, fake_anthropic):
        reviewer = FakeLLMClient("openai", responses=["Final.", "Missing approval\nNo training record"])
        response = _run(
            _pipeline(SOP_REVIEWER, fake_anthropic, reviewer),
            "A short SOP.",
            extract_structured=True
        )
        assert response.success is True
        assert response.metadata.structured_output_status == "line_fallback"
        assert response.procedures == [
            {"condition": "Missing approval"},
            {"condition": "No training record"},
        ]

    def test_extraction_failure_is_not_fatal(self, fake_anthropic):
        reviewer = FakeLLMClient("openai", error=ProviderError("openai", "HTTP 500"), fail_on_call=2)
        response = _run(
            _pipeline(SOP_REVIEWER, fake_anthropic, reviewer),
            "A short SOP.",
            extract_structured=True
        )
        assert response.success is True
        assert response.ai_output == "openai output 1"
        assert response.procedures == []
        assert response.metadata.structured_output_status == "unavailable"

    def test_schema_override(self, fake_anthropic):
        reviewer = FakeLLMClient("openai", responses=["Final.", "[]"])
        schema = StructuredSchema.from_field_names(["risk", "owner"], SOP_REVIEWER.structured_schema)
        extractor = StructuredExtractor(reviewer)
        _run(
            _pipeline(SOP_REVIEWER, fake_anthropic, reviewer, extractor=extractor),
            "A short SOP.",
            extract_structured=True,
            schema=schema
        )
        prompt = reviewer.calls[1].user
        assert '"risk"' in prompt
        assert '"owner"' in prompt
        assert '"recommendation"' not in prompt
        assert schema.primary_field == "risk"
