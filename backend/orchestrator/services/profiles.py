"""Pipeline profiles: prompts, provider roles and structured schemas per endpoint"""
from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel
from typing import Dict, List, Optional
from ..exceptions import ProfileNotFoundError


class StructuredSchema(BaseModel):
    """Shape of the JSON list requested from the model"""
    name: str
    description: str
    fields: Dict[str, str]
    primary_field: str

    @classmethod
    def from_field_names(cls, names: List[str], base: "StructuredSchema") -> "StructuredSchema":
        """Override the field list; the first name becomes the primary field"""
        fields = {name: base.fields.get(name, name.replace("_", " ")) for name in names}
        return cls(
            name=base.name,
            description=base.description,
            fields=fields,
            primary_field=names[0]
        )


class PipelineProfile(BaseModel):
    """
    One handler variant of the two-stage pipeline

    Templates are PromptTemplate strings:
    - creator_template: {criteria} {chunk} {chunk_number} {total_chunks}
    - draft_template: {criteria} {document_section}
    - reviewer_template: {criteria} {draft} {source_section}
    """
    name: str
    title: str
    creator_provider: str
    reviewer_provider: str

    creator_label: str = "Creator"
    creator_system: str
    creator_template: str
    creator_max_tokens: Optional[int] = None
    chunk_separator: str = "\n\n---\n\n"

    draft_system: Optional[str] = None
    draft_template: Optional[str] = None
    draft_max_tokens: Optional[int] = None

    reviewer_label: str = "Reviewer"
    reviewer_system: str
    reviewer_template: str
    reviewer_max_tokens: Optional[int] = None
    include_source_excerpt: bool = False

    structured_schema: StructuredSchema

    @property
    def has_drafting_pass(self) -> bool:
        return bool(self.draft_system and self.draft_template)

    def render_creator(self, criteria: str, chunk: str, chunk_number: int, total_chunks: int) -> str:
        return PromptTemplate.from_template(self.creator_template).format(
            criteria=criteria,
            chunk=chunk,
            chunk_number=chunk_number,
            total_chunks=total_chunks
        )

    def render_draft(self, criteria: str, document_section: str) -> str:
        return PromptTemplate.from_template(self.draft_template).format(
            criteria=criteria,
            document_section=document_section
        )

    def render_reviewer(self, criteria: str, draft: str, source_section: str) -> str:
        return PromptTemplate.from_template(self.reviewer_template).format(
            criteria=criteria,
            draft=draft,
            source_section=source_section
        )


FINDINGS_SCHEMA = StructuredSchema(
    name="findings",
    description="review findings following the five-element findings template",
    fields={
        "condition": "what was observed in the document",
        "criteria": "the requirement or standard it is measured against",
        "cause": "why the gap exists",
        "effect": "the risk or consequence of the gap",
        "recommendation": "the corrective action to take",
    },
    primary_field="condition"
)

PROCEDURES_SCHEMA = StructuredSchema(
    name="procedures",
    description="audit procedures from the working program",
    fields={
        "procedure": "description of the audit procedure",
        "objective": "the audit objective the procedure addresses",
        "evidence": "evidence to obtain or inspect",
        "risk_rating": "high, medium or low",
        "reference": "section or standard reference",
    },
    primary_field="procedure"
)


SOP_REVIEWER = PipelineProfile(
    name="sop-reviewer",
    title="SOP Compliance Review",
    creator_provider="anthropic",
    reviewer_provider="openai",
    creator_label="Primary review",
    creator_system="""You are an expert SOP (Standard Operating Procedure) and regulatory compliance reviewer with deep expertise in:
- ISO 9001:2015 Quality Management Systems
- ISO 13485:2016 Medical Devices QMS
- FDA 21 CFR Part 11 Electronic Records
- EU GMP Guidelines
- Industry best practices

Analyze through multiple lenses:
- Regulatory Compliance
- Operational Clarity
- Risk Management
- Process Effectiveness
- Documentation Quality

Provide detailed, constructive, actionable feedback.""",
    creator_template="""REVIEW CRITERIA:
{criteria}

DOCUMENT SECTION ({chunk_number} of {total_chunks}):
{chunk}

Provide comprehensive review with specific findings and recommendations.""",
    chunk_separator="\n\n" + "=" * 51 + "\n\n",
    reviewer_label="QA review",
    reviewer_system="""You are a Senior Quality Assurance Reviewer specializing in regulatory compliance and technical documentation.

Perform rigorous secondary review (QA/QC) of the primary SOP analysis.

Verify:
- Accuracy of findings
- Completeness - identify missed issues
- Consistency of recommendations
- Regulatory precision
- Actionability

Provide verification, additional issues, corrections, and overall quality assessment.""",
    reviewer_template="""ORIGINAL REQUIREMENTS:
{criteria}{source_section}

PRIMARY REVIEW:
{draft}

Provide comprehensive QA review.""",
    include_source_excerpt=True,
    structured_schema=FINDINGS_SCHEMA
)


AUDIT_ORCHESTRATOR = PipelineProfile(
    name="orchestrator",
    title="Audit Working Program",
    creator_provider="openai",
    reviewer_provider="anthropic",
    creator_label="Draft program",
    creator_system="You are a document preparation engine. Clean, structure, and clarify this section. Keep all content. Do not summarize.",
    creator_template="""CONTEXT FOR PREPARATION:
{criteria}

SECTION {chunk_number} OF {total_chunks}:
{chunk}""",
    creator_max_tokens=3000,
    chunk_separator="\n\n---\n\n",
    draft_system="""You are an expert audit planner specializing in internal audit and quality management systems. Generate comprehensive audit working programs based on user requirements and document content. Apply latest IIA Standards and ISO 19011:2018 guidelines.

Output Requirements:
- Structure: Use HTML semantic tags (<h1>, <h2>, <h3>, <p>, <ul>, <ol>, <table>)
- No CSS or inline styles
- Professional audit documentation tone
- Clear, actionable content
- Maintain all substantive information
- Include audit objectives, scope, procedures, criteria, resources, and timelines where applicable""",
    draft_template="""# USER REQUIREMENTS
{criteria}{document_section}

Generate a complete, professional Audit Working Program in clean HTML format. Structure it with clear sections covering all essential audit program elements.""",
    draft_max_tokens=4000,
    reviewer_label="Final review",
    reviewer_system="""You are a senior audit reviewer and quality assurance specialist with deep expertise in IIA International Standards for the Professional Practice of Internal Auditing and ISO 19011:2018 Guidelines for auditing management systems.

Your mission: Conduct a comprehensive review and enhancement of the audit working program draft.

Review Criteria:
- Technical Accuracy - Verify alignment with IIA Standards and ISO 19011
- Completeness - Ensure all critical audit program elements are present
- Clarity - Check for clear, unambiguous language
- Structure - Assess logical flow and organization
- Professionalism - Maintain audit documentation standards
- Practicality - Ensure procedures are implementable

Output Requirements:
- Clean HTML with semantic tags only (no CSS)
- Enhanced structure and clarity
- All substantive content preserved and improved
- Professional audit documentation tone
- Production-ready for immediate use
- Must include: objectives, scope, criteria, methodology, resources, timeline, reporting structure

Do not summarize or remove content - enhance and refine it.""",
    reviewer_template="""# ORIGINAL USER REQUIREMENTS
{criteria}{source_section}

# DRAFT TO REVIEW AND ENHANCE
{draft}

Conduct your comprehensive review and provide the final, production-ready audit working program in clean HTML. Enhance structure, fix any gaps, ensure compliance with standards, and deliver a professional document ready for immediate deployment.""",
    structured_schema=PROCEDURES_SCHEMA
)


PROFILES: Dict[str, PipelineProfile] = {
    profile.name: profile for profile in (SOP_REVIEWER, AUDIT_ORCHESTRATOR)
}


def get_profile(name: str) -> PipelineProfile:
    """
    Look up a profile by endpoint name

    Raises:
        ProfileNotFoundError: if no profile has that name
    """
    profile = PROFILES.get(name)
    if profile is None:
        raise ProfileNotFoundError(
            f"Unknown pipeline: {name}",
            details={"available": sorted(PROFILES)}
        )
    return profile
