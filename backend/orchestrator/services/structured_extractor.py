"""Structured list extraction from free-text model output"""
import json
import logging
from typing import Any, Dict, List, Tuple
from ..exceptions import ProviderError
from ..utils.json_recovery import recover_structured_list
from .llm_client import LLMClient
from .profiles import StructuredSchema

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You convert review documents into machine-readable JSON. "
    "Output ONLY a JSON array, nothing else."
)

EXTRACTION_PROMPT = """Extract the {description} from the document below.

Return a JSON array where every element is an object with exactly these keys:
{field_lines}

Example element:
{example}

DOCUMENT:
{document}

Output ONLY the JSON array, nothing else."""


class StructuredExtractor:
    """Ask a model for a JSON list and recover it on a best-effort basis"""

    def __init__(self, llm_client: LLMClient, max_document_chars: int = 30000):
        """
        Initialize structured extractor

        Args:
            llm_client: Client used for the extraction call
            max_document_chars: Document excerpt length sent to the model
        """
        self.llm_client = llm_client
        self.max_document_chars = max_document_chars

    def build_prompt(self, document: str, schema: StructuredSchema) -> str:
        field_lines = "\n".join(
            f'- "{name}": {description}' for name, description in schema.fields.items()
        )
        example = json.dumps({name: "..." for name in schema.fields})
        return EXTRACTION_PROMPT.format(
            description=schema.description,
            field_lines=field_lines,
            example=example,
            document=document[:self.max_document_chars]
        )

    async def extract(self, document: str, schema: StructuredSchema) -> Tuple[str, List[Dict[str, Any]]]:
        """
        Extract a structured list from a document

        Never raises for model-side problems: a provider failure yields an
        empty list with status "unavailable", unparseable output yields one
        entry per line with status "line_fallback".

        Args:
            document: Final pipeline output
            schema: Fields to request

        Returns:
            Tuple of (status, items)
        """
        prompt = self.build_prompt(document, schema)
        try:
            response = await self.llm_client.generate(EXTRACTION_SYSTEM_PROMPT, prompt)
        except ProviderError as e:
            logger.warning(f"Structured extraction call failed, returning no items: {e}")
            return "unavailable", []

        status, items = recover_structured_list(response, schema.primary_field)
        logger.info(f"Structured extraction: {len(items)} {schema.name} ({status})")
        return status, items
