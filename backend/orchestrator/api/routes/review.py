"""Review pipeline endpoints"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response
from pydantic import ValidationError as PydanticValidationError
from typing import Any, Dict
from urllib.parse import parse_qsl
import json
import logging
from ...config import Settings, get_settings
from ...exceptions import PipelineError, ValidationError
from ...models.request import ProcessRequest
from ...models.response import ProcessResponse, ErrorResponse, ProfileStatus, EnvCheck
from ...services import InputResolver, ReportRenderer, LLMClient, get_profile
from ...services.profiles import StructuredSchema
from ...utils.helpers import mask_key
from ..dependencies import (
    get_llm_clients,
    get_input_resolver,
    get_report_renderer,
    build_pipeline,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["review"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS, GET",
    "Access-Control-Allow-Headers": "Content-Type, Authorization",
}

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


async def parse_request_body(request: Request) -> Dict[str, Any]:
    """
    Read a JSON or URL-encoded body into a dict

    Raises:
        ValidationError: if the body is neither
    """
    raw = (await request.body()).decode("utf-8", errors="replace")
    if not raw.strip():
        return {}

    try:
        parsed = json.loads(raw)
        # Some frontends double-encode the JSON body
        if isinstance(parsed, str):
            parsed = json.loads(parsed)
    except ValueError:
        if "=" in raw:
            logger.debug("Body is not JSON, parsing as URL-encoded")
            return dict(parse_qsl(raw, keep_blank_values=True))
        raise ValidationError(
            "Invalid request format",
            details=f"Send POST with JSON body. Preview: {raw[:100]}"
        )

    if not isinstance(parsed, dict):
        raise ValidationError("Invalid request format", details="JSON body must be an object")
    return parsed


def parse_process_request(body: Dict[str, Any]) -> ProcessRequest:
    try:
        return ProcessRequest.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(
            "Invalid request format",
            details=[f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
        ) from e


@router.post("/{profile_name}", response_model=ProcessResponse, responses=ERROR_RESPONSES)
async def run_pipeline(
    profile_name: str,
    request: Request,
    settings: Settings = Depends(get_settings),
    clients: Dict[str, LLMClient] = Depends(get_llm_clients),
    resolver: InputResolver = Depends(get_input_resolver),
    renderer: ReportRenderer = Depends(get_report_renderer)
):
    """
    Run a document through a creator / reviewer pipeline

    Steps:
    1. Parse and validate the body (no external calls on failure)
    2. Check provider keys
    3. Resolve the document (decompress / extract)
    4. Chunk, create, (draft), review, optionally extract structure
    5. Return raw and HTML output
    """
    try:
        profile = get_profile(profile_name)
        payload = parse_process_request(await parse_request_body(request))

        document, raw_criteria = resolver.classify(payload)
        settings.validate_provider_keys()

        criteria = resolver.resolve_criteria(raw_criteria)
        if not criteria:
            raise ValidationError("user_inputs cannot be empty")
        resolved = resolver.resolve(document)

        schema = None
        if payload.structured_fields:
            schema = StructuredSchema.from_field_names(
                payload.structured_fields, profile.structured_schema
            )

        pipeline = build_pipeline(profile, clients, settings, renderer)
        return await pipeline.run(
            resolved=resolved,
            criteria=criteria,
            selections=payload.dropdown_selections,
            extract_structured=payload.extract_procedures,
            schema=schema
        )

    except PipelineError as e:
        logger.error(f"[{profile_name}] {e.__class__.__name__}: {e.message}")
        raise
    except Exception as e:
        logger.exception(f"[{profile_name}] Unexpected error running pipeline: {e}")
        raise PipelineError("Internal processing error", details=str(e))


@router.options("/{profile_name}")
async def pipeline_preflight(profile_name: str):
    """CORS pre-flight for clients that do not send an Origin header"""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.get("/{profile_name}", response_model=ProfileStatus, responses=ERROR_RESPONSES)
async def pipeline_status(profile_name: str, settings: Settings = Depends(get_settings)):
    """Status probe showing whether provider keys are present (masked)"""
    profile = get_profile(profile_name)
    return ProfileStatus(
        message=f"{profile.title} API is running",
        endpoint=f"/api/{profile.name}",
        env_check=EnvCheck(
            openai_key_exists=bool(settings.openai_api_key),
            openai_key_format=mask_key(settings.openai_api_key),
            anthropic_key_exists=bool(settings.anthropic_api_key),
            anthropic_key_format=mask_key(settings.anthropic_api_key)
        )
    )
