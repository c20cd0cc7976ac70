"""
Best-effort recovery of a JSON list from free-text model output.

The recovery is a chain of pure steps, each returning a list or None:

1. strict_parse          - the whole response (minus code fences) is JSON
2. extract_bracketed     - a JSON array of objects embedded in prose, found
                           by decoding from each "[" in turn
3. repair_trailing_commas - the same scan once trailing commas are removed
4. extract_string_array  - an embedded plain list of strings

first_success() runs the chain and stops at the first step that yields a
value. When every step fails, recover_structured_list() falls back to one
entry per non-empty line.
"""
import json
import re
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from ..exceptions import StructuredOutputError
from .helpers import strip_code_fences

logger = logging.getLogger(__name__)

RecoveryStep = Callable[[str], Optional[List[Any]]]

TRAILING_COMMA = re.compile(r",\s*([\]}])")
DECODER = json.JSONDecoder()


def _as_list(value: Any) -> Optional[List[Any]]:
    """Coerce a parsed JSON value to a list, unwrapping {"key": [...]}"""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        list_values = [v for v in value.values() if isinstance(v, list)]
        if len(list_values) == 1:
            return list_values[0]
        return [value]
    return None


def _loads(candidate: str) -> Optional[List[Any]]:
    try:
        return _as_list(json.loads(candidate))
    except ValueError:
        return None


def _has_objects(value: List[Any]) -> bool:
    return any(isinstance(item, dict) for item in value)


def _all_strings(value: List[Any]) -> bool:
    return bool(value) and all(isinstance(item, str) for item in value)


def _embedded_array(text: str, accept: Callable[[List[Any]], bool] = _has_objects) -> Optional[List[Any]]:
    """
    Decode a JSON array starting at each "[" in turn

    Surrounding prose may carry its own brackets (clause references such
    as [7.5], markdown links), so only arrays passing ``accept`` count.
    """
    index = text.find("[")
    while index != -1:
        try:
            value, end = DECODER.raw_decode(text, index)
        except ValueError:
            index = text.find("[", index + 1)
            continue
        if accept(value):
            return value
        index = text.find("[", end)
    return None


def strict_parse(text: str) -> Optional[List[Any]]:
    """Parse the whole response as JSON"""
    return _loads(strip_code_fences(text))


def extract_bracketed(text: str) -> Optional[List[Any]]:
    """Parse a JSON array of objects embedded in prose"""
    return _embedded_array(text)


def repair_trailing_commas(text: str) -> Optional[List[Any]]:
    """Parse an embedded array of objects after removing trailing commas"""
    return _embedded_array(TRAILING_COMMA.sub(r"\1", text))


def extract_string_array(text: str) -> Optional[List[Any]]:
    """Parse an embedded plain list of strings"""
    return _embedded_array(text, accept=_all_strings)


DEFAULT_STEPS: Tuple[Tuple[str, RecoveryStep], ...] = (
    ("parsed", strict_parse),
    ("extracted", extract_bracketed),
    ("repaired", repair_trailing_commas),
    ("extracted", extract_string_array),
)


def first_success(
    text: str,
    steps: Sequence[Tuple[str, RecoveryStep]] = DEFAULT_STEPS
) -> Optional[Tuple[str, List[Any]]]:
    """Return (step name, value) for the first step that yields a list"""
    for name, step in steps:
        value = step(text)
        if value is not None:
            return name, value
    return None


def lines_to_items(text: str, field: str) -> List[Dict[str, Any]]:
    """One unstructured entry per non-empty line"""
    return [{field: line.strip()} for line in text.splitlines() if line.strip()]


def normalize_items(items: List[Any], field: str) -> List[Dict[str, Any]]:
    """Ensure every entry is an object; scalars go under ``field``"""
    return [item if isinstance(item, dict) else {field: str(item)} for item in items]


def parse_structured_list(text: str, field: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Parse a JSON list out of model output

    Raises:
        StructuredOutputError: if no recovery step produced a list
    """
    result = first_success(text or "")
    if result is None:
        raise StructuredOutputError(
            "Model output is not valid JSON",
            details=(text or "")[:200]
        )
    method, items = result
    return method, normalize_items(items, field)


def recover_structured_list(text: str, field: str) -> Tuple[str, List[Dict[str, Any]]]:
    """
    Parse a JSON list, falling back to a line-based list

    Args:
        text: Raw model output
        field: Key used for unstructured (line/scalar) entries

    Returns:
        Tuple of (recovery method, list of objects). The method is one of
        "parsed", "extracted", "repaired" or "line_fallback".
    """
    try:
        return parse_structured_list(text, field)
    except StructuredOutputError as e:
        logger.warning(f"Structured output recovery failed, using line fallback: {e}")
        return "line_fallback", lines_to_items(text or "", field)
