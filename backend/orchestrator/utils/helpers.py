"""Helper utility functions"""
from typing import Optional
import re

CODE_FENCE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)


def truncate(text: str, max_length: int) -> str:
    """Hard-truncate text to max_length characters"""
    return text[:max_length] if text else ""


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```lang ... ``` markdown fence, if any"""
    if not text:
        return ""
    stripped = text.strip()
    match = CODE_FENCE.match(stripped)
    return match.group(1).strip() if match else stripped


def mask_key(key: Optional[str], visible: int = 7) -> str:
    """Show only the prefix of a secret"""
    if not key:
        return "missing"
    return f"{key[:visible]}..."


def first_non_blank(*values: Optional[str]) -> Optional[str]:
    """Return the first value that is a non-blank string"""
    for value in values:
        if isinstance(value, str) and value.strip():
            return value
    return None
