"""Recover a JSON object from a model response that may be wrapped or cut off"""
from typing import Any, Dict, Optional
import json
import re
from insightflow.core.exceptions import ResponseFormatError, TruncatedResponseError
from insightflow.core.logging_config import get_logger

logger = get_logger(__name__)

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*|\s*```", re.IGNORECASE)


def _try_parse(text: str) -> Optional[Dict[str, Any]]:
    try:
        result = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return None
    return result if isinstance(result, dict) else None


def strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text).strip()


def parse_json_response(text: str) -> Dict[str, Any]:
    """
    Parse a response expected to hold one JSON object.

    Strategies, cheapest first:
    1. the whole string
    2. the string without markdown code fences
    3. the span from the first '{' to the last '}'

    Raises TruncatedResponseError when an object starts but never closes,
    ResponseFormatError for anything else.
    """
    if not text or not text.strip():
        raise ResponseFormatError("Empty response.")

    result = _try_parse(text)
    if result is not None:
        return result

    cleaned = strip_code_fences(text)
    result = _try_parse(cleaned)
    if result is not None:
        return result

    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end != -1 and end > start:
        result = _try_parse(cleaned[start:end + 1])
        if result is not None:
            logger.debug(f"Recovered JSON object from span {start}-{end} of {len(cleaned)} chars")
            return result

    if start != -1 and (end == -1 or end < start):
        logger.warning(f"Response looks truncated ({len(cleaned)} chars, no closing brace)")
        raise TruncatedResponseError()

    logger.warning(f"Response is not valid JSON: {cleaned[:100]}...")
    raise ResponseFormatError()
