"""
Best-effort recovery of a JSON object from free-text LLM output.
"""
import json
import logging
from copy import deepcopy
from typing import Any, Optional, TypeVar

from uxray.features.scan.exceptions import AnalysisError, AnalysisFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced {...} span in text, or None when text has no
    opening brace.

    Braces inside JSON string literals are ignored. If the first opening
    brace is never closed (truncated output) the span runs to the last
    closing brace, or to the end of the text when there is none after it.
    """
    if not text:
        return None

    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False

    for index in range(start, len(text)):
        char = text[index]

        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue

        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start:index + 1]

    end = text.rfind("}")
    if end > start:
        return text[start:end + 1]
    return text[start:]


def parse_or_default(text: str, default: T) -> Any:
    """
    Parse the first JSON object found in text, or return a copy of default
    when that span is not valid JSON.

    Raises:
        AnalysisError(NoJsonFound): text holds no balanced {...} span
    """
    span = find_json_object(text)
    if span is None:
        logger.warning(f"No JSON object in response: {text[:200]!r}")
        raise AnalysisError(AnalysisFailure.NO_JSON_FOUND, "Could not extract JSON from response")

    try:
        return json.loads(span)
    except json.JSONDecodeError as e:
        logger.warning(f"JSON parse error, using default: {e}")
        return deepcopy(default)
