# interview_prep/sanitizer.py
"""
Turns AI text that should encode a JSON array of question records into a list.

The model output is untrusted: it may be wrapped in Markdown code fences, or be
double-encoded (a JSON string whose value is itself JSON text). Anything that
cannot be recovered degrades to an empty list; callers never see an exception.
"""

import json
import re
from typing import Any, List, Optional

from interview_prep import monitoring

_FENCE_OPEN_RE = re.compile(r"```json", re.IGNORECASE)
_FENCE_RE = re.compile(r"```")


def strip_code_fences(text: str) -> str:
    cleaned = _FENCE_OPEN_RE.sub("", text)
    cleaned = _FENCE_RE.sub("", cleaned)
    return cleaned.strip()


def looks_double_encoded(cleaned: str) -> bool:
    return cleaned.startswith('"[') or '\\"' in cleaned


def _unescape(cleaned: str) -> str:
    unescaped = cleaned.replace('\\"', '"').replace("\\n", "").replace("\n", "")
    if unescaped.startswith('"'):
        unescaped = unescaped[1:]
    if unescaped.endswith('"'):
        unescaped = unescaped[:-1]
    return unescaped


def _direct_parse(cleaned: str) -> Any:
    value = json.loads(cleaned)
    # one layer of double-encoding: the JSON value is itself JSON text
    if isinstance(value, str):
        value = json.loads(value)
    return value


def parse_question_list(text: Optional[str]) -> List[Any]:
    """
    Parse `text` into a list, or return [] on any failure.

    Direct parse is tried first; only when it fails is the unescape-and-reparse
    path attempted.
    """
    if not text or not isinstance(text, str):
        monitoring.inc_sanitizer("empty")
        return []

    cleaned = strip_code_fences(text)
    try:
        value = _direct_parse(cleaned)
        outcome = "direct"
    except (ValueError, RecursionError):
        try:
            value = json.loads(_unescape(cleaned))
            outcome = "repaired"
        except (ValueError, RecursionError):
            monitoring.logger.info(
                "Sanitizer could not parse content",
                extra={"double_encoded_hint": looks_double_encoded(cleaned), "preview": cleaned[:200]},
            )
            monitoring.inc_sanitizer("malformed")
            return []

    if not isinstance(value, list):
        monitoring.inc_sanitizer("not_a_list")
        return []

    monitoring.inc_sanitizer(outcome)
    return value
