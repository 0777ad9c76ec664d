"""
Structured JSON schemas for model replies, and the validators applied to them.

Each schema is sent with the request (``response_format`` of type
``json_schema``) so the model is constrained to the expected shape. The reply
is still validated on receipt: a missing required field raises ParseError,
which the retry executor treats like any other failed attempt.
"""

import json
from typing import Any, Dict, List

from .exceptions import ParseError
from .models import ErrorItem, Feedback, HintItem

MAX_FEEDBACK_ERRORS = 3
MAX_HINTS = 5

PARAGRAPH_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "paragraph": {"type": "string"},
    },
    "required": ["paragraph"],
}

FEEDBACK_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "correct_translation": {"type": "string"},
        "accuracy_score": {"type": "number"},
        "errors": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "type": {"type": "string"},
                    "explanation": {"type": "string"},
                },
                "required": ["type", "explanation"],
            },
        },
        "general_feedback": {"type": "string"},
    },
    "required": ["correct_translation", "accuracy_score", "general_feedback"],
}

HINT_ITEM_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "english_word": {"type": "string"},
        "vietnamese_meaning": {"type": "string"},
    },
    "required": ["english_word", "vietnamese_meaning"],
}

# Structured outputs need an object at the root, so the hint array is
# wrapped under "hints". parse_hints() accepts a bare array as well.
HINTS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "hints": {"type": "array", "items": HINT_ITEM_SCHEMA},
    },
    "required": ["hints"],
}


def response_format(name: str, schema: Dict[str, Any]) -> Dict[str, Any]:
    """Build the ``response_format`` argument for chat.completions.create."""
    return {
        "type": "json_schema",
        "json_schema": {"name": name, "schema": schema, "strict": False},
    }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def _load_json(raw: str) -> Any:
    if not raw or not raw.strip():
        raise ParseError("Model returned an empty response")
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Model response is not valid JSON: {e}") from e


def _require_str(data: Dict[str, Any], key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str):
        raise ParseError(f"{where}: missing or non-string field '{key}'")
    return value


def _require_object(data: Any, where: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ParseError(f"{where}: expected a JSON object, got {type(data).__name__}")
    return data


def parse_paragraph(raw: str) -> str:
    data = _require_object(_load_json(raw), "paragraph")
    paragraph = _require_str(data, "paragraph", "paragraph")
    if not paragraph.strip():
        raise ParseError("paragraph: field 'paragraph' is empty")
    return paragraph


def parse_feedback(raw: str) -> Feedback:
    """
    Validate a grading reply and build a Feedback.

    ``accuracy_score`` must be a number in [0, 100]; fractional scores are
    rounded. ``errors`` may be absent (treated as no errors); only the first
    MAX_FEEDBACK_ERRORS entries are kept.
    """
    data = _require_object(_load_json(raw), "feedback")
    correct_translation = _require_str(data, "correct_translation", "feedback")
    general_feedback = _require_str(data, "general_feedback", "feedback")

    score = data.get("accuracy_score")
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise ParseError("feedback: missing or non-numeric field 'accuracy_score'")
    score = int(round(score))
    if not 0 <= score <= 100:
        raise ParseError(f"feedback: accuracy_score {score} is outside 0-100")

    raw_errors = data.get("errors")
    if raw_errors is None:
        raw_errors = []
    if not isinstance(raw_errors, list):
        raise ParseError("feedback: field 'errors' must be an array")

    errors = []
    for item in raw_errors[:MAX_FEEDBACK_ERRORS]:
        item = _require_object(item, "feedback error")
        errors.append(ErrorItem(
            type=_require_str(item, "type", "feedback error"),
            explanation=_require_str(item, "explanation", "feedback error"),
        ))

    return Feedback(
        correct_translation=correct_translation,
        accuracy_score=score,
        general_feedback=general_feedback,
        errors=errors,
    )


def parse_hints(raw: str) -> List[HintItem]:
    """Validate a hint reply. Any non-empty list is accepted; only the first MAX_HINTS are kept."""
    data = _load_json(raw)
    if isinstance(data, dict):
        data = data.get("hints")
    if not isinstance(data, list):
        raise ParseError("hints: expected a JSON array of vocabulary items")
    if not data:
        raise ParseError("hints: model returned no vocabulary items")

    hints = []
    for item in data[:MAX_HINTS]:
        item = _require_object(item, "hint")
        hints.append(HintItem(
            english_word=_require_str(item, "english_word", "hint"),
            vietnamese_meaning=_require_str(item, "vietnamese_meaning", "hint"),
        ))
    return hints
