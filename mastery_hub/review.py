"""
Helpers for presenting a graded sentence.

These compute what a view needs to highlight feedback (which characters of
the learner's translation differ from the reference, how to colour the score
and each error) without doing any rendering themselves.
"""

from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import List, Literal

DiffKind = Literal["equal", "added", "removed"]


@dataclass(frozen=True)
class DiffSegment:
    kind: DiffKind    # "added": only in the reference, "removed": only in the learner text
    text: str


def diff_translation(user_input: str, correct_translation: str) -> List[DiffSegment]:
    """Character-level diff from the learner's text to the reference translation."""
    matcher = SequenceMatcher(None, user_input, correct_translation, autojunk=False)
    segments: List[DiffSegment] = []

    def push(kind: DiffKind, text: str) -> None:
        if not text:
            return
        if segments and segments[-1].kind == kind:
            segments[-1] = DiffSegment(kind, segments[-1].text + text)
        else:
            segments.append(DiffSegment(kind, text))

    for op, i1, i2, j1, j2 in matcher.get_opcodes():
        if op == "equal":
            push("equal", user_input[i1:i2])
        else:
            # "replace" is a removal followed by an addition
            push("removed", user_input[i1:i2])
            push("added", correct_translation[j1:j2])
    return segments


def score_band(score: int) -> str:
    """'high' from 80, 'medium' from 50, otherwise 'low'."""
    if score >= 80:
        return "high"
    if score >= 50:
        return "medium"
    return "low"


_CATEGORY_KEYWORDS = (
    ("grammar", ("ngữ pháp", "grammar")),
    ("vocabulary", ("từ vựng", "vocabulary")),
    ("structure", ("cấu trúc", "structure")),
)


def error_category(type_label: str) -> str:
    """Map a free-text error label (Vietnamese or English) to a fixed category."""
    label = (type_label or "").lower()
    for category, keywords in _CATEGORY_KEYWORDS:
        if any(k in label for k in keywords):
            return category
    return "other"
