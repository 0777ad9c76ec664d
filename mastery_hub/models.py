from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class AppView(str, Enum):
    """Which screen the presentation layer should show."""
    SETUP = "SETUP"            # No active session; choose or generate a paragraph
    PRACTICE = "PRACTICE"      # Translating sentence by sentence
    COMPLETED = "COMPLETED"    # Last sentence advanced past; waiting for finish()


@dataclass(frozen=True)
class ErrorItem:
    """One prioritized mistake in a learner translation."""
    type: str                        # Category label, e.g. "Ngữ pháp", "Từ vựng"
    explanation: str                 # Vietnamese explanation of the mistake


@dataclass(frozen=True)
class Feedback:
    """Grading result for one translated sentence."""
    correct_translation: str         # Idiomatic reference translation
    accuracy_score: int              # 0–100
    general_feedback: str            # Encouraging overall comment
    errors: List[ErrorItem] = field(default_factory=list)   # At most 3, most important first

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class HintItem:
    """Key vocabulary for translating a sentence."""
    english_word: str
    vietnamese_meaning: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PracticeSession:
    """In-memory state of one practice run."""
    paragraph: str
    sentences: Tuple[str, ...]
    current_index: int = 0
    user_translation: str = ""
    feedback: Optional[Feedback] = None
    hint: Optional[List[HintItem]] = None
    history: Dict[int, Feedback] = field(default_factory=dict)   # sentence index -> Feedback

    @property
    def current_sentence(self) -> str:
        return self.sentences[self.current_index]

    @property
    def is_last_sentence(self) -> bool:
        return self.current_index >= len(self.sentences) - 1
