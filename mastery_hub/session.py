"""
Practice session state machine.

The controller segments a Vietnamese paragraph into sentences, walks the
learner through them one at a time, and records the feedback each checked
sentence received. Views move SETUP -> PRACTICE -> COMPLETED -> SETUP;
``return_to_setup()`` leaves practice at any point.

Every AI-backed operation is a coroutine. Only one may be pending at a time
(``is_loading``); a second call while one is in flight is refused. A failed
operation leaves the session exactly as it was and stores a short Vietnamese
message in ``error`` for the presentation layer.
"""

import re
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from .api import ContentGenerationClient, MSG_EMPTY_TOPIC, MSG_EMPTY_TRANSLATION
from .exceptions import MasteryHubError, ValidationError
from .logger import logger
from .models import AppView, Feedback, HintItem, PracticeSession

DEFAULT_TOPIC = "kỳ nghỉ hè ở bãi biển"

# One or more non-terminators followed by any run of terminators.
SENTENCE_PATTERN = re.compile(r"[^.?!]+[.?!]*")

MSG_INVALID_PARAGRAPH = "Đoạn văn không hợp lệ hoặc không chứa câu nào."
MSG_BUSY = "AI đang xử lý, vui lòng đợi trong giây lát."
MSG_NO_SESSION = "Chưa có đoạn văn nào để luyện tập."
MSG_HINT_AFTER_FEEDBACK = "Câu này đã được chấm điểm, không cần gợi ý nữa."

LOADING_PARAGRAPH = "AI đang sáng tạo đoạn văn..."
LOADING_FEEDBACK = "AI đang chấm điểm..."
LOADING_HINT = "AI đang tìm gợi ý..."


def split_sentences(paragraph: str) -> List[str]:
    """
    Split a paragraph into sentences, keeping every character.

    Terminators stay attached to their sentence and leading whitespace stays
    with the sentence it precedes, so ``"".join(result) == paragraph`` whenever
    at least one sentence is found. Anything before the first sentence (such
    as a stray "?!") is prepended to it, and trailing whitespace after the
    last sentence is appended to it rather than returned as a sentence.
    """
    paragraph = paragraph or ""
    sentences: List[str] = []
    for match in SENTENCE_PATTERN.finditer(paragraph):
        chunk = match.group(0)
        if chunk.strip():
            if not sentences:
                chunk = paragraph[:match.start()] + chunk
            sentences.append(chunk)
        elif sentences:
            sentences[-1] += chunk
    return sentences


class PracticeSessionController:
    """Owns the active PracticeSession and every transition on it."""

    def __init__(self, client: ContentGenerationClient):
        self._client = client
        self._session: Optional[PracticeSession] = None
        self.view = AppView.SETUP
        self.topic = DEFAULT_TOPIC
        self.is_loading = False
        self.loading_message = ""
        self.error: Optional[str] = None
        self._exits = 0    # bumped by return_to_setup()

    # -----------------------------------------------------------------------
    # Read-only view of the session
    # -----------------------------------------------------------------------

    @property
    def session(self) -> Optional[PracticeSession]:
        return self._session

    @property
    def paragraph(self) -> str:
        return self._session.paragraph if self._session else ""

    @property
    def sentences(self) -> Tuple[str, ...]:
        return self._session.sentences if self._session else ()

    @property
    def current_index(self) -> int:
        return self._session.current_index if self._session else 0

    @property
    def current_sentence(self) -> str:
        return self._session.current_sentence if self._session else ""

    @property
    def is_last_sentence(self) -> bool:
        return self._session.is_last_sentence if self._session else False

    @property
    def user_translation(self) -> str:
        return self._session.user_translation if self._session else ""

    @property
    def feedback(self) -> Optional[Feedback]:
        return self._session.feedback if self._session else None

    @property
    def hint(self) -> Optional[List[HintItem]]:
        return self._session.hint if self._session else None

    @property
    def history(self) -> Dict[int, Feedback]:
        return dict(self._session.history) if self._session else {}

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _set_view(self, view: AppView) -> None:
        if view is not self.view:
            logger.ui_transition(self.view.value, view.value)
        self.view = view

    def _fail(self, error: MasteryHubError) -> None:
        self.error = error.user_message
        logger.warning(f"Operation refused or failed: {error}")
        raise error

    def _require_practice(self) -> PracticeSession:
        if self.view is not AppView.PRACTICE or self._session is None:
            self._fail(ValidationError("No sentence is being practised", user_message=MSG_NO_SESSION))
        return self._session

    @contextmanager
    def _pending(self, message: str) -> Iterator[None]:
        """Mark an AI request as in flight; refuse to start a second one."""
        if self.is_loading:
            self._fail(ValidationError("Another request is still pending", user_message=MSG_BUSY))
        self.is_loading = True
        self.loading_message = message
        self.error = None
        try:
            yield
        except MasteryHubError as e:
            self.error = e.user_message
            raise
        finally:
            self.is_loading = False
            self.loading_message = ""

    def _begin_session(self, paragraph_text: str) -> None:
        sentences = split_sentences(paragraph_text)
        if not sentences:
            self._fail(ValidationError("Paragraph is invalid or contains no sentences",
                                       user_message=MSG_INVALID_PARAGRAPH))

        self._session = PracticeSession(paragraph=paragraph_text, sentences=tuple(sentences))
        self.error = None
        logger.ui(f"Practice started with {len(sentences)} sentence(s)")
        self._set_view(AppView.PRACTICE)

    def _is_current(self, session: PracticeSession) -> bool:
        """False once the session a request was issued for has been replaced."""
        if self._session is session:
            return True
        logger.warning("Session changed while a request was pending; discarding its result")
        return False

    # -----------------------------------------------------------------------
    # Transitions
    # -----------------------------------------------------------------------

    def start_practice(self, paragraph_text: str) -> None:
        """Start practising a paragraph supplied by the learner."""
        if self.is_loading:
            self._fail(ValidationError("Another request is still pending", user_message=MSG_BUSY))
        self._begin_session(paragraph_text)

    async def start_with_generated_topic(self, topic: Optional[str] = None) -> None:
        """Generate a paragraph about ``topic`` (or the current topic) and start on it."""
        topic = self.topic if topic is None else topic
        if not topic or not topic.strip():
            self._fail(ValidationError("Topic must not be empty", user_message=MSG_EMPTY_TOPIC))

        exits = self._exits
        with self._pending(LOADING_PARAGRAPH):
            paragraph = await self._client.generate_paragraph(topic)
            if self._exits != exits:
                logger.warning("Learner left while the paragraph was generated; discarding it")
                return
            self._begin_session(paragraph)
        self.topic = topic

    def set_user_translation(self, text: str) -> None:
        """Record the learner's draft for the current sentence."""
        self._require_practice().user_translation = text

    async def check_current_translation(self, user_translation: Optional[str] = None) -> Feedback:
        """Grade the translation of the current sentence and file it in history."""
        session = self._require_practice()
        text = session.user_translation if user_translation is None else user_translation
        if not text or not text.strip():
            self._fail(ValidationError("Translation must not be empty", user_message=MSG_EMPTY_TRANSLATION))

        index = session.current_index
        with self._pending(LOADING_FEEDBACK):
            feedback = await self._client.get_feedback_for_sentence(session.sentences[index], text)

        if self._is_current(session) and session.current_index == index:
            session.user_translation = text
            session.feedback = feedback
            session.history[index] = feedback
            session.hint = None
            logger.ui(f"Sentence {index + 1}/{len(session.sentences)} scored {feedback.accuracy_score}")
        return feedback

    async def request_hint(self) -> List[HintItem]:
        """
        Fetch vocabulary hints for the current sentence.

        Refused once the sentence has feedback: the reference translation is
        already visible, so a hint would only repeat it.
        """
        session = self._require_practice()
        if session.feedback is not None:
            self._fail(ValidationError("Current sentence already has feedback",
                                       user_message=MSG_HINT_AFTER_FEEDBACK))

        index = session.current_index
        with self._pending(LOADING_HINT):
            hints = await self._client.get_hint_for_sentence(session.sentences[index])

        if self._is_current(session) and session.current_index == index and session.feedback is None:
            session.hint = hints
            logger.ui(f"Hint ready for sentence {index + 1}: {len(hints)} word(s)")
        return hints

    def advance(self) -> None:
        """Move to the next sentence, or complete the practice after the last one."""
        session = self._require_practice()
        if self.is_loading:
            self._fail(ValidationError("Another request is still pending", user_message=MSG_BUSY))
        self.error = None

        if not session.is_last_sentence:
            session.current_index += 1
            session.user_translation = ""
            session.feedback = None
            session.hint = None
            logger.ui(f"Advanced to sentence {session.current_index + 1}/{len(session.sentences)}")
        else:
            logger.success(f"Practice complete: {len(session.history)}/{len(session.sentences)} sentence(s) checked")
            self._set_view(AppView.COMPLETED)

    def average_score(self) -> Optional[float]:
        """Mean accuracy over the checked sentences, or None if none were checked."""
        if not self._session or not self._session.history:
            return None
        scores = [f.accuracy_score for f in self._session.history.values()]
        return sum(scores) / len(scores)

    def finish(self) -> None:
        """Leave the completed screen and return to setup."""
        if self.view is not AppView.COMPLETED:
            self._fail(ValidationError("Practice is not complete yet", user_message=MSG_NO_SESSION))
        self.return_to_setup()

    def return_to_setup(self) -> None:
        """Discard the session and go back to paragraph selection."""
        self._exits += 1
        self._session = None
        self.error = None
        self._set_view(AppView.SETUP)
