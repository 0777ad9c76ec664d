"""
OpenAI-backed content generation for English Mastery Hub.

This module handles:
- Paragraph generation (a fresh Vietnamese paragraph about a topic)
- Sentence feedback (reference translation, score, errors, comment)
- Sentence hints (key vocabulary with Vietnamese meanings)

Every call asks for JSON constrained by a schema from ``schemas``, runs
through the RetryingRequestExecutor, and validates the reply before use.
Prompts are written in Vietnamese because the learner reads the feedback
in Vietnamese.
"""

import json
from typing import Any, Callable, Dict, List, Optional, TypeVar

from openai import AsyncOpenAI

from .config import Settings, DEFAULT_CHAT_MODEL, DEFAULT_TEMPERATURE
from .exceptions import GenerationError, ValidationError
from .logger import logger, Timer
from .models import Feedback, HintItem
from .retry import RetryingRequestExecutor
from .schemas import (
    FEEDBACK_SCHEMA, HINTS_SCHEMA, PARAGRAPH_SCHEMA,
    parse_feedback, parse_hints, parse_paragraph, response_format,
)

T = TypeVar("T")

MSG_EMPTY_TOPIC = "Vui lòng nhập chủ đề."
MSG_EMPTY_TRANSLATION = "Vui lòng nhập bản dịch của bạn."
MSG_EMPTY_SENTENCE = "Không có câu nào để luyện tập."
MSG_PARAGRAPH_FAILED = "Không thể tạo đoạn văn. Vui lòng thử lại."
MSG_FEEDBACK_FAILED = "Không thể nhận phản hồi. Vui lòng thử lại."
MSG_HINT_FAILED = "Không thể nhận gợi ý. Vui lòng thử lại."


class ContentGenerationClient:
    """
    Builds prompts, calls the chat model and turns replies into models.

    ``transport`` is an ``AsyncOpenAI`` instance (or anything exposing the
    same ``chat.completions.create`` coroutine). When it is None every
    operation fails with GenerationError.
    """

    def __init__(
        self,
        transport: Optional[AsyncOpenAI],
        executor: Optional[RetryingRequestExecutor] = None,
        model: str = DEFAULT_CHAT_MODEL,
        temperature: float = DEFAULT_TEMPERATURE,
    ):
        self._transport = transport
        self._executor = executor or RetryingRequestExecutor()
        self.model = model
        self.temperature = temperature

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[AsyncOpenAI],
        executor: Optional[RetryingRequestExecutor] = None,
    ) -> "ContentGenerationClient":
        return cls(
            transport,
            executor=executor or RetryingRequestExecutor.from_settings(settings),
            model=settings.model,
            temperature=settings.temperature,
        )

    def is_api_available(self) -> bool:
        """Check if a chat transport is configured."""
        return self._transport is not None

    # -----------------------------------------------------------------------
    # Shared request path
    # -----------------------------------------------------------------------

    async def _request(
        self,
        task: str,
        prompt: str,
        schema_name: str,
        schema: Dict[str, Any],
        parse: Callable[[str], T],
        failure_message: str,
    ) -> T:
        if self._transport is None:
            logger.api_error(f"{task}: OpenAI client not configured")
            raise GenerationError(f"{task}: OpenAI client not configured",
                                  user_message=failure_message)

        messages = [
            {
                "role": "system",
                "content": (
                    "Bạn là gia sư tiếng Anh cho người Việt. "
                    "Chỉ trả về một đối tượng JSON đúng cấu trúc được yêu cầu, không kèm văn bản nào khác."
                ),
            },
            {"role": "user", "content": prompt},
        ]

        async def attempt() -> T:
            logger.api_call(f"chat.completions.create ({task})", model=self.model)
            with Timer() as timer:
                completion = await self._transport.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format=response_format(schema_name, schema),
                    temperature=self.temperature,
                )
            logger.api_response(f"chat.completions.create ({task})", duration_ms=timer.duration_ms)
            raw = completion.choices[0].message.content
            logger.debug(f"{task} reply: {len(raw or '')} chars")
            return parse(raw)

        try:
            return await self._executor.execute(attempt)
        except Exception as e:
            logger.error(f"{task} failed after retries: {e}", exc_info=True)
            raise GenerationError(f"{task} failed: {e}", user_message=failure_message) from e

    # -----------------------------------------------------------------------
    # Paragraph generation
    # -----------------------------------------------------------------------

    async def generate_paragraph(self, topic: str) -> str:
        """Compose a new 8–12 sentence Vietnamese paragraph (B1–B2) about ``topic``."""
        if not topic or not topic.strip():
            raise ValidationError("Topic must not be empty", user_message=MSG_EMPTY_TOPIC)

        logger.api(f"generate_paragraph() called for topic: {topic.strip()}")
        prompt = (
            f'Dựa trên chủ đề "{topic.strip()}", hãy viết một đoạn văn tiếng Việt hoàn toàn mới, '
            "dài khoảng 8-12 câu, ở trình độ B1-B2. Đoạn văn phải tự nhiên và phù hợp cho người "
            "học tiếng Anh luyện dịch. "
            'Trả về một đối tượng JSON với khóa "paragraph" chứa toàn bộ đoạn văn dưới dạng một chuỗi duy nhất.'
        )
        paragraph = await self._request(
            "paragraph", prompt, "paragraph", PARAGRAPH_SCHEMA, parse_paragraph, MSG_PARAGRAPH_FAILED,
        )
        logger.success(f"Paragraph generated: {paragraph[:50]}...")
        return paragraph

    # -----------------------------------------------------------------------
    # Sentence feedback
    # -----------------------------------------------------------------------

    async def get_feedback_for_sentence(self, source_sentence: str, user_translation: str) -> Feedback:
        """
        Grade a learner's English translation of one Vietnamese sentence.

        The model provides a reference translation, an accuracy score from 0
        to 100, up to three of the most important errors (category plus a
        Vietnamese explanation) and one encouraging comment.
        """
        if not source_sentence or not source_sentence.strip():
            raise ValidationError("Source sentence must not be empty", user_message=MSG_EMPTY_SENTENCE)
        if not user_translation or not user_translation.strip():
            raise ValidationError("Translation must not be empty", user_message=MSG_EMPTY_TRANSLATION)

        logger.api(f"get_feedback_for_sentence() called for: {source_sentence.strip()[:50]}")
        payload = json.dumps(
            {
                "vietnamese_sentence": source_sentence.strip(),
                "learner_translation": user_translation.strip(),
            },
            ensure_ascii=False,
        )
        prompt = (
            "Bạn là một gia sư AI chuyên nghiệp, phản hồi nhanh và sửa lỗi trọng tâm. "
            "Dưới đây là câu tiếng Việt gốc và bản dịch tiếng Anh của học viên:\n"
            f"{payload}\n\n"
            "Hãy trả về một đối tượng JSON gồm:\n"
            '1. "correct_translation": bản dịch tiếng Anh chuẩn, tự nhiên và hay nhất.\n'
            '2. "accuracy_score": điểm chính xác của bản dịch học viên so với bản chuẩn, từ 0 đến 100.\n'
            '3. "errors": mảng tối đa 3 lỗi quan trọng nhất (Ngữ pháp, Từ vựng, Cấu trúc câu...). '
            'Mỗi lỗi có "type" và "explanation" (giải thích bằng tiếng Việt, đặt các từ quan trọng '
            "trong dấu nháy đơn, ví dụ: 'word').\n"
            '4. "general_feedback": một nhận xét chung mang tính động viên bằng tiếng Việt.'
        )
        feedback = await self._request(
            "feedback", prompt, "sentence_feedback", FEEDBACK_SCHEMA, parse_feedback, MSG_FEEDBACK_FAILED,
        )
        logger.success(f"Feedback received: score {feedback.accuracy_score}, {len(feedback.errors)} error(s)")
        return feedback

    # -----------------------------------------------------------------------
    # Sentence hints
    # -----------------------------------------------------------------------

    async def get_hint_for_sentence(self, source_sentence: str) -> List[HintItem]:
        """List 3–5 key English words needed to translate ``source_sentence``."""
        if not source_sentence or not source_sentence.strip():
            raise ValidationError("Source sentence must not be empty", user_message=MSG_EMPTY_SENTENCE)

        logger.api(f"get_hint_for_sentence() called for: {source_sentence.strip()[:50]}")
        prompt = (
            f'Cho câu tiếng Việt sau: "{source_sentence.strip()}". '
            "Hãy liệt kê 3-5 từ vựng tiếng Anh quan trọng nhất mà người học cần biết để dịch câu này, "
            "kèm nghĩa tiếng Việt của từng từ. "
            'Trả về một đối tượng JSON có khóa "hints" là mảng các đối tượng với khóa '
            '"english_word" và "vietnamese_meaning".'
        )
        hints = await self._request(
            "hint", prompt, "sentence_hints", HINTS_SCHEMA, parse_hints, MSG_HINT_FAILED,
        )
        logger.success(f"Hint received: {', '.join(h.english_word for h in hints)}")
        return hints
