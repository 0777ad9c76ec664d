"""Shared fixtures for the practice core tests."""
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from mastery_hub.api import ContentGenerationClient
from mastery_hub.logger import logger
from mastery_hub.models import ErrorItem, Feedback, HintItem
from mastery_hub.retry import RetryingRequestExecutor
from mastery_hub.session import PracticeSessionController


class SleepRecorder:
    """Stand-in for asyncio.sleep that records requested waits in seconds."""

    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


def make_completion(content):
    """Shape of an openai ChatCompletion as far as the client reads it."""
    if not isinstance(content, str):
        content = json.dumps(content, ensure_ascii=False)
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep test output readable."""
    enabled = logger.enabled
    logger.enabled = False
    yield
    logger.enabled = enabled


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def transport():
    """Fake AsyncOpenAI: only chat.completions.create is used."""
    fake = MagicMock()
    fake.chat.completions.create = AsyncMock()
    return fake


@pytest.fixture
def api_client(transport, sleep):
    executor = RetryingRequestExecutor(max_retries=3, initial_delay_ms=1000, sleep=sleep)
    return ContentGenerationClient(transport, executor=executor, model="test-model", temperature=0.2)


@pytest.fixture
def paragraph():
    return "Tôi thích đi biển. Mùa hè năm nay rất nóng! Bạn có muốn đi cùng không?"


@pytest.fixture
def sample_feedback():
    return Feedback(
        correct_translation="I like going to the beach.",
        accuracy_score=85,
        general_feedback="Bản dịch tốt, chỉ cần chú ý 'going'.",
        errors=[ErrorItem(type="Ngữ pháp", explanation="Dùng 'going' sau 'like'.")],
    )


@pytest.fixture
def sample_hints():
    return [
        HintItem(english_word="beach", vietnamese_meaning="bãi biển"),
        HintItem(english_word="like", vietnamese_meaning="thích"),
        HintItem(english_word="go", vietnamese_meaning="đi"),
    ]


@pytest.fixture
def generation_client(sample_feedback, sample_hints):
    """Fake ContentGenerationClient returning canned results."""
    client = MagicMock(spec=ContentGenerationClient)
    client.generate_paragraph = AsyncMock(return_value="Hôm nay trời đẹp. Chúng tôi đi dạo.")
    client.get_feedback_for_sentence = AsyncMock(return_value=sample_feedback)
    client.get_hint_for_sentence = AsyncMock(return_value=sample_hints)
    return client


@pytest.fixture
def controller(generation_client):
    return PracticeSessionController(generation_client)


@pytest.fixture
def completion():
    return make_completion
