"""English Mastery Hub: Vietnamese-to-English paragraph translation practice."""

from typing import Optional

from .api import ContentGenerationClient
from .config import Settings, build_client, load_settings
from .exceptions import GenerationError, MasteryHubError, ParseError, ValidationError
from .logger import logger
from .models import AppView, ErrorItem, Feedback, HintItem, PracticeSession
from .preferences import Preferences
from .retry import RetryingRequestExecutor
from .review import DiffSegment, diff_translation, error_category, score_band
from .session import PracticeSessionController, split_sentences

__all__ = [
    "AppView", "ContentGenerationClient", "DiffSegment", "ErrorItem", "Feedback",
    "GenerationError", "HintItem", "MasteryHubError", "ParseError", "PracticeSession",
    "PracticeSessionController", "Preferences", "RetryingRequestExecutor", "Settings",
    "ValidationError", "create_controller", "diff_translation", "error_category",
    "load_settings", "score_band", "split_sentences",
]


def create_controller(settings: Optional[Settings] = None) -> PracticeSessionController:
    """Wire settings, the OpenAI transport, the retry executor and the client."""
    if settings is None:
        settings = load_settings()
    logger.separator("English Mastery Hub - Practice Core Initialization")
    client = ContentGenerationClient.from_settings(settings, build_client(settings))
    logger.info(f"AI generation available: {client.is_api_available()}")
    logger.separator("Practice Core Ready")
    return PracticeSessionController(client)
