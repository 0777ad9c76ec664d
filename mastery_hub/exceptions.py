"""Exceptions raised by the practice core."""
from typing import Optional


class MasteryHubError(Exception):
    """Base exception for English Mastery Hub errors.

    ``user_message`` is the short, human-readable text a presentation layer
    shows in its error banner.
    """

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or message


class ValidationError(MasteryHubError):
    """Empty or invalid caller input (topic, paragraph or translation)."""
    pass


class ParseError(MasteryHubError):
    """Model reply was not valid JSON or lacked a required field."""
    pass


class GenerationError(MasteryHubError):
    """AI service call failed, or its reply stayed invalid, after all retries."""
    pass
