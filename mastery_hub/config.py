"""
Runtime configuration for English Mastery Hub.

Settings are read from the process environment, optionally primed from a
.env file at the project root:

    OPENAI_API_KEY=sk-...
    MASTERY_HUB_MODEL=gpt-4o-mini

We use python-dotenv + os.getenv so secrets stay out of git. Only this
module touches the environment; everything else receives a ``Settings``.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI

from .logger import logger

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_TEMPERATURE = 0.5
DEFAULT_MAX_RETRIES = 3
DEFAULT_INITIAL_DELAY_MS = 1000


@dataclass(frozen=True)
class Settings:
    """Configuration handed to the client, executor and preferences."""
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: str = DEFAULT_CHAT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_delay_ms: int = DEFAULT_INITIAL_DELAY_MS
    debug: bool = True
    theme: Optional[str] = None      # "dark" / "light"; None follows the system

    @property
    def masked_api_key(self) -> str:
        """API key with only the first 8 and last 4 characters visible."""
        if not self.api_key:
            return ""
        if len(self.api_key) > 12:
            return f"{self.api_key[:8]}...{self.api_key[-4:]}"
        return "***"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"{name} is not a valid integer: {raw!r}, using {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"{name} is not a valid number: {raw!r}, using {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw not in ("0", "false", "no", "off")


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """Load settings from .env and the environment."""
    logger.env("Loading environment variables from .env file...")
    if load_dotenv(dotenv_path):
        logger.env_success("dotenv file loaded successfully")
    else:
        logger.warning("No .env file found or file is empty")

    theme = os.getenv("MASTERY_HUB_THEME", "").strip().lower() or None
    if theme not in (None, "dark", "light"):
        logger.warning(f"MASTERY_HUB_THEME must be 'dark' or 'light', got {theme!r}; ignoring")
        theme = None

    settings = Settings(
        api_key=os.getenv("OPENAI_API_KEY") or None,
        base_url=os.getenv("OPENAI_BASE_URL") or None,
        model=os.getenv("MASTERY_HUB_MODEL", DEFAULT_CHAT_MODEL),
        temperature=_env_float("MASTERY_HUB_TEMPERATURE", DEFAULT_TEMPERATURE),
        max_retries=max(0, _env_int("MASTERY_HUB_MAX_RETRIES", DEFAULT_MAX_RETRIES)),
        initial_delay_ms=max(0, _env_int("MASTERY_HUB_INITIAL_DELAY_MS", DEFAULT_INITIAL_DELAY_MS)),
        debug=_env_bool("MASTERY_HUB_DEBUG", True),
        theme=theme,
    )
    logger.enabled = settings.debug

    if settings.api_key:
        logger.env_success(f"OPENAI_API_KEY found: {settings.masked_api_key}")
    else:
        logger.env_error("OPENAI_API_KEY not found in environment!")
    logger.env(f"Chat model: {settings.model}")
    logger.env(f"Retry policy: {settings.max_retries} retries, {settings.initial_delay_ms}ms initial delay")
    return settings


def build_client(settings: Settings) -> Optional[AsyncOpenAI]:
    """Create the async OpenAI transport, or None when no API key is configured."""
    if not settings.api_key:
        logger.warning("AI calls are disabled until OPENAI_API_KEY is set")
        return None
    logger.env("Initializing OpenAI client...")
    client = AsyncOpenAI(api_key=settings.api_key, base_url=settings.base_url)
    logger.env_success("OpenAI client initialized successfully")
    return client
