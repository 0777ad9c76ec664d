"""Display preferences kept outside the practice session."""

from dataclasses import dataclass

from .config import Settings
from .logger import logger


@dataclass
class Preferences:
    """Theme choice for the presentation layer. In memory only."""
    dark_mode: bool = False

    @classmethod
    def from_settings(cls, settings: Settings, system_prefers_dark: bool = False) -> "Preferences":
        """Use the configured theme if there is one, else follow the system."""
        if settings.theme is not None:
            return cls(dark_mode=settings.theme == "dark")
        return cls(dark_mode=system_prefers_dark)

    @property
    def theme(self) -> str:
        return "dark" if self.dark_mode else "light"

    def toggle_theme(self) -> str:
        old = self.theme
        self.dark_mode = not self.dark_mode
        logger.ui_transition(f"theme {old}", f"theme {self.theme}")
        return self.theme
