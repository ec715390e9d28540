"""
client/theme.py -- Light and dark palettes for the terminal client.

Each palette maps a role (primary, text, success...) to an ANSI SGR code.
render.py looks colors up by role so switching modes never touches the
rendering code. The chosen mode is persisted under THEME_KEY and is also
mirrored into the user's server-side preferences by ProfileScreen.
"""

import logging

from client.storage import THEME_KEY, LocalStorage

logger = logging.getLogger("recordkeeper.client.theme")

MODES = ("light", "dark")

LIGHT_PALETTE: dict[str, str] = {
    "primary": "\033[34m",  # blue
    "primary_dark": "\033[34;1m",
    "text": "\033[30m",
    "text_secondary": "\033[90m",
    "border": "\033[37m",
    "success": "\033[32m",
    "error": "\033[31m",
    "warning": "\033[33m",
    "info": "\033[36m",
}

DARK_PALETTE: dict[str, str] = {
    "primary": "\033[94m",  # bright blue
    "primary_dark": "\033[94;1m",
    "text": "\033[97m",
    "text_secondary": "\033[37m",
    "border": "\033[90m",
    "success": "\033[92m",
    "error": "\033[91m",
    "warning": "\033[93m",
    "info": "\033[96m",
}


class ThemeManager:
    def __init__(self, storage: LocalStorage) -> None:
        self.storage = storage
        saved = storage.get_item(THEME_KEY)
        self._mode = saved if saved in MODES else "light"

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def palette(self) -> dict[str, str]:
        return DARK_PALETTE if self._mode == "dark" else LIGHT_PALETTE

    def set_mode(self, mode: str) -> None:
        if mode not in MODES:
            raise ValueError(f"Theme must be one of {', '.join(MODES)}, got {mode!r}")
        self._mode = mode
        self.storage.set_item(THEME_KEY, mode)
        logger.debug("Theme set to %s", mode)

    def toggle(self) -> str:
        """Flip between light and dark. Returns the new mode."""
        self.set_mode("dark" if self._mode == "light" else "light")
        return self._mode
