"""
render.py -- Draws client screens as terminal text.

Every function returns a string; main.py decides when to print. Colors come
from the active theme palette and are dropped entirely when color is off.
"""

import os
import re
import sys
from datetime import datetime
from typing import Optional

from client.notifications import Notification

W = 68  # output width

# ---------------------------------------------------------------------------
# ANSI color control
# ---------------------------------------------------------------------------

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from a string."""
    return _ANSI_RE.sub("", text)


def _use_color() -> bool:
    """Return True if stdout is a TTY and color has not been disabled.

    Respects NO_COLOR env var (https://no-color.org) and FORCE_COLOR.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


_color_enabled: Optional[bool] = None  # None = auto-detect


def disable_color() -> None:
    """Force-disable color output (called when --no-color flag is set)."""
    global _color_enabled
    _color_enabled = False


def enable_color() -> None:
    global _color_enabled
    _color_enabled = True


def _color_active() -> bool:
    if _color_enabled is not None:
        return _color_enabled
    return _use_color()


def _reset() -> str:
    return "\033[0m" if _color_active() else ""


def _bold() -> str:
    return "\033[1m" if _color_active() else ""


def _role(palette: dict[str, str], role: str) -> str:
    return palette.get(role, "") if _color_active() else ""


# ---------------------------------------------------------------------------
# Layout helpers
# ---------------------------------------------------------------------------


def _bar(char: str = "═") -> str:
    return char * W


def _section(title: str) -> str:
    return f"\n  {_bold()}{title}{_reset()}\n  {'─' * (W - 2)}"


def _wrap(text: str, indent: int = 4, width: int = W) -> str:
    """Simple word-wrap at `width` chars with leading indent."""
    words = text.split()
    lines = []
    line = " " * indent
    for word in words:
        if len(line) + len(word) + 1 > width:
            lines.append(line)
            line = " " * indent + word
        else:
            line += ("" if line.strip() == "" else " ") + word
    if line.strip():
        lines.append(line)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Screens
# ---------------------------------------------------------------------------


def greeting(hour: Optional[int] = None) -> str:
    """Good morning before 12:00, good afternoon before 18:00, else good evening."""
    if hour is None:
        hour = datetime.now().hour
    if hour < 12:
        return "Good morning"
    if hour < 18:
        return "Good afternoon"
    return "Good evening"


def render_header(user: Optional[dict], palette: dict[str, str], hour: Optional[int] = None) -> str:
    primary = _role(palette, "primary")
    bold, reset = _bold(), _reset()
    lines = [f"{primary}{bold}{_bar()}{reset}"]
    if user:
        name = user.get("name") or str(user.get("email", "")).split("@", 1)[0]
        lines.append(f"  {bold}RecordKeeper{reset}  │  {greeting(hour)}, {name}")
    else:
        lines.append(f"  {bold}RecordKeeper{reset}")
    lines.append(f"{primary}{bold}{_bar()}{reset}")
    return "\n".join(lines)


def render_records(records: list[dict], palette: dict[str, str], query: str = "") -> str:
    title = f"RECORDS matching \"{query}\"" if query else "RECORDS"
    out = [_section(f"{title} ({len(records)})")]
    if not records:
        muted = _role(palette, "text_secondary")
        out.append(f"    {muted}No records found.{_reset()}")
        return "\n".join(out)

    bold, reset = _bold(), _reset()
    primary = _role(palette, "primary")
    for record in records:
        out.append(f"    {primary}#{record.get('id', '?'):<5}{reset}{bold}{record.get('title', '')}{reset}")
        out.append(_wrap(str(record.get("description", "")), indent=10))
    return "\n".join(out)


def render_record_form(title: str, description: str, errors: dict[str, str], palette: dict[str, str]) -> str:
    error_color = _role(palette, "error")
    reset = _reset()
    out = [_section("RECORD")]
    for label, key, value in (("Title", "title", title), ("Description", "description", description)):
        out.append(f"    {label:<14} {value}")
        if key in errors:
            out.append(f"    {'':<14} {error_color}{errors[key]}{reset}")
    return "\n".join(out)


def render_profile(profile: dict, theme_mode: str, palette: dict[str, str]) -> str:
    prefs = profile.get("preferences") or {}
    out = [_section("PROFILE")]
    out.append(f"    {'Name':<14} {profile.get('name', '')}")
    out.append(f"    {'Email':<14} {profile.get('email', '')}")
    out.append(f"    {'Theme':<14} {prefs.get('theme', theme_mode)}")
    return "\n".join(out)


def render_errors(errors: dict[str, str], palette: dict[str, str]) -> str:
    error_color = _role(palette, "error")
    return "\n".join(f"  [!] {error_color}{message}{_reset()}" for message in errors.values())


_NOTE_TAGS = {"success": "[ok]", "error": "[!]", "warning": "[~]", "info": "[i]"}


def render_notification(note: Notification, palette: dict[str, str]) -> str:
    color = _role(palette, note.kind)
    tag = _NOTE_TAGS.get(note.kind, "[i]")
    heading = f"{_bold()}{note.title}{_reset()}: " if note.title else ""
    return f"  {color}{tag}{_reset()} {heading}{note.message}"


def render_not_found(path: str) -> str:
    return f"{_section('NOT FOUND')}\n    No page at {path}. Type 'help' for the list of commands."
