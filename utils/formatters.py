"""Text formatting helpers."""

import re
from typing import List, Optional


def format_number(value: int) -> str:
    """Format number with commas."""
    return f"{value:,}"


def truncate_text(text: str, max_length: int = 50, suffix: str = "...") -> str:
    """Truncate text to max length."""
    if len(text) <= max_length:
        return text
    return text[:max_length - len(suffix)] + suffix


def format_list(items: List[str], separator: str = ", ", last_separator: str = " and ") -> str:
    """Format a list of items with proper separators."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]}{last_separator}{items[1]}"

    return separator.join(items[:-1]) + f"{last_separator}{items[-1]}"


def ordinal(n: int) -> str:
    """1 -> 1st, 2 -> 2nd, 11 -> 11th"""
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def bold(text: str) -> str:
    return f"**{text}**"


def code_line(text: str) -> str:
    return f"`{text}`"


def mask_hint(answer: str) -> str:
    """Reveal the first letter of each word and mask the rest."""
    return re.sub(r'(?<=\w)\w', '_', answer)


def minutes_remaining(remaining: Optional[float]) -> str:
    if remaining is None:
        return ""
    if remaining <= 0:
        return "⏰ Time's up!"

    minutes = int(-(-remaining // 1))
    return f"⏰ {minutes} minute{'s' if minutes != 1 else ''} remaining"
