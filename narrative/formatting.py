from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")


def format_amount(amount: float) -> str:
    """Compact dollar amount: 1.2B, 350M, 40K."""
    if amount >= 1_000_000_000:
        return f"{amount / 1_000_000_000:.1f}B"
    if amount >= 1_000_000:
        return f"{amount / 1_000_000:.0f}M"
    if amount >= 1_000:
        return f"{amount / 1_000:.0f}K"
    return f"{amount:g}"


def slugify(name: str) -> str:
    return _WHITESPACE.sub("-", name.strip().lower())


def signed(value: float, digits: int = 2) -> str:
    return f"{value:+.{digits}f}"
