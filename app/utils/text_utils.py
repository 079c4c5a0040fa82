# app/utils/text_utils.py
"""Helpers for free-text search filters."""

LIKE_ESCAPE = "\\"


def like_pattern(text: str) -> str:
    """'%text%' for ILIKE, with the user's own % and _ matched literally."""
    text = (text or "").strip()
    text = text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2).replace("%", LIKE_ESCAPE + "%").replace("_", LIKE_ESCAPE + "_")
    return f"%{text}%"
