"""
Text formatting utilities for card messages and Noji notes.

Contains:
- HTML escaping
- Noji card text to Telegram HTML (section headers, translations, bullets)
- LLM markdown to Noji note HTML
- The Telegram card message layout
"""

import re

from ..domain.models import Card

# Section headers that get bold + line breaks when a card arrives as a
# single-line preview. Entries are regex fragments.
CARD_SECTIONS = (
    "IPA",
    "Examples?",
    "Usage",
    "Collocations?",
    "Origin",
    "Synonyms",
)

_SECTION_PATTERNS = [
    re.compile(rf"\s+({header}:)\s*", re.IGNORECASE) for header in CARD_SECTIONS
]
_BOLD_STAR = re.compile(r"\*([^*]+)\*")
_BOLD_DOUBLE_STAR = re.compile(r"\*\*([^*]+)\*\*")


def escape_html(text: str) -> str:
    """Escape HTML special characters."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_definition(text: str) -> str:
    """Turn a Noji card back side into Telegram HTML.

    Multi-line text (from the structured content field) only gets its
    ``*bold*`` markers converted. Single-line previews are re-broken at
    section headers, translation arrows and bullets first.
    """
    text = escape_html(text)

    if "\n" in text:
        return _BOLD_STAR.sub(r"<b>\1</b>", text)

    formatted = text
    for pattern in _SECTION_PATTERNS:
        formatted = pattern.sub(r"\n\n<b>\1</b>\n", formatted)

    # Translation on its own line, next bullet after it
    formatted = re.sub(r"\s+(→)", r"\n\1", formatted)
    formatted = re.sub(r"(→[^•]+?)\s+•\s*", r"\1\n• ", formatted)
    # Header in *stars* right after a translation starts a new block
    formatted = re.sub(r"(→[^•]+?)\s+(\*[A-Z])", r"\1\n\n\2", formatted)

    formatted = _BOLD_STAR.sub(r"<b>\1</b>", formatted)
    return formatted.strip()


def format_card_message(card: Card) -> str:
    """Telegram HTML message for a delivered card."""
    return f"📚 <b>{escape_html(card.word)}</b>\n\n{card.definition}"


def markdown_to_note_html(text: str) -> str:
    """Convert LLM markdown to the HTML Noji stores in note fields."""
    html = _BOLD_DOUBLE_STAR.sub(r"<b>\1</b>", text)
    html = _BOLD_STAR.sub(r"<i>\1</i>", html)
    return html.replace("\n", "<br>")
