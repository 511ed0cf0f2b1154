"""
Note Service - turns free-text queries into Noji notes.

For each comma-separated item: ask the LLM for a dictionary entry, split
it into front (first line) and back (the rest), and store it in the vocab
or sentence deck. Storing is best-effort; the generated text is returned
either way.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional

import litellm

from ..core.config import Settings, get_settings
from ..domain.errors import DomainError, GenerationError
from ..utils.formatting import markdown_to_note_html
from .dictionary_prompt import build_dictionary_prompt
from .noji_client import NojiClient

logger = logging.getLogger(__name__)

NO_RESULT = "No result"
ENTRY_SEPARATOR = "\n\n\n"


@dataclass(frozen=True)
class DictionaryEntry:
    query: str
    front: str
    back: str

    def as_text(self) -> str:
        return f"{self.front};\n{self.back}"


def split_queries(query: str) -> List[str]:
    return [item.strip() for item in query.split(",") if item.strip()]


def split_entry(query: str, text: str) -> DictionaryEntry:
    """First line is the front, everything after it the back."""
    lines = text.split("\n")
    front = lines[0] or query
    back = "\n".join(lines[1:]).strip()
    return DictionaryEntry(query=query, front=front, back=back)


class NoteService:
    """Generates dictionary entries and stores them as Noji notes."""

    def __init__(self, client: NojiClient, settings: Optional[Settings] = None) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.model = self.settings.llm_model

    def deck_for(self, item: str) -> Optional[str]:
        """Phrases of two or more words go to the sentence deck."""
        if len(item.split()) >= 2:
            return self.settings.sentence_deck_id
        return self.settings.vocab_deck_id

    async def generate_entry(self, item: str) -> DictionaryEntry:
        """Ask the LLM for a dictionary entry for one word or phrase.

        Raises:
            GenerationError: If the LLM call fails.
        """
        messages = [{"role": "user", "content": build_dictionary_prompt(item)}]
        try:
            logger.info(f"Calling LLM API with model: {self.model}")
            response = await asyncio.to_thread(
                litellm.completion,
                model=self.model,
                messages=messages,
                api_key=self.settings.gemini_api_key,
            )
        except Exception as e:
            raise GenerationError(f"LLM request failed for '{item}': {e}") from e

        content = response.choices[0].message.content or ""
        definition = content.strip() or NO_RESULT
        logger.info(
            "LLM response received: query=%s length=%d", item, len(definition)
        )
        return split_entry(item, definition)

    async def store_entry(self, entry: DictionaryEntry) -> bool:
        """Create the Noji note for an entry. Returns False on failure."""
        deck_id = self.deck_for(entry.query)
        if not deck_id:
            logger.warning("No deck configured for '%s', note not created", entry.query)
            return False

        front_html = f"<p>{markdown_to_note_html(entry.front)}</p>"
        back_html = f"<p>{markdown_to_note_html(entry.back)}</p>"
        try:
            await self.client.create_note(front_html, back_html, deck_id)
        except (DomainError, ValueError) as e:
            logger.warning(
                "Failed to create note in Noji for '%s' (deck %s), continuing: %s",
                entry.query,
                deck_id,
                e,
            )
            return False

        logger.info("Note created in Noji: front=%s deck=%s", entry.front, deck_id)
        return True

    async def _process_item(self, item: str) -> DictionaryEntry:
        entry = await self.generate_entry(item)
        await self.store_entry(entry)
        return entry

    async def generate_cards(self, query: str) -> str:
        """Generate and store entries for every item of a comma-separated query.

        Returns the entries as ``front;\\nback`` blocks separated by blank lines.
        """
        items = split_queries(query)
        entries = await asyncio.gather(*(self._process_item(item) for item in items))
        return ENTRY_SEPARATOR.join(entry.as_text() for entry in entries)
