"""Tests for the query-to-note pipeline with the LLM mocked out."""

from unittest.mock import MagicMock, patch

import pytest

from noji_srs.domain.errors import GenerationError
from noji_srs.services.dictionary_prompt import build_dictionary_prompt
from noji_srs.services.note_service import (
    NoteService,
    split_entry,
    split_queries,
)


def llm_response(content):
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    return response


@pytest.fixture
def mock_litellm():
    with patch("noji_srs.services.note_service.litellm") as mock:
        yield mock


@pytest.fixture
def notes(noji_client, settings):
    return NoteService(noji_client, settings)


class TestQueryParsing:
    def test_split_queries_trims_and_drops_empties(self):
        assert split_queries(" apple , , break a leg,") == ["apple", "break a leg"]

    def test_split_entry_first_line_is_front(self):
        entry = split_entry("apple", "*apple* (noun)\n\nquả táo\nIPA: /ˈæp.əl/")

        assert entry.front == "*apple* (noun)"
        assert entry.back == "quả táo\nIPA: /ˈæp.əl/"
        assert entry.as_text() == "*apple* (noun);\nquả táo\nIPA: /ˈæp.əl/"

    def test_split_entry_blank_first_line_falls_back_to_query(self):
        entry = split_entry("apple", "\nquả táo")
        assert entry.front == "apple"


class TestDeckRouting:
    def test_single_word_goes_to_vocab_deck(self, settings):
        assert NoteService(None, settings).deck_for("apple") == "101"

    def test_phrase_goes_to_sentence_deck(self, settings):
        assert NoteService(None, settings).deck_for("break a leg") == "202"

    def test_deck_defaults_to_first_configured(self, settings):
        settings.noji_vocab_deck_id = None
        settings.noji_sentence_deck_id = None
        service = NoteService(None, settings)

        assert service.deck_for("apple") == "101"
        assert service.deck_for("break a leg") == "101"


class TestPrompt:
    def test_word_prompt_has_ipa_and_synonyms(self):
        prompt = build_dictionary_prompt("Apple")

        assert '"Apple"' in prompt
        assert "*apple* (từ loại)" in prompt
        assert "IPA:" in prompt
        assert "Synonyms:" in prompt
        assert prompt.endswith("&q=Apple]")

    def test_phrase_prompt_skips_word_details(self):
        prompt = build_dictionary_prompt("break a leg")

        assert "IPA:" not in prompt
        assert "Synonyms:" not in prompt
        assert "(từ loại)" not in prompt
        assert prompt.endswith("&q=break%20a%20leg]")


class TestGenerateCards:
    @pytest.mark.asyncio
    async def test_generates_and_stores_each_item(self, notes, fake_noji, mock_litellm, settings):
        def answer(**kwargs):
            query = kwargs["messages"][0]["content"].split('"')[1]
            return llm_response(f"*{query}*\n\n**meaning** here")

        mock_litellm.completion.side_effect = answer

        text = await notes.generate_cards("apple, break a leg")

        assert text == "*apple*;\n**meaning** here\n\n\n*break a leg*;\n**meaning** here"
        assert mock_litellm.completion.call_count == 2
        call = mock_litellm.completion.call_args_list[0].kwargs
        assert call["model"] == settings.llm_model
        assert call["api_key"] == "test-gemini-key"

        stored = {n["note"]["deck_id"]: n["note"]["fields"] for n in fake_noji.created_notes}
        assert stored[101] == {
            "front_side": "<p><i>apple</i></p>",
            "back_side": "<p><b>meaning</b> here</p>",
        }
        assert stored[202]["front_side"] == "<p><i>break a leg</i></p>"

    @pytest.mark.asyncio
    async def test_empty_llm_answer_is_no_result(self, notes, mock_litellm):
        mock_litellm.completion.return_value = llm_response("")

        entry = await notes.generate_entry("apple")

        assert entry.front == "No result"
        assert entry.back == ""

    @pytest.mark.asyncio
    async def test_llm_failure_raises_generation_error(self, notes, mock_litellm):
        mock_litellm.completion.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(GenerationError, match="quota exceeded"):
            await notes.generate_cards("apple")

    @pytest.mark.asyncio
    async def test_note_failure_does_not_fail_generation(self, notes, fake_noji, mock_litellm):
        fake_noji.login_response = (500, {"error": "down"})
        mock_litellm.completion.return_value = llm_response("*apple*\nquả táo")

        text = await notes.generate_cards("apple")

        assert text == "*apple*;\nquả táo"
        assert fake_noji.created_notes == []

    @pytest.mark.asyncio
    async def test_store_without_deck_is_skipped(self, noji_client, settings, fake_noji):
        settings.noji_deck_id = ""
        settings.noji_vocab_deck_id = None
        service = NoteService(noji_client, settings)

        assert await service.store_entry(split_entry("apple", "*apple*\nquả táo")) is False
        assert fake_noji.requests == []
