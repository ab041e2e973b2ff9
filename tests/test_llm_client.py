"""Collaborator wrapper: timeout, failure mapping, question phrasing."""

import time
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from core import config
from mt_brain import llm_client
from mt_brain.clarification_agent import local_question, phrase_question
from mt_brain.llm_client import (
    CollaboratorUnavailable,
    call_chat,
    call_with_timeout,
    generate_bounded,
)
from mt_brain.schema import Field, ScenarioAttributes


def _completion(content):
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


@pytest.fixture
def chat_client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(llm_client, "get_client", lambda: client)
    return client


class TestTimeout:

    def test_returns_value(self):
        assert call_with_timeout(lambda a, b: a + b, 2, 3, timeout=1.0) == 5

    def test_slow_call_times_out(self):
        with pytest.raises(CollaboratorUnavailable, match="timed out"):
            call_with_timeout(time.sleep, 0.5, timeout=0.05)


class TestGenerateBounded:

    def test_strips_text(self):
        assert generate_bounded(lambda p: "  hello  \n", "prompt", timeout=1.0) == "hello"

    def test_generator_error_is_wrapped(self, failing_generator):
        with pytest.raises(CollaboratorUnavailable, match="RuntimeError"):
            generate_bounded(failing_generator, "prompt", timeout=1.0)

    @pytest.mark.parametrize("out", ["", "   ", None])
    def test_empty_text(self, out):
        with pytest.raises(CollaboratorUnavailable):
            generate_bounded(lambda p: out, "prompt", timeout=1.0)


class TestOpenAIWrapper:

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr(config, "OPENAI_API_KEY", None)
        monkeypatch.setattr(llm_client, "_client", None)
        with pytest.raises(CollaboratorUnavailable, match="OPENAI_API_KEY"):
            llm_client.get_client()

    def test_call_chat(self, chat_client):
        chat_client.chat.completions.create.return_value = _completion(" A short answer. ")
        assert call_chat([{"role": "user", "content": "hi"}]) == "A short answer."
        kwargs = chat_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == llm_client.MODEL

    def test_api_error(self, chat_client):
        chat_client.chat.completions.create.side_effect = OpenAIError("rate limited")
        with pytest.raises(CollaboratorUnavailable, match="rate limited"):
            call_chat([{"role": "user", "content": "hi"}])

    def test_empty_completion(self, chat_client):
        chat_client.chat.completions.create.return_value = _completion(None)
        with pytest.raises(CollaboratorUnavailable):
            call_chat([{"role": "user", "content": "hi"}])

    def test_generate_text_sends_system_prompt(self, chat_client):
        chat_client.chat.completions.create.return_value = _completion("ok")
        llm_client.generate_text("What is a Type IV change?")
        messages = chat_client.chat.completions.create.call_args.kwargs["messages"]
        assert messages[0] == {"role": "system", "content": llm_client.SYSTEM_PROMPT}
        assert messages[1]["content"] == "What is a Type IV change?"


class TestQuestions:

    def test_equivalence_question_names_vendors(self, westinghouse_to_abb):
        text = local_question(Field.EQUIVALENCE, westinghouse_to_abb)
        assert text == (
            "Do you have equivalency documentation showing the ABB pump "
            "meets the original Westinghouse specifications?"
        )

    def test_question_without_equipment(self, empty_attrs):
        assert "equipment" in local_question(Field.DURATION, empty_attrs)

    def test_phrase_question_keeps_first_line(self):
        generator = MagicMock(return_value="Who made the pump you have now?\nThanks!")
        attrs = ScenarioAttributes(equipment_type="pump")
        assert phrase_question(Field.ORIGINAL_MANUFACTURER, attrs, generator, timeout=1.0) == (
            "Who made the pump you have now?"
        )

    def test_phrase_question_failure(self, failing_generator):
        with pytest.raises(CollaboratorUnavailable):
            phrase_question(Field.EQUIPMENT_TYPE, ScenarioAttributes(), failing_generator, timeout=1.0)
