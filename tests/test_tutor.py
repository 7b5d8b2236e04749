import asyncio

import httpx
import openai
import pytest

from errors import EmptyModelResponse, InputValidationError, ModelInvocationError
from models import Flashcard, Flashcards, RawInput, Session, ShortNotes, StudyMaterials, Summary
from prompts import NO_CONTEXT_AVAILABLE
from services.normalizer import normalize_response
from services.tutor import answer_question, build_tutor_context, session_context


def test_context_follows_fixed_section_order(model_payload):
    context = build_tutor_context(normalize_response(model_payload))

    order = ["Brief Summary:", "Detailed Summary:", "Key Points:", "Important Terms:", "Concepts Explained:", "Flashcards:"]
    positions = [context.index(heading) for heading in order]
    assert positions == sorted(positions)
    assert "1. Photosynthesis turns light into chemical energy" in context
    assert "Q1: What is chlorophyll?\nA1: A green pigment" in context
    assert "Q2: Why are leaves green?" in context


def test_only_present_sections_are_included():
    materials = StudyMaterials(
        flashcards=Flashcards(advanced=[Flashcard(front="F", back="B")]),
    )
    context = build_tutor_context(materials)
    assert context.startswith("Flashcards:")
    assert "Summary" not in context
    assert "Key Points" not in context


def test_examples_alone_do_not_count_as_context():
    materials = StudyMaterials(short_notes=ShortNotes(examples=["an example"]))
    assert build_tutor_context(materials, "the raw text") == "the raw text"


def test_placeholder_summary_is_skipped_but_real_one_kept():
    assert build_tutor_context(StudyMaterials()) == NO_CONTEXT_AVAILABLE
    context = build_tutor_context(StudyMaterials(summary=Summary(brief="Short.")))
    assert "Brief Summary: Short." in context


def test_falls_back_to_raw_input_then_placeholder():
    session = Session(id="s1", raw_input=RawInput.from_text("Pasted chapter text"))
    assert session_context(session) == "Pasted chapter text"
    assert session_context(Session(id="s2")) == NO_CONTEXT_AVAILABLE
    link_session = Session(id="s3", raw_input=RawInput.from_link("https://example.org"))
    assert session_context(link_session) == NO_CONTEXT_AVAILABLE


def test_answer_question_sends_context_and_question(fake_model):
    completions = fake_model("Because chlorophyll reflects green light.")
    answer = asyncio.run(answer_question("Why are leaves green?", "Flashcards:\nQ1: ..."))

    assert answer == "Because chlorophyll reflects green light."
    prompt = completions.calls[0]["messages"][0]["content"]
    assert "Context:\nFlashcards:\nQ1: ..." in prompt
    assert "Question:\nWhy are leaves green?" in prompt


def test_empty_answer_raises(fake_model):
    fake_model("   ")
    with pytest.raises(EmptyModelResponse):
        asyncio.run(answer_question("Q?", "context"))


def test_provider_failure_is_surfaced(fake_model):
    request = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")
    fake_model(openai.APIConnectionError(request=request))
    with pytest.raises(ModelInvocationError):
        asyncio.run(answer_question("Q?", "context"))


def test_question_and_context_are_required(fake_model):
    completions = fake_model("unused")
    with pytest.raises(InputValidationError):
        asyncio.run(answer_question("", "context"))
    with pytest.raises(InputValidationError):
        asyncio.run(answer_question("Q?", " "))
    assert completions.calls == []
