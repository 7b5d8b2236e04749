from typing import Optional

from errors import InputValidationError
from logger import get_logger
from models import Session, StudyMaterials
from prompts import NO_CONTEXT_AVAILABLE, TUTOR_PROMPT
from services.generation import complete

log = get_logger(__name__)


def _numbered(title: str, items: list[str]) -> str:
    lines = [f"{title}:"]
    lines += [f"{idx}. {item}" for idx, item in enumerate(items, start=1)]
    return "\n".join(lines) + "\n"


def build_tutor_context(materials: StudyMaterials, raw_text: Optional[str] = None) -> str:
    """
    Flatten generated artifacts into one context string, in a fixed order:
    summary, key points, important terms, concepts explained, flashcards.

    Falls back to the raw input text when nothing was generated yet, and to a
    fixed notice when there is no raw input either.
    """
    if not materials.has_artifacts():
        if raw_text and raw_text.strip():
            return raw_text
        return NO_CONTEXT_AVAILABLE

    sections = []
    if not materials.summary.is_placeholder:
        sections.append(
            f"Brief Summary: {materials.summary.brief}\n"
            f"Detailed Summary: {materials.summary.detailed}\n"
        )

    notes = materials.short_notes
    if notes.key_points:
        sections.append(_numbered("Key Points", notes.key_points))
    if notes.important_terms:
        sections.append(_numbered("Important Terms", notes.important_terms))
    if notes.concepts_explained:
        sections.append(_numbered("Concepts Explained", notes.concepts_explained))

    cards = materials.flashcards.all()
    if cards:
        lines = ["Flashcards:"]
        for idx, card in enumerate(cards, start=1):
            lines.append(f"Q{idx}: {card.front}")
            lines.append(f"A{idx}: {card.back}")
        sections.append("\n".join(lines) + "\n")

    return "\n".join(sections)


def session_context(session: Session) -> str:
    raw_text = session.raw_input.text if session.raw_input else None
    return build_tutor_context(session.materials, raw_text)


async def answer_question(question: str, context: str) -> str:
    """Ask the model one question against the given context."""
    if not question or not question.strip() or not context or not context.strip():
        raise InputValidationError("Question and AI content are required.")

    prompt = TUTOR_PROMPT.format(context=context, question=question.strip())
    log.info("Tutor question (%d chars of context)", len(context))
    return await complete(
        messages=[{"role": "user", "content": prompt}],
        temperature=0.7,
        max_tokens=2048,
    )
