"""
Turn whatever the model (or a client relaying it) handed back into a total
`StudyMaterials` record.

Three stages:
1. envelope detection — which wrapper the reply arrived in
2. payload decoding — structured object, fenced JSON text, or bare JSON text
3. total-schema reconstruction — every missing field filled with its default
"""
from dataclasses import dataclass
from typing import Any, Union

from errors import MalformedResponse, MissingStudyMaterials
from logger import get_logger
from models import (
    NO_ANSWER,
    NO_BRIEF_SUMMARY,
    NO_DETAILED_SUMMARY,
    NO_EXPLANATION,
    NO_QUESTION,
    MISSING_URL,
    TRUE_FALSE_OPTIONS,
    UNKNOWN_CHANNEL,
    UNKNOWN_DURATION,
    UNTITLED_COURSE,
    UNTITLED_VIDEO,
    Course,
    Flashcard,
    Flashcards,
    QuizQuestion,
    Resources,
    ShortNotes,
    StudyMaterials,
    Summary,
    VideoResource,
)
from utils import parse_json_payload

log = get_logger(__name__)

Payload = Union[str, dict, list]


# ── Envelopes ─────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BareStringEnvelope:
    """`{"response": "<model text>"}` — what our own endpoints return."""
    response: Any

    def payload(self) -> Payload:
        return self.response


@dataclass(frozen=True)
class NestedResponseEnvelope:
    """`{"data": {"response": "<model text>"}}` — an HTTP client wrapper around ours."""
    data: dict

    def payload(self) -> Payload:
        return self.data["response"]


@dataclass(frozen=True)
class StructuredDataEnvelope:
    """`{"data": {...}}` — the reply already decoded by whoever relayed it."""
    data: Any

    def payload(self) -> Payload:
        return self.data


@dataclass(frozen=True)
class RawPayload:
    """No envelope: the model text itself, or an already-parsed object."""
    value: Any

    def payload(self) -> Payload:
        return self.value


Envelope = Union[BareStringEnvelope, NestedResponseEnvelope, StructuredDataEnvelope, RawPayload]


def detect_envelope(reply: Any) -> Envelope:
    if isinstance(reply, StudyMaterials):
        return RawPayload({"studyMaterials": reply.model_dump(by_alias=True)})
    if isinstance(reply, str):
        return RawPayload(reply)
    if not isinstance(reply, dict):
        raise MalformedResponse(repr(reply), reason="Invalid response structure")

    if "response" in reply and isinstance(reply["response"], (str, dict)):
        return BareStringEnvelope(reply["response"])
    data = reply.get("data")
    if isinstance(data, dict) and isinstance(data.get("response"), (str, dict)):
        return NestedResponseEnvelope(data)
    if isinstance(data, (dict, str)) and data:
        return StructuredDataEnvelope(data)
    if "studyMaterials" in reply:
        return RawPayload(reply)
    raise MalformedResponse(repr(reply), reason="Invalid response structure")


# ── Field coercion ────────────────────────────────────────────────────────────

def _text(value: Any, default: str) -> str:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip() or default
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items = []
    for item in value:
        if isinstance(item, str):
            if item.strip():
                items.append(item.strip())
        elif isinstance(item, (int, float)) and not isinstance(item, bool):
            items.append(str(item))
        elif isinstance(item, dict):
            # {"term": "X", "definition": "Y"} → "X - Y"
            parts = [str(v).strip() for v in item.values() if isinstance(v, (str, int, float)) and str(v).strip()]
            if parts:
                items.append(" - ".join(parts))
    return items


def _dicts(value: Any) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


# ── Sections ──────────────────────────────────────────────────────────────────

def _short_notes(raw: Any) -> ShortNotes:
    raw = _object(raw)
    return ShortNotes(
        key_points=_string_list(raw.get("key_points")),
        important_terms=_string_list(raw.get("important_terms")),
        concepts_explained=_string_list(raw.get("concepts_explained")),
        examples=_string_list(raw.get("examples")),
    )


def _summary(raw: Any) -> Summary:
    if isinstance(raw, str):
        return Summary(brief=_text(raw, NO_BRIEF_SUMMARY))
    raw = _object(raw)
    return Summary(
        brief=_text(raw.get("brief"), NO_BRIEF_SUMMARY),
        detailed=_text(raw.get("detailed"), NO_DETAILED_SUMMARY),
    )


def _flashcard(raw: dict) -> Flashcard:
    return Flashcard(
        front=_text(raw.get("front"), NO_QUESTION),
        back=_text(raw.get("back"), NO_ANSWER),
    )


def _flashcards(raw: Any) -> Flashcards:
    raw = _object(raw)
    return Flashcards(
        basic=[_flashcard(card) for card in _dicts(raw.get("basic"))],
        advanced=[_flashcard(card) for card in _dicts(raw.get("advanced"))],
    )


def _explanation(raw: dict) -> str:
    return _text(raw.get("answerExplanation") or raw.get("explanation"), NO_EXPLANATION)


def _true_false_index(answer: Any) -> int:
    if isinstance(answer, str):
        return 0 if answer.strip().lower() in ("true", "t", "yes") else 1
    return 0 if answer else 1


def _multiple_choice(raw: dict) -> Union[QuizQuestion, None]:
    options = raw.get("options")
    if isinstance(options, dict):
        keys = [str(k) for k in options.keys()]
        values = [_text(v, "") for v in options.values()]
    elif isinstance(options, list):
        values = [_text(v, "") for v in options]
        keys = [chr(ord("A") + i) for i in range(len(values))]
    else:
        keys, values = [], []

    question = _text(raw.get("question"), NO_QUESTION)
    if not values:
        log.warning("Dropping multiple-choice question without options: %.80s", question)
        return None

    answer = raw.get("correctAnswer")
    wanted = str(answer).strip().upper() if answer is not None else ""
    upper_keys = [k.strip().upper() for k in keys]
    if wanted and wanted in upper_keys:
        index = upper_keys.index(wanted)
    elif (
        isinstance(options, list)
        and isinstance(answer, int)
        and not isinstance(answer, bool)
        and 0 <= answer < len(values)
    ):
        # list options carry no keys of their own, so an integer is a position
        index = answer
    else:
        log.warning("Correct answer %r not among options %s; defaulting to the first", answer, keys)
        index = 0

    return QuizQuestion(
        question=question,
        options=values,
        answer_index=index,
        explanation=_explanation(raw),
    )


def _true_false(raw: dict) -> QuizQuestion:
    return QuizQuestion(
        question=_text(raw.get("question"), NO_QUESTION),
        options=list(TRUE_FALSE_OPTIONS),
        answer_index=_true_false_index(raw.get("correctAnswer")),
        explanation=_explanation(raw),
    )


def _canonical_question(raw: dict) -> Union[QuizQuestion, None]:
    options = raw.get("options")
    index = raw.get("answerIndex")
    if "answerIndex" not in raw or not isinstance(options, list):
        if "options" in raw:
            return _multiple_choice(raw)
        return _true_false(raw)

    values = [_text(v, "") for v in options]
    if not values:
        return None
    if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(values):
        index = 0
    return QuizQuestion(
        question=_text(raw.get("question"), NO_QUESTION),
        options=values,
        answer_index=index,
        explanation=_explanation(raw),
    )


def _quiz_questions(raw: Any) -> list[QuizQuestion]:
    if isinstance(raw, list):
        # already flattened: a record that went through here before
        questions = [_canonical_question(q) for q in _dicts(raw)]
    else:
        raw = _object(raw)
        questions = [_multiple_choice(q) for q in _dicts(raw.get("multipleChoice"))]
        questions += [_true_false(q) for q in _dicts(raw.get("trueFalse"))]
    return [q for q in questions if q is not None]


def _resources(raw: Any) -> Resources:
    raw = _object(raw)
    courses = [
        Course(title=_text(c.get("title"), UNTITLED_COURSE), url=_text(c.get("url"), MISSING_URL))
        for c in _dicts(raw.get("recommendedCourses"))
    ]
    videos = [
        VideoResource(
            title=_text(v.get("title"), UNTITLED_VIDEO),
            channel=_text(v.get("channel"), UNKNOWN_CHANNEL),
            url=_text(v.get("url"), MISSING_URL),
            duration=_text(v.get("duration"), UNKNOWN_DURATION),
        )
        for v in _dicts(raw.get("youtubeLinks"))
    ]
    return Resources(recommended_courses=courses, youtube_links=videos)


# ── Entry point ───────────────────────────────────────────────────────────────

def build_study_materials(parsed: Any) -> StudyMaterials:
    """Rebuild a total StudyMaterials from a parsed `{"studyMaterials": {...}}` object."""
    if not isinstance(parsed, dict):
        raise MissingStudyMaterials()
    raw = parsed.get("studyMaterials")
    if not isinstance(raw, dict):
        raise MissingStudyMaterials()

    return StudyMaterials(
        short_notes=_short_notes(raw.get("shortNotes")),
        summary=_summary(raw.get("summary")),
        flashcards=_flashcards(raw.get("flashcards")),
        quiz_questions=_quiz_questions(raw.get("quizQuestions")),
        resources=_resources(raw.get("resources")),
    )


def normalize_response(reply: Any) -> StudyMaterials:
    """
    Decode a model reply in any supported envelope into StudyMaterials.

    Raises MalformedResponse when no envelope or JSON can be recovered, and
    MissingStudyMaterials when the parsed object lacks `studyMaterials`.
    """
    envelope = detect_envelope(reply)
    parsed = parse_json_payload(envelope.payload())
    materials = build_study_materials(parsed)
    log.debug(
        "Normalized %s: %d flashcards, %d quiz questions",
        type(envelope).__name__,
        len(materials.flashcards.all()),
        len(materials.quiz_questions),
    )
    return materials
