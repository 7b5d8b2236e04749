from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ── Placeholders ──────────────────────────────────────────────────────────────

NO_BRIEF_SUMMARY = "No brief summary available"
NO_DETAILED_SUMMARY = "No detailed summary available"
NO_QUESTION = "No question available"
NO_ANSWER = "No answer available"
NO_EXPLANATION = "No explanation provided"
UNTITLED_COURSE = "Untitled Course"
UNTITLED_VIDEO = "Untitled Video"
UNKNOWN_CHANNEL = "Unknown Channel"
UNKNOWN_DURATION = "Unknown Duration"
MISSING_URL = "#"
TRUE_FALSE_OPTIONS = ["True", "False"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ── Input ─────────────────────────────────────────────────────────────────────

class InputKind(str, Enum):
    text = "text"
    link = "link"
    file = "file"


class RawInput(BaseModel):
    """What the user handed us. Exactly one payload is populated."""

    kind: InputKind
    text: Optional[str] = None
    link: Optional[str] = None
    filename: Optional[str] = None
    media_type: Optional[str] = None

    @model_validator(mode="after")
    def one_payload(self) -> "RawInput":
        populated = {
            InputKind.text: self.text is not None,
            InputKind.link: self.link is not None,
            InputKind.file: self.filename is not None,
        }
        if sum(populated.values()) > 1:
            raise ValueError("Only one of text, link or file may be provided")
        if not populated[self.kind]:
            raise ValueError(f"Missing payload for input kind '{self.kind.value}'")
        return self

    @classmethod
    def from_text(cls, text: str) -> "RawInput":
        return cls(kind=InputKind.text, text=text)

    @classmethod
    def from_link(cls, link: str) -> "RawInput":
        return cls(kind=InputKind.link, link=link)

    @classmethod
    def from_file(cls, filename: str, media_type: str) -> "RawInput":
        return cls(kind=InputKind.file, filename=filename, media_type=media_type)


class ExtractedText(BaseModel):
    text: str
    source_kind: InputKind
    filename: Optional[str] = None
    url: Optional[str] = None


class NoContentFound(BaseModel):
    url: str
    message: str = "No text content found at the provided link."


# ── Study materials (canonical, always total) ─────────────────────────────────

class ShortNotes(BaseModel):
    key_points: list[str] = []
    important_terms: list[str] = []
    concepts_explained: list[str] = []
    examples: list[str] = []


class Summary(BaseModel):
    brief: str = NO_BRIEF_SUMMARY
    detailed: str = NO_DETAILED_SUMMARY

    @property
    def is_placeholder(self) -> bool:
        return self.brief == NO_BRIEF_SUMMARY and self.detailed == NO_DETAILED_SUMMARY


class Flashcard(BaseModel):
    front: str = NO_QUESTION
    back: str = NO_ANSWER


class Flashcards(BaseModel):
    basic: list[Flashcard] = []
    advanced: list[Flashcard] = []

    def all(self) -> list[Flashcard]:
        return [*self.basic, *self.advanced]


class QuizQuestion(_CamelModel):
    question: str
    options: list[str]
    answer_index: int = Field(alias="answerIndex")
    explanation: str = NO_EXPLANATION

    @model_validator(mode="after")
    def index_in_range(self) -> "QuizQuestion":
        if not 0 <= self.answer_index < len(self.options):
            raise ValueError("answerIndex must point into options")
        return self


class Course(BaseModel):
    title: str = UNTITLED_COURSE
    url: str = MISSING_URL


class VideoResource(BaseModel):
    title: str = UNTITLED_VIDEO
    channel: str = UNKNOWN_CHANNEL
    url: str = MISSING_URL
    duration: str = UNKNOWN_DURATION


class Resources(_CamelModel):
    recommended_courses: list[Course] = Field(default=[], alias="recommendedCourses")
    youtube_links: list[VideoResource] = Field(default=[], alias="youtubeLinks")


class StudyMaterials(_CamelModel):
    short_notes: ShortNotes = Field(default_factory=ShortNotes, alias="shortNotes")
    summary: Summary = Field(default_factory=Summary)
    flashcards: Flashcards = Field(default_factory=Flashcards)
    quiz_questions: list[QuizQuestion] = Field(default=[], alias="quizQuestions")
    resources: Resources = Field(default_factory=Resources)

    def has_artifacts(self) -> bool:
        notes = self.short_notes
        return bool(
            notes.key_points
            or notes.important_terms
            or notes.concepts_explained
            or not self.summary.is_placeholder
            or self.flashcards.all()
        )


# ── Sessions ──────────────────────────────────────────────────────────────────

class ChatMessage(BaseModel):
    role: Literal["user", "ai", "system"]
    content: str


class Session(BaseModel):
    id: str
    raw_input: Optional[RawInput] = None
    materials: StudyMaterials = Field(default_factory=StudyMaterials)
    chat_history: list[ChatMessage] = []
    generating: bool = False
    answering: bool = False


# ── Request models ────────────────────────────────────────────────────────────

class ContentRequest(BaseModel):
    content: Optional[str] = None


class LinkRequest(BaseModel):
    link: Optional[str] = None


class AskRequest(BaseModel):
    question: Optional[str] = None
    aiContent: Optional[str] = None


class GenerateRequest(BaseModel):
    kind: Literal["text", "link"]
    text: Optional[str] = None
    link: Optional[str] = None


class SwitchSessionRequest(BaseModel):
    session_id: str


class SessionAskRequest(BaseModel):
    question: str

    @field_validator("question")
    @classmethod
    def question_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Question cannot be empty")
        return v.strip()


# ── Response models ───────────────────────────────────────────────────────────

class ModelTextResponse(BaseModel):
    response: str


class InfoResponse(BaseModel):
    message: str


class AnswerResponse(BaseModel):
    answer: str


class SessionListResponse(BaseModel):
    current_id: Optional[str]
    sessions: list[Session]


class SessionAnswerResponse(BaseModel):
    answer: str
    session: Session
