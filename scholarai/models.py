"""Data models for ScholarAI."""

import datetime
import itertools
import re
from dataclasses import asdict, dataclass, field
from enum import StrEnum
from typing import Any

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.*)$", re.S)
DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"

_message_counter = itertools.count(1)


class MessageRole(StrEnum):
    """Author of a chat message."""

    USER = "user"
    MODEL = "model"


class Operation(StrEnum):
    """Logical operations accepted by the endpoint."""

    CHAT = "chat"
    NOTES = "notes"
    DOUBT = "doubt"
    QUIZ = "quiz"
    CAREER = "career"
    PLAN = "plan"


@dataclass
class ChatMessage:
    """Represents a single turn in a tutoring chat."""

    id: str
    role: MessageRole
    text: str
    timestamp: int

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON shape used on the wire."""
        return {
            "id": self.id,
            "role": self.role.value,
            "text": self.text,
            "timestamp": self.timestamp,
        }


def new_message(role: MessageRole, text: str) -> ChatMessage:
    """Create a chat message with a session-unique id."""
    now = datetime.datetime.now(tz=datetime.UTC)
    millis = int(now.timestamp() * 1000)
    return ChatMessage(
        id=f"{millis}-{next(_message_counter)}",
        role=role,
        text=text,
        timestamp=millis,
    )


@dataclass
class QuizQuestion:
    """A multiple choice question; correct_answer indexes into options."""

    id: int
    question: str
    options: list[str]
    correct_answer: int
    explanation: str = ""

    def to_payload(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "correctAnswer": self.correct_answer,
            "explanation": self.explanation,
        }


@dataclass
class ImagePayload:
    """Base64 encoded image attached to a request."""

    data: str
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE

    @classmethod
    def from_base64(cls, value: str, mime_type: str | None = None) -> "ImagePayload":
        """Build a payload, stripping a ``data:<mime>;base64,`` prefix if present."""
        match = DATA_URL_PATTERN.match(value.strip())
        if match:
            return cls(data=match.group("data"), mime_type=match.group("mime"))
        return cls(data=value.strip(), mime_type=mime_type or DEFAULT_IMAGE_MIME_TYPE)

    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


@dataclass
class GenerationRequest:
    """Provider-neutral description of one generation call.

    Either ``prompt`` (single turn) or ``messages`` (chat history ending with
    the new user turn) is set.
    """

    operation: Operation
    prompt: str | None = None
    messages: list[ChatMessage] = field(default_factory=list)
    system_instruction: str | None = None
    temperature: float = 0.7
    json_mode: bool = False
    image: ImagePayload | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def turns(self) -> list[tuple[MessageRole, str]]:
        """Return the conversation as ordered (role, text) pairs."""
        if self.messages:
            return [(message.role, message.text) for message in self.messages]
        return [(MessageRole.USER, self.prompt or "")]


@dataclass
class GenerationResult:
    """Text produced by a provider plus where it came from."""

    text: str
    provider: str
    model: str
    tier: str
    attempts: int


@dataclass
class UserProfile:
    """Student profile held for the session only."""

    id: str
    name: str
    email: str
    grade: str
    stream: str | None = None
    competitive_exams: list[str] = field(default_factory=list)

    def context_line(self) -> str:
        """Describe the student for chat and career prompts."""
        line = f"Grade: {self.grade}, Stream: {self.stream or 'General'}"
        if self.competitive_exams:
            line += f", Target Exams: {', '.join(self.competitive_exams)}"
        return line

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
