"""Request payloads accepted by the endpoint, one model per operation."""

import base64
import binascii
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import InvalidRequestError
from .models import ChatMessage, ImagePayload, MessageRole, Operation


class Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ChatMessagePayload(Payload):
    id: str = ""
    role: MessageRole
    text: str
    timestamp: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_message(self) -> ChatMessage:
        return ChatMessage(id=self.id, role=self.role, text=self.text, timestamp=self.timestamp)


class ChatPayload(Payload):
    history: list[ChatMessagePayload] = Field(default_factory=list)
    new_message: str = Field(alias="newMessage", min_length=1)
    user_context: str = Field(default="", alias="userContext")


class NotesPayload(Payload):
    topic: str = Field(min_length=1)


class DoubtPayload(Payload):
    doubt: str = ""
    image: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")

    @model_validator(mode="after")
    def _require_doubt_or_image(self) -> "DoubtPayload":
        if not self.doubt.strip() and not self.image:
            msg = "Provide a doubt, an image, or both."
            raise ValueError(msg)
        if self.image:
            try:
                base64.b64decode(self.image_payload().data, validate=True)
            except (binascii.Error, ValueError) as e:
                msg = "image must be base64 encoded"
                raise ValueError(msg) from e
        return self

    def image_payload(self) -> ImagePayload | None:
        if not self.image:
            return None
        return ImagePayload.from_base64(self.image, self.mime_type)


class QuizPayload(Payload):
    topic: str = Field(min_length=1)
    difficulty: str = "Medium"


class CareerPayload(Payload):
    profile: str = ""
    query: str = Field(min_length=1)


class PlanDetails(Payload):
    subjects: str = Field(min_length=1)
    hours_per_day: str = Field(default="", alias="hoursPerDay")
    exam_date: str = Field(default="", alias="examDate")
    weak_areas: str = Field(default="", alias="weakAreas")

    @field_validator("subjects", "hours_per_day", "exam_date", "weak_areas", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        if isinstance(value, int | float):
            return str(value)
        return value

    def as_prompt_fields(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


class PlanPayload(Payload):
    details: PlanDetails


PAYLOAD_MODELS: dict[Operation, type[Payload]] = {
    Operation.CHAT: ChatPayload,
    Operation.NOTES: NotesPayload,
    Operation.DOUBT: DoubtPayload,
    Operation.QUIZ: QuizPayload,
    Operation.CAREER: CareerPayload,
    Operation.PLAN: PlanPayload,
}


def parse_operation(endpoint: Any) -> Operation:
    """Resolve the ``endpoint`` field of a request body.

    Raises:
        InvalidRequestError: If the endpoint is missing or unknown.
    """
    try:
        return Operation(endpoint)
    except ValueError as e:
        raise InvalidRequestError("Invalid endpoint") from e


def parse_payload(operation: Operation, body: dict[str, Any]) -> Payload:
    """Validate the operation-specific fields of a request body.

    Raises:
        InvalidRequestError: If required fields are missing or malformed.
    """
    try:
        return PAYLOAD_MODELS[operation].model_validate(body)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
            for error in e.errors()
        )
        msg = f"Invalid '{operation}' request: {problems}"
        raise InvalidRequestError(msg) from e
