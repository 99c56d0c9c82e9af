"""Turning raw model output into quiz questions."""

import json
import re
from typing import Any

from .config import config
from .errors import MalformedResponseError
from .models import QuizQuestion

logger = config.get_logger(__name__)

OPTIONS_PER_QUESTION = 4

_LEADING_FENCE = re.compile(r"^```[A-Za-z]*\s*")
_TRAILING_FENCE = re.compile(r"\s*```$")


def strip_code_fences(text: str | None) -> str:
    """Remove a surrounding Markdown code fence such as ```json ... ```."""
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE.sub("", cleaned)
    cleaned = _TRAILING_FENCE.sub("", cleaned)
    return cleaned.strip()


def _extract_items(data: Any) -> list[Any]:
    if isinstance(data, list):
        return data
    # JSON-object mode wraps the array, e.g. {"questions": [...]}
    if isinstance(data, dict):
        lists = [value for value in data.values() if isinstance(value, list)]
        if len(lists) == 1:
            return lists[0]
    return []


def _to_question(item: Any, position: int) -> QuizQuestion | None:
    if not isinstance(item, dict):
        return None

    question = str(item.get("question") or "").strip()
    options = item.get("options")
    answer = item.get("correctAnswer", item.get("correct_answer"))

    if not question or not isinstance(options, list):
        return None
    if len(options) != OPTIONS_PER_QUESTION:
        return None
    if isinstance(answer, bool) or not isinstance(answer, int):
        return None
    if not 0 <= answer < OPTIONS_PER_QUESTION:
        return None

    raw_id = item.get("id")
    question_id = raw_id if isinstance(raw_id, int) and not isinstance(raw_id, bool) else position
    return QuizQuestion(
        id=question_id,
        question=question,
        options=[str(option) for option in options],
        correct_answer=answer,
        explanation=str(item.get("explanation") or ""),
    )


def load_json(text: str | None) -> Any:
    """Decode model output that was asked to be JSON, ignoring a code fence.

    Raises:
        MalformedResponseError: If the text is not valid JSON.
    """
    cleaned = strip_code_fences(text)
    try:
        return json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        msg = f"Expected JSON from the model but got: {cleaned[:80]!r}"
        raise MalformedResponseError(msg) from e


def parse_quiz(text: str | None) -> list[QuizQuestion]:
    """Parse model output into quiz questions.

    Never raises: unparseable output yields an empty list, and questions with
    the wrong number of options or an out-of-range answer index are skipped.

    Returns:
        list[QuizQuestion]: The valid questions in model order.
    """
    try:
        data = load_json(text)
    except MalformedResponseError:
        logger.exception("Quiz JSON parse error; returning no questions")
        return []

    return questions_from_items(_extract_items(data))


def questions_from_items(items: list[Any]) -> list[QuizQuestion]:
    """Convert decoded quiz items, skipping any that are malformed."""
    questions = []
    for position, item in enumerate(items, start=1):
        question = _to_question(item, position)
        if question is None:
            logger.warning("Skipping malformed quiz item %d", position)
            continue
        questions.append(question)
    return questions


def quiz_payload(questions: list[QuizQuestion]) -> list[dict[str, Any]]:
    return [question.to_payload() for question in questions]
