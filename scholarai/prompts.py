"""Prompt templates for each ScholarAI operation."""

from collections.abc import Sequence
from typing import Any

from .models import (
    ChatMessage,
    GenerationRequest,
    ImagePayload,
    MessageRole,
    Operation,
    new_message,
)
from .tiers import FAST, REASONING

QUIZ_QUESTION_COUNT = 5

SYSTEM_INSTRUCTION_COACH = """You are "ScholarAI Coach", a friendly, encouraging, and intelligent tutor for students (Grade 9 to College) in India.

GOAL:
Explain complex topics simply, using analogies, stories, and memory tricks.

FORMATTING RULES (STRICTLY FOLLOW):
- Use **Markdown** for all responses.
- Use **Headings** (###) to separate sections.
- Use **Bullet points** for lists and steps.
- Use **Tables** whenever comparing two things or listing data.
- Use **Bold text** for keywords and important formulas.
- Use > Blockquotes for definitions or summaries.

BEHAVIOR:
- Adjust your language based on the student's level.
- Be encouraging and supportive.
- For Math/Science, provide step-by-step solutions with clear separation.
- For History/Arts, use storytelling.
- Always check if the student understands before moving on.
- Do not do the student's homework directly; guide them to the answer."""

SYSTEM_INSTRUCTION_CAREER = """You are a Career Counselor expert for the Indian education system.

FORMATTING RULES:
- Use **Markdown tables** to compare colleges, courses, or career paths (Salary, Scope, Duration).
- Use **Bullet points** for pros/cons.
- Use **Bold** for emphasis.

CONTENT GUIDANCE:
- Provide guidance on streams (Science, Commerce, Arts) and degrees.
- Compare options based on Future Scope, Salary (in INR), and Difficulty.
- Suggest both Government and Private sector paths.
- Be realistic but optimistic.
- Mention specific entrance exams (JEE, NEET, CLAT, CAT, UPSC, etc.) where relevant."""

SYSTEM_INSTRUCTION_DOUBT = (
    "You are an expert academic doubt solver. Think through the problem "
    "step-by-step and provide clear, accurate solutions."
)

# Reasoning-heavy operations start on the stronger tier and degrade under load.
OPERATION_TIERS: dict[Operation, str] = {
    Operation.CHAT: FAST,
    Operation.NOTES: FAST,
    Operation.QUIZ: FAST,
    Operation.DOUBT: REASONING,
    Operation.CAREER: REASONING,
    Operation.PLAN: REASONING,
}


def tier_for(operation: Operation) -> str:
    """Return the primary tier name for an operation."""
    return OPERATION_TIERS[operation]


def build_chat_request(
    history: Sequence[ChatMessage], new_message_text: str, user_context: str
) -> GenerationRequest:
    """Build a tutoring chat turn from the prior history and the new message.

    Returns:
        GenerationRequest: Request whose messages end with the new user turn.
    """
    messages = [*history, new_message(MessageRole.USER, new_message_text)]
    return GenerationRequest(
        operation=Operation.CHAT,
        messages=messages,
        system_instruction=f"{SYSTEM_INSTRUCTION_COACH}\n\nUser Context: {user_context}",
        temperature=0.7,
    )


def build_notes_request(topic: str) -> GenerationRequest:
    prompt = (
        "Role: Expert academic content writer. "
        f'Task: Create exam-ready study notes on "{topic}".\n'
        "Include: Definitions, Formulas (in Tables), Comparisons (in Tables), "
        "Step-by-step methods.\n"
        "Format: Markdown with Headers (##) and Horizontal Rules (---)."
    )
    return GenerationRequest(operation=Operation.NOTES, prompt=prompt, temperature=0.3)


def build_doubt_request(doubt: str, image: ImagePayload | None = None) -> GenerationRequest:
    """Build a doubt-solving request, optionally with a photo of the problem.

    Returns:
        GenerationRequest: Low-temperature request for a step-by-step answer.
    """
    prompt = f"Solve this academic doubt step-by-step using Markdown. Doubt: {doubt}"
    if image is not None and not doubt.strip():
        prompt = (
            "Solve the academic problem shown in the attached image "
            "step-by-step using Markdown."
        )
    return GenerationRequest(
        operation=Operation.DOUBT,
        prompt=prompt,
        system_instruction=SYSTEM_INSTRUCTION_DOUBT,
        temperature=0.2,
        image=image,
    )


def build_quiz_request(topic: str, difficulty: str) -> GenerationRequest:
    prompt = (
        f"Generate {QUIZ_QUESTION_COUNT} multiple choice questions (MCQs) for "
        f'"{topic}" at "{difficulty}" level.\n'
        "Return ONLY a JSON array. Keys: id, question, options (array of exactly 4 "
        "strings), correctAnswer (index 0-3), explanation.\n"
        "Do not wrap in markdown code blocks. Just raw JSON."
    )
    return GenerationRequest(
        operation=Operation.QUIZ, prompt=prompt, temperature=0.7, json_mode=True
    )


def build_career_request(profile: str, query: str) -> GenerationRequest:
    prompt = (
        f"User Profile: {profile}\n\nUser Query: {query}\n\n"
        "Use Markdown tables and bullet points."
    )
    return GenerationRequest(
        operation=Operation.CAREER,
        prompt=prompt,
        system_instruction=SYSTEM_INSTRUCTION_CAREER,
        temperature=0.7,
    )


def build_plan_request(details: dict[str, Any]) -> GenerationRequest:
    """Build a study plan request from the planner form fields.

    Args:
        details: Mapping with subjects, hoursPerDay, examDate and weakAreas.

    Returns:
        GenerationRequest: Request for a weekly timetable and strategy.
    """
    prompt = (
        f"Create a study plan. Subjects: {details.get('subjects', '')}. "
        f"Hours: {details.get('hoursPerDay', '')}.\n"
        f"Exam: {details.get('examDate', '')}. "
        f"Weakness: {details.get('weakAreas', '')}.\n"
        "Output: Weekly timetable in Markdown Table. Strategy section with bullet points."
    )
    return GenerationRequest(operation=Operation.PLAN, prompt=prompt, temperature=0.5)
