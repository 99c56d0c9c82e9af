"""Web interface using Streamlit."""

import base64
import uuid

import streamlit as st

from scholarai import LocalStore, MessageRole, ScholarClient, UserProfile
from scholarai.config import config
from scholarai.errors import (
    MissingLocalCredentialError,
    ScholarAIError,
    UnsupportedLocalProviderError,
)
from scholarai.models import new_message

config.setup_logging()
logger = config.get_logger(__name__)

PAGES = [
    "Dashboard",
    "AI Study Coach",
    "Smart Notes",
    "Doubt Solver",
    "Study Planner",
    "Exam Prep",
    "Career Guide",
]
GRADES = ["Class 9", "Class 10", "Class 11", "Class 12", "Undergraduate", "Postgraduate"]
STREAMS = ["Science", "Commerce", "Arts", "General"]
EXAMS = ["JEE Main", "JEE Advanced", "NEET", "CUET", "CLAT", "CAT", "UPSC"]
DIFFICULTIES = ["Easy", "Medium", "Hard"]

DARK_THEME_CSS = """
<style>
.stApp { background-color: #111827; color: #f9fafb; }
</style>
"""


class SessionState:
    """Centralized session state management."""

    @staticmethod
    def initialize() -> None:
        """Initialize all session state variables."""
        store = LocalStore()
        defaults = {
            "store": store,
            "client": None,
            "user": store.user,
            "page": PAGES[0],
            "messages": [],
            "notes": "",
            "doubt_answer": "",
            "plan": "",
            "career_answer": "",
            "quiz": [],
            "quiz_index": 0,
            "quiz_score": 0,
            "quiz_selected": None,
            "quiz_finished": False,
        }

        for key, default_value in defaults.items():
            if key not in st.session_state:
                st.session_state[key] = default_value

        if st.session_state.client is None:
            st.session_state.client = ScholarClient(store=st.session_state.store)

    @staticmethod
    def reset_quiz() -> None:
        st.session_state.quiz = []
        st.session_state.quiz_index = 0
        st.session_state.quiz_score = 0
        st.session_state.quiz_selected = None
        st.session_state.quiz_finished = False

    @staticmethod
    def logout() -> None:
        """Forget the profile and every in-memory result."""
        st.session_state.store.user = None
        for key in ("user", "messages", "notes", "doubt_answer", "plan", "career_answer"):
            st.session_state.pop(key, None)
        SessionState.reset_quiz()


def show_error(error: ScholarAIError) -> None:
    """Render a failure with guidance the student can act on."""
    if isinstance(error, (MissingLocalCredentialError, UnsupportedLocalProviderError)):
        st.warning(f"{error.message} Open **Settings** in the sidebar to fix it.")
    else:
        st.error(error.message)


def greeting(user: UserProfile) -> str:
    return (
        f"Hello {user.name}! I'm your AI Study Coach. Which topic are you finding "
        "difficult today? I can explain concepts, solve problems, or tell you a "
        "story to help you remember!"
    )


def render_login() -> None:
    """Render the profile form that stands in for sign-in."""
    st.title("ScholarAI")
    st.markdown("Your personal AI tutor, notes maker and career guide.")

    with st.form("login"):
        name = st.text_input("Full Name")
        email = st.text_input("Email")
        grade = st.selectbox("Grade", GRADES, index=2)
        stream = st.selectbox("Stream", STREAMS)
        exams = st.multiselect("Competitive Exams", EXAMS)
        custom_exam = st.text_input("Other exam (optional)")
        submitted = st.form_submit_button("Get Started", use_container_width=True)

    if submitted:
        if not name.strip() or not email.strip():
            st.error("Please enter your name and email.")
            return
        if custom_exam.strip():
            exams = [*exams, custom_exam.strip()]
        user = UserProfile(
            id=uuid.uuid4().hex,
            name=name.strip(),
            email=email.strip(),
            grade=grade,
            stream=stream,
            competitive_exams=exams,
        )
        st.session_state.store.user = user
        st.session_state.user = user
        st.session_state.messages = [new_message(MessageRole.MODEL, greeting(user))]
        st.rerun()


def render_sidebar() -> None:
    """Render navigation, theme and personal API key settings."""
    store: LocalStore = st.session_state.store
    user: UserProfile = st.session_state.user

    with st.sidebar:
        st.header("ScholarAI")
        st.write(f"**{user.name}** · {user.grade}")
        st.session_state.page = st.radio("Navigate", PAGES, index=PAGES.index(st.session_state.page))

        st.divider()
        st.subheader("Settings")
        dark = st.toggle("Dark mode", value=store.theme == "dark")
        if dark != (store.theme == "dark"):
            store.theme = "dark" if dark else "light"

        with st.expander("Personal API key", expanded=False):
            st.caption(
                "Used only when the ScholarAI server is unreachable. "
                "Stored on this machine, never sent to the server."
            )
            provider = st.selectbox(
                "Provider",
                ["google", "openrouter"],
                index=0 if store.provider == "google" else 1,
            )
            key = st.text_input("API key", value=store.api_key, type="password")
            if st.button("Save key", use_container_width=True):
                store.provider = provider
                store.api_key = key
                st.success("Saved." if key.strip() else "Key removed.")

        st.divider()
        if st.button("Log out", use_container_width=True):
            SessionState.logout()
            st.rerun()

    if store.theme == "dark":
        st.markdown(DARK_THEME_CSS, unsafe_allow_html=True)


def render_dashboard() -> None:
    user: UserProfile = st.session_state.user
    st.header(f"Welcome back, {user.name}! 👋")
    st.write(user.context_line())

    col1, col2, col3 = st.columns(3)
    with col1:
        st.markdown("**Chat turns**")
        st.markdown(f"**{len(st.session_state.messages)}**")
    with col2:
        st.markdown("**Quiz questions loaded**")
        st.markdown(f"**{len(st.session_state.quiz)}**")
    with col3:
        st.markdown("**Target exams**")
        st.markdown(f"**{', '.join(user.competitive_exams) or 'None'}**")


def render_study_coach() -> None:
    """Render the tutoring chat."""
    st.header("AI Study Coach")
    client: ScholarClient = st.session_state.client
    user: UserProfile = st.session_state.user

    for message in st.session_state.messages:
        with st.chat_message("assistant" if message.role == MessageRole.MODEL else "user"):
            st.markdown(message.text)

    prompt = st.chat_input("Ask anything about your studies...")
    if not prompt:
        return

    history = list(st.session_state.messages)
    st.session_state.messages.append(new_message(MessageRole.USER, prompt))
    with st.spinner("Thinking..."):
        try:
            reply = client.chat_with_coach(history, prompt, user.context_line())
        except ScholarAIError as e:
            logger.exception("Chat failed")
            reply = f"⚠️ **Error:** {e.message}"
    st.session_state.messages.append(
        new_message(MessageRole.MODEL, reply or "I'm having trouble thinking right now. Try again?")
    )
    st.rerun()


def render_notes() -> None:
    st.header("Smart Notes")
    topic = st.text_area("Topic or text to turn into notes")
    if st.button("Generate Notes", use_container_width=True) and topic.strip():
        with st.spinner("Writing notes..."):
            try:
                st.session_state.notes = st.session_state.client.generate_notes(topic)
            except ScholarAIError as e:
                logger.exception("Notes generation failed")
                show_error(e)
    if st.session_state.notes:
        st.markdown(st.session_state.notes)


def render_doubt_solver() -> None:
    """Render the text-and-photo doubt solver."""
    st.header("Instant Doubt Solver")
    question = st.text_area("Describe your doubt")
    upload = st.file_uploader("Or upload a photo of the problem", type=["png", "jpg", "jpeg", "webp"])

    if st.button("Solve", use_container_width=True) and (question.strip() or upload):
        image = base64.b64encode(upload.getvalue()).decode("ascii") if upload else None
        mime_type = upload.type if upload else None
        with st.spinner("Solving..."):
            try:
                answer = st.session_state.client.solve_doubt(question, image, mime_type)
                st.session_state.doubt_answer = answer or "Sorry, I couldn't solve that right now."
            except ScholarAIError as e:
                logger.exception("Doubt solving failed")
                show_error(e)
    if st.session_state.doubt_answer:
        st.markdown(st.session_state.doubt_answer)


def render_study_planner() -> None:
    st.header("Personalized Study Planner")
    with st.form("planner"):
        subjects = st.text_input("Subjects", placeholder="Physics, Chemistry, Maths")
        hours = st.number_input("Hours per day", min_value=1, max_value=16, value=4)
        exam_date = st.date_input("Exam date")
        weak_areas = st.text_input("Weak areas")
        submitted = st.form_submit_button("Generate Plan", use_container_width=True)

    if submitted and subjects.strip():
        details = {
            "subjects": subjects,
            "hoursPerDay": str(hours),
            "examDate": exam_date.isoformat(),
            "weakAreas": weak_areas,
        }
        with st.spinner("Planning..."):
            try:
                st.session_state.plan = st.session_state.client.generate_study_plan(details)
            except ScholarAIError as e:
                logger.exception("Study plan generation failed")
                show_error(e)
    if st.session_state.plan:
        st.markdown(st.session_state.plan)


def render_exam_prep() -> None:
    """Render quiz generation and the one-question-at-a-time quiz."""
    st.header("Exam Prep")
    topic = st.text_input("Quiz topic")
    difficulty = st.selectbox("Difficulty", DIFFICULTIES, index=1)

    if st.button("Start Quiz", use_container_width=True) and topic.strip():
        SessionState.reset_quiz()
        with st.spinner("Generating questions..."):
            try:
                questions = st.session_state.client.generate_quiz(topic, difficulty)
            except ScholarAIError as e:
                logger.exception("Quiz generation failed")
                show_error(e)
                return
        if not questions:
            st.warning("Could not generate questions. Please try a clearer topic.")
            return
        st.session_state.quiz = questions

    questions = st.session_state.quiz
    if not questions:
        return

    if st.session_state.quiz_finished:
        st.success(f"Quiz complete! Score: {st.session_state.quiz_score}/{len(questions)}")
        return

    index = st.session_state.quiz_index
    question = questions[index]
    st.subheader(f"Question {index + 1} of {len(questions)}")
    st.markdown(question.question)

    for option_index, option in enumerate(question.options):
        if st.button(option, key=f"option-{index}-{option_index}", use_container_width=True) and (
            st.session_state.quiz_selected is None
        ):
            st.session_state.quiz_selected = option_index
            if option_index == question.correct_answer:
                st.session_state.quiz_score += 1

    selected = st.session_state.quiz_selected
    if selected is None:
        return

    if selected == question.correct_answer:
        st.success("Correct!")
    else:
        st.error(f"Incorrect. Answer: {question.options[question.correct_answer]}")
    if question.explanation:
        st.info(question.explanation)

    if st.button("Next", use_container_width=True):
        st.session_state.quiz_selected = None
        if index < len(questions) - 1:
            st.session_state.quiz_index += 1
        else:
            st.session_state.quiz_finished = True
        st.rerun()


def render_career_guide() -> None:
    st.header("Career Guide")
    user: UserProfile = st.session_state.user
    query = st.text_input(
        "What would you like to know?",
        placeholder="e.g., 'Best engineering colleges in India for CS' or 'Scope of Arts stream'",
    )
    if st.button("Ask", use_container_width=True) and query.strip():
        with st.spinner("Researching..."):
            try:
                st.session_state.career_answer = st.session_state.client.get_career_advice(
                    user.context_line(), query
                )
            except ScholarAIError as e:
                logger.exception("Career advice failed")
                show_error(e)
    if st.session_state.career_answer:
        st.markdown(st.session_state.career_answer)


RENDERERS = {
    "Dashboard": render_dashboard,
    "AI Study Coach": render_study_coach,
    "Smart Notes": render_notes,
    "Doubt Solver": render_doubt_solver,
    "Study Planner": render_study_planner,
    "Exam Prep": render_exam_prep,
    "Career Guide": render_career_guide,
}


def main() -> None:
    """Main entry point for the Streamlit web application.

    Sets up the page configuration, initializes session state, asks for a
    profile if there is none, then renders the sidebar and the selected page.
    """
    st.set_page_config(page_title="ScholarAI", layout="wide")

    SessionState.initialize()

    if st.session_state.get("user") is None:
        render_login()
        return

    if not st.session_state.get("messages"):
        st.session_state.messages = [
            new_message(MessageRole.MODEL, greeting(st.session_state.user))
        ]

    render_sidebar()
    RENDERERS[st.session_state.page]()


if __name__ == "__main__":
    main()
