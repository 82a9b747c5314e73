from pathlib import Path
import logging
import sys

import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from src.python_buddy.completion_client import GeminiCompletionClient  # noqa: E402
from src.python_buddy.config import AppSettings, load_settings  # noqa: E402
from src.python_buddy.credential_store import CredentialStore  # noqa: E402
from src.python_buddy.message_format import format_message  # noqa: E402
from src.python_buddy.session_state import MissingCredentialError  # noqa: E402
from src.python_buddy.tutor_session import TutorSession  # noqa: E402
from src.python_buddy.view_policy import get_view_sections, speaker_label  # noqa: E402

SETTINGS: AppSettings = load_settings()

logging.basicConfig(
    level=getattr(logging, SETTINGS.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@st.cache_resource
def get_credential_store() -> CredentialStore:
    return CredentialStore(SETTINGS.data_dir)


def get_tutor_session() -> TutorSession:
    return st.session_state.tutor_session


def ensure_state() -> None:
    if "api_key" not in st.session_state:
        st.session_state.api_key = get_credential_store().load() or ""
    if "tutor_session" not in st.session_state:
        st.session_state.tutor_session = TutorSession(
            llm_client=GeminiCompletionClient(model=SETTINGS.model, api_base=SETTINGS.api_base)
        )


def on_api_key_change() -> None:
    get_credential_store().set(st.session_state.api_key)


def on_clear_api_key() -> None:
    st.session_state.api_key = ""
    get_credential_store().clear()


def render_formatted(text: str) -> None:
    for block in format_message(text):
        if block["kind"] == "code":
            st.code(block["text"], language=block["language"] or "python")
        elif block["text"]:
            st.markdown(block["text"])


def render_transcript(session: TutorSession) -> None:
    for message in session.state.messages:
        with st.chat_message(message.role):
            st.markdown(f"**{speaker_label(message.role)}**")
            render_formatted(message.content)


st.set_page_config(page_title="Python Buddy", page_icon="🐍", layout="centered")
ensure_state()
session = get_tutor_session()

st.title("🐍 Python Buddy - Your Friendly Coding Teacher! 🌟")
st.caption("Hello young coder! 👋 Ask me anything about Python and let's learn together!")

key_col, clear_col = st.columns([5, 1])
with key_col:
    st.text_input(
        "API key",
        key="api_key",
        placeholder="🔑 Enter your magic API key here...",
        on_change=on_api_key_change,
        label_visibility="collapsed",
    )
with clear_col:
    st.button("Clear 🗑️", on_click=on_clear_api_key, use_container_width=True)

sections = get_view_sections(session.state)

if sections["start_button"]:
    if st.button("Start Learning Session 🚀", type="primary", use_container_width=True):
        try:
            session.start_session(st.session_state.api_key)
        except MissingCredentialError as exc:
            st.warning(str(exc))
        else:
            st.rerun()

if sections["chat"]:
    render_transcript(session)

    prompt = st.chat_input("✨ Type your Python question here...")
    if prompt and prompt.strip() and str(st.session_state.api_key).strip():
        with st.chat_message("user"):
            st.markdown(f"**{speaker_label('user')}**")
            render_formatted(prompt)
        with st.chat_message("assistant"):
            with st.spinner("Thinking..."):
                session.send_message(prompt, st.session_state.api_key)
        st.rerun()

    if st.button("End Session & Get Assignment 📝", use_container_width=True):
        with st.spinner("Preparing your assignment..."):
            session.end_session(st.session_state.api_key)
        st.rerun()

if sections["assignment"]:
    with st.container(border=True):
        st.subheader("🎯 Your Practice Assignment")
        render_formatted(session.state.assignment_text)
        if st.button("Start New Session 🔄", type="primary", use_container_width=True):
            session.start_new_session()
            st.rerun()
