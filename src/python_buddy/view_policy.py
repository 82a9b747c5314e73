from typing import Dict

from .session_state import SessionState

SPEAKER_LABELS = {
    "user": "You 👤",
    "assistant": "Tutor 🤖",
}


def get_view_sections(state: SessionState) -> Dict[str, bool]:
    return {
        "start_button": not state.active and not state.assignment_visible,
        "chat": state.active,
        "assignment": state.assignment_visible,
    }


def speaker_label(role: str) -> str:
    return SPEAKER_LABELS.get(role, role)
