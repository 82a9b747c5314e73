from dataclasses import dataclass, field, replace
from typing import Sequence, Tuple

ROLES = {"user", "assistant"}

PHASE_IDLE = "idle"
PHASE_ACTIVE = "active"
PHASE_ASSIGNMENT = "assignment"

WELCOME_MESSAGE = "Welcome to your Python learning session! 🎉 What would you like to learn today?"
MISSING_CREDENTIAL_MESSAGE = "Please enter your API key first!"
ASSIGNMENT_INSTRUCTION = (
    "Based on our discussion about Python, here's a practice assignment for you to work on. "
    "The assignment should test your understanding of the concepts we discussed."
)
MIN_MESSAGES_FOR_ASSIGNMENT = 2


class SessionError(ValueError):
    pass


class MissingCredentialError(SessionError):
    pass


class InvalidTransitionError(SessionError):
    pass


@dataclass(frozen=True)
class Message:
    role: str
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown message role: {self.role}")


@dataclass(frozen=True)
class SessionState:
    messages: Tuple[Message, ...] = field(default_factory=tuple)
    active: bool = False
    assignment_visible: bool = False
    assignment_text: str = ""
    generation: int = 0

    @property
    def phase(self) -> str:
        if self.active:
            return PHASE_ACTIVE
        if self.assignment_visible:
            return PHASE_ASSIGNMENT
        return PHASE_IDLE


def start_session(state: SessionState, api_key: str) -> SessionState:
    if not str(api_key or "").strip():
        raise MissingCredentialError(MISSING_CREDENTIAL_MESSAGE)
    if state.phase != PHASE_IDLE:
        raise InvalidTransitionError(f"Cannot start a session from phase '{state.phase}'.")
    return replace(
        state,
        messages=(Message("assistant", WELCOME_MESSAGE),),
        active=True,
        assignment_visible=False,
        assignment_text="",
    )


def append_user_message(state: SessionState, text: str) -> SessionState:
    if not state.active:
        raise InvalidTransitionError("Messages can only be sent during an active session.")
    if not str(text or "").strip():
        raise SessionError("Message text is empty.")
    return replace(state, messages=state.messages + (Message("user", text),))


def append_assistant_message(state: SessionState, text: str, generation: int) -> SessionState:
    if generation != state.generation:
        return state
    return replace(state, messages=state.messages + (Message("assistant", text),))


def set_assignment_text(state: SessionState, text: str, generation: int) -> SessionState:
    if generation != state.generation:
        return state
    return replace(state, assignment_text=text)


def show_assignment(state: SessionState) -> SessionState:
    return replace(state, active=False, assignment_visible=True)


def start_new_session(state: SessionState) -> SessionState:
    return SessionState(generation=state.generation + 1)


def has_enough_discussion(messages: Sequence[Message]) -> bool:
    return len(messages) >= MIN_MESSAGES_FOR_ASSIGNMENT


def build_assignment_prompt(messages: Sequence[Message]) -> str:
    transcript = "\n".join(f"{message.role}: {message.content}" for message in messages)
    return f"{ASSIGNMENT_INSTRUCTION}\n\nOur discussion:\n{transcript}"
