import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from .completion_client import (
    EmptyCompletionError,
    GeminiCompletionClient,
)
from .session_state import (
    InvalidTransitionError,
    SessionState,
    append_assistant_message,
    append_user_message,
    build_assignment_prompt,
    has_enough_discussion,
    set_assignment_text,
    show_assignment,
    start_new_session,
    start_session,
)

logger = logging.getLogger(__name__)

EMPTY_REPLY_MESSAGE = "I couldn't generate a response. Please make sure your API key is valid."
REQUEST_FAILED_MESSAGE = (
    "An error occurred while fetching the response. Please check your API key and try again."
)
NOT_ENOUGH_DISCUSSION_MESSAGE = (
    "Not enough discussion to generate an assignment. Please ask more questions first!"
)
ASSIGNMENT_EMPTY_MESSAGE = "Sorry, I couldn't generate an assignment at this time. Please try again."
ASSIGNMENT_FAILED_MESSAGE = "Error generating assignment. Please try again."


class CompletionClient(Protocol):
    def complete(self, prompt: str, api_key: Optional[str] = None) -> str:
        ...


@dataclass(frozen=True)
class PendingReply:
    prompt: str
    generation: int


class TutorSession:
    def __init__(
        self,
        llm_client: Optional[CompletionClient] = None,
        state: Optional[SessionState] = None,
    ) -> None:
        self.llm_client = llm_client or GeminiCompletionClient()
        self.state = state or SessionState()

    def start_session(self, api_key: str) -> SessionState:
        self.state = start_session(self.state, api_key)
        logger.info("Learning session started")
        return self.state

    def send_message(self, text: str, api_key: str) -> bool:
        pending = self.submit_user_message(text, api_key)
        if pending is None:
            return False
        self.resolve_reply(pending, api_key)
        return True

    def submit_user_message(self, text: str, api_key: str) -> Optional[PendingReply]:
        if not str(text or "").strip() or not str(api_key or "").strip():
            return None
        self.state = append_user_message(self.state, text)
        return PendingReply(prompt=text, generation=self.state.generation)

    def resolve_reply(self, pending: PendingReply, api_key: str) -> SessionState:
        try:
            reply = self.llm_client.complete(pending.prompt, api_key=api_key)
        except EmptyCompletionError:
            logger.warning("Completion returned no usable text; using fallback reply")
            reply = EMPTY_REPLY_MESSAGE
        except Exception as exc:
            logger.error("Error fetching tutor reply: %s", exc, exc_info=True)
            reply = REQUEST_FAILED_MESSAGE

        if pending.generation != self.state.generation:
            logger.debug("Dropping stale reply from generation %s", pending.generation)
        self.state = append_assistant_message(self.state, reply, pending.generation)
        return self.state

    def generate_assignment(self, api_key: str) -> SessionState:
        if not has_enough_discussion(self.state.messages):
            self.state = show_assignment(
                set_assignment_text(self.state, NOT_ENOUGH_DISCUSSION_MESSAGE, self.state.generation)
            )
            return self.state

        generation = self.state.generation
        prompt = build_assignment_prompt(self.state.messages)
        try:
            text = self.llm_client.complete(prompt, api_key=api_key)
        except EmptyCompletionError:
            logger.warning("Completion returned no assignment text; using fallback")
            text = ASSIGNMENT_EMPTY_MESSAGE
        except Exception as exc:
            logger.error("Error generating assignment: %s", exc, exc_info=True)
            text = ASSIGNMENT_FAILED_MESSAGE

        self.state = set_assignment_text(self.state, text, generation)
        return self.state

    def end_session(self, api_key: str) -> SessionState:
        if not self.state.active:
            raise InvalidTransitionError("No active session to end.")
        self.generate_assignment(api_key)
        self.state = show_assignment(self.state)
        logger.info("Learning session ended with %d messages", len(self.state.messages))
        return self.state

    def start_new_session(self) -> SessionState:
        self.state = start_new_session(self.state)
        return self.state
