from importlib import import_module
from typing import Any

__all__ = [
    "CredentialStore",
    "GeminiCompletionClient",
    "SessionState",
    "TutorSession",
    "format_message",
    "load_settings",
]

_EXPORTS = {
    "CredentialStore": ".credential_store",
    "GeminiCompletionClient": ".completion_client",
    "SessionState": ".session_state",
    "TutorSession": ".tutor_session",
    "format_message": ".message_format",
    "load_settings": ".config",
}


def __getattr__(name: str) -> Any:
    if name in _EXPORTS:
        module = import_module(_EXPORTS[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
