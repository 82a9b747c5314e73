import http.client
import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from typing import Any, Optional

from .config import load_settings

logger = logging.getLogger(__name__)


class CompletionError(RuntimeError):
    pass


class CompletionRequestError(CompletionError):
    pass


class EmptyCompletionError(CompletionError):
    pass


class GeminiCompletionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        api_base: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        settings = load_settings()
        self.api_key = api_key or ""
        self.model = model or settings.model
        self.api_base = (api_base or settings.api_base).rstrip("/")
        self.timeout_seconds = timeout_seconds

    def build_url(self, api_key: str) -> str:
        model = urllib.parse.quote(self.model, safe="")
        key = urllib.parse.quote(api_key, safe="")
        return f"{self.api_base}/models/{model}:generateContent?key={key}"

    def complete(self, prompt: str, api_key: Optional[str] = None) -> str:
        key = str(api_key or self.api_key or "").strip()
        if not key:
            raise CompletionRequestError("API key is not configured.")

        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        request = urllib.request.Request(
            url=self.build_url(key),
            data=json.dumps(payload).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )

        try:
            if self.timeout_seconds is None:
                response_ctx = urllib.request.urlopen(request)
            else:
                response_ctx = urllib.request.urlopen(request, timeout=self.timeout_seconds)
            with response_ctx as response:
                raw_bytes = response.read()
        except urllib.error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise CompletionRequestError(f"Completion API error {exc.code}: {details}") from exc
        except urllib.error.URLError as exc:
            raise CompletionRequestError(f"Network error: {exc}") from exc
        except OSError as exc:
            raise CompletionRequestError(f"Transport error: {exc}") from exc
        except http.client.HTTPException as exc:
            raise CompletionRequestError(f"Transport error: {exc!r}") from exc

        try:
            parsed = json.loads(raw_bytes.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            preview = raw_bytes[:200].decode("utf-8", errors="replace")
            raise CompletionRequestError(f"Completion API returned invalid JSON: {preview}") from exc

        text = extract_candidate_text(parsed)
        if text is None:
            logger.warning("Unexpected completion response format: %s", _preview(parsed))
            raise EmptyCompletionError("Completion response did not include candidate text.")
        return text


def extract_candidate_text(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        return None
    first = candidates[0]
    content = first.get("content") if isinstance(first, dict) else None
    parts = content.get("parts") if isinstance(content, dict) else None
    if not isinstance(parts, list) or not parts:
        return None
    part = parts[0]
    text = part.get("text") if isinstance(part, dict) else None
    if not isinstance(text, str) or not text:
        return None
    return text


def _preview(payload: Any, max_chars: int = 300) -> str:
    text = json.dumps(payload, ensure_ascii=False)
    if len(text) > max_chars:
        return f"{text[:max_chars]}...(truncated)"
    return text
