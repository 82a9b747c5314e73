import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CREDENTIAL_KEY = "api_key"


class CredentialStore:
    def __init__(self, base_dir: Path) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self._credential_file = self.base_dir / "credentials.json"

    def load(self) -> Optional[str]:
        if not self._credential_file.exists():
            return None
        try:
            payload = json.loads(self._credential_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable credential file %s: %s", self._credential_file, exc)
            return None
        if not isinstance(payload, dict):
            return None
        value = payload.get(CREDENTIAL_KEY)
        return value if isinstance(value, str) else None

    def set(self, value: str) -> None:
        self._write_json({CREDENTIAL_KEY: str(value or "")})

    def clear(self) -> None:
        if self._credential_file.exists():
            self._credential_file.unlink()

    def _write_json(self, payload: dict) -> None:
        self._credential_file.write_text(
            json.dumps(payload, ensure_ascii=False),
            encoding="utf-8",
        )
