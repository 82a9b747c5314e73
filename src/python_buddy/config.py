import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

ROOT_DIR = Path(__file__).resolve().parents[2]

DEFAULT_MODEL = "gemini-pro"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class AppSettings:
    model: str
    api_base: str
    data_dir: Path
    log_level: str


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    env = os.environ if environ is None else environ
    model = str(env.get("PYTHON_BUDDY_MODEL", "")).strip() or DEFAULT_MODEL
    api_base = str(env.get("PYTHON_BUDDY_API_BASE", "")).strip() or DEFAULT_API_BASE
    data_dir = str(env.get("PYTHON_BUDDY_DATA_DIR", "")).strip()
    log_level = str(env.get("PYTHON_BUDDY_LOG_LEVEL", "")).strip().upper() or DEFAULT_LOG_LEVEL
    return AppSettings(
        model=model,
        api_base=api_base.rstrip("/"),
        data_dir=Path(data_dir) if data_dir else ROOT_DIR / ".python_buddy_data",
        log_level=log_level,
    )
