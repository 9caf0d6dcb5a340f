import logging
import os
import secrets
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def find_project_root(start: Path) -> Path:
    for parent in [start, *start.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Unable to locate project root (pyproject.toml not found).")


PROJECT_ROOT = find_project_root(Path(__file__).resolve())

ENV_PATH = PROJECT_ROOT / ".env"
REPORT_DATA_PATH = PROJECT_ROOT / "data" / "profit_loss_report.json"

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_COMMENTARY_MODEL = "gpt-4o-mini"

_FALSY = {"0", "false", "no", "off"}


def load_env(required: bool = False) -> bool:
    if ENV_PATH.exists():
        loaded = load_dotenv(ENV_PATH)
        if not loaded:
            raise RuntimeError(f"Failed to load env file from {ENV_PATH}")
        return True
    if required:
        raise FileNotFoundError(f"Env file not found at {ENV_PATH}")
    return False


def require_file(path: Path) -> Path:
    if not path.exists():
        raise FileNotFoundError(f"Expected file missing: {path}")
    return path


@dataclass(frozen=True)
class Settings:
    """
    Runtime configuration for the API, the client and the UI.
    """

    api_url: str = DEFAULT_API_URL
    report_path: Path = REPORT_DATA_PATH
    csrf_token: str = ""
    commentary_model: str = DEFAULT_COMMENTARY_MODEL
    openai_api_key: Optional[str] = None
    strict_values: bool = True
    log_level: str = "INFO"

    @property
    def llm_enabled(self) -> bool:
        return bool(self.openai_api_key)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() not in _FALSY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Build settings from the environment (and `.env` when present). Cached per process.
    """

    load_env()
    report_override = os.getenv("PNL_REPORT_PATH")
    csrf_token = os.getenv("PNL_CSRF_TOKEN") or secrets.token_urlsafe(32)
    settings = Settings(
        api_url=(os.getenv("PNL_API_URL") or DEFAULT_API_URL).rstrip("/"),
        report_path=Path(report_override) if report_override else REPORT_DATA_PATH,
        csrf_token=csrf_token,
        commentary_model=os.getenv("COMMENTARY_MODEL") or DEFAULT_COMMENTARY_MODEL,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        strict_values=_env_flag("PNL_STRICT_VALUES", True),
        log_level=os.getenv("LOG_LEVEL") or "INFO",
    )
    logger.debug("Settings loaded (api_url=%s, report_path=%s)", settings.api_url, settings.report_path)
    return settings


if __name__ == "__main__":
    print(f"Project root: {PROJECT_ROOT}")
    print(f"Env path: {ENV_PATH}")

    load_env(required=True)
    current = get_settings()
    print(f"API URL: {current.api_url}")
    print(f"Report document: {current.report_path}")
    print(f"LLM commentary enabled: {current.llm_enabled}")
