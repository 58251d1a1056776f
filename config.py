# config.py
import os
from dataclasses import dataclass

from dotenv import load_dotenv, find_dotenv

DEFAULT_BASE_URL = "https://ark.cn-beijing.volces.com/api/v3"
DEFAULT_MODEL = "doubao-seed-2-0-pro-260215"


def load_env() -> None:
    """Load a local .env if there is one. Some editors save it as UTF-16."""
    path = find_dotenv(usecwd=True) or None
    if not path:
        return
    try:
        load_dotenv(path)
    except UnicodeError:
        load_dotenv(path, encoding="utf-16")


@dataclass(frozen=True)
class Settings:
    api_key: str = ""
    port: int = 3001
    base_url: str = DEFAULT_BASE_URL
    model: str = DEFAULT_MODEL
    reasoning_effort: str = "medium"
    min_images: int = 3
    max_images: int = 8
    max_body_mb: int = 25
    log_level: str = "INFO"

    @property
    def max_body_bytes(self) -> int:
        return self.max_body_mb * 1024 * 1024

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_key=os.getenv("ARK_API_KEY", "").strip(),
            port=int(os.getenv("PORT", "3001")),
            base_url=os.getenv("ARK_BASE_URL", DEFAULT_BASE_URL),
            model=os.getenv("ARK_MODEL", DEFAULT_MODEL),
            reasoning_effort=os.getenv("ARK_REASONING_EFFORT", "medium"),
            min_images=int(os.getenv("MIN_IMAGES", "3")),
            max_images=int(os.getenv("MAX_IMAGES", "8")),
            max_body_mb=int(os.getenv("MAX_BODY_MB", "25")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
