import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

DEFAULT_SEARCH_QUERY = 'new AI tools OR "new AI tool"'
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT_SECONDS = 15


class Settings(BaseModel):
    """
    Process-wide configuration. Loaded once at startup and never mutated;
    handed to the aggregator and client at construction.
    """

    model_config = ConfigDict(frozen=True)

    youtube_api_key: str
    port: int = DEFAULT_PORT
    app_env: str = "production"
    search_query: str = DEFAULT_SEARCH_QUERY
    youtube_timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    cors_origins: tuple[str, ...] = ("*",)
    cors_credentials: bool = False
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"


def parse_cors_origins(raw: str | None) -> tuple[list[str], bool]:
    raw = (raw or "").strip()
    if not raw or raw == "*":
        return ["*"], False
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    if not origins:
        return ["*"], False
    return origins, True


def _int_env(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    load_dotenv()

    api_key = (os.getenv("YOUTUBE_API_KEY") or "").strip()
    if not api_key:
        raise RuntimeError("Missing YOUTUBE_API_KEY in environment or .env")

    cors_origins, cors_credentials = parse_cors_origins(os.getenv("CORS_ALLOWED_ORIGINS"))

    return Settings(
        youtube_api_key=api_key,
        port=_int_env("PORT", DEFAULT_PORT),
        app_env=(os.getenv("APP_ENV") or "production").strip(),
        search_query=(os.getenv("SEARCH_QUERY") or "").strip() or DEFAULT_SEARCH_QUERY,
        youtube_timeout_seconds=_float_env("YOUTUBE_HTTP_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        cors_origins=tuple(cors_origins),
        cors_credentials=cors_credentials,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )
