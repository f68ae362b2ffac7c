from pydantic import BaseModel
import os

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"


def _env_bool(value: str | None, default: bool = False) -> bool:
    if not value:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    openai_api_key: str | None = None
    gpt_model: str = DEFAULT_MODEL
    openai_base_url: str = DEFAULT_BASE_URL
    host: str = "0.0.0.0"
    port: int = 3000
    upstream_timeout_s: float = 30.0
    max_body_bytes: int = 1024 * 1024
    strict_moves: bool = False
    cors_origins: str = "*"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ

        # Unset and empty variables both fall back to the field default
        values = {
            field: env.get(name)
            for field, name in (
                ("openai_api_key", "OPENAI_API_KEY"),
                ("gpt_model", "GPT_MODEL"),
                ("openai_base_url", "OPENAI_BASE_URL"),
                ("host", "HOST"),
                ("port", "PORT"),
                ("upstream_timeout_s", "UPSTREAM_TIMEOUT_S"),
                ("max_body_bytes", "MAX_BODY_BYTES"),
                ("cors_origins", "CORS_ORIGINS"),
                ("log_level", "LOG_LEVEL"),
            )
        }
        values = {field: value.strip() for field, value in values.items() if value and value.strip()}
        return cls(strict_moves=_env_bool(env.get("STRICT_MOVES")), **values)

    @property
    def origins(self) -> list[str]:
        if self.cors_origins.strip() == "*":
            return ["*"]
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
