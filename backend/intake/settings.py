from functools import lru_cache
from typing import Annotated

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

load_dotenv()

DEFAULT_AGENT_KEYWORDS = [
    "speak to an agent",
    "talk to an agent",
    "speak to someone",
    "talk to someone",
    "representative",
    "real person",
]


class Settings(BaseSettings):
    # Flow document; empty means the bundled life intake flow
    flow_path: str | None = Field(default=None, alias="FLOW_PATH")
    # Consecutive unusable answers before handing off to an agent
    max_unclear_answers: int = Field(default=2, alias="MAX_UNCLEAR_ANSWERS")
    # Comma separated phrases that route the applicant to an agent
    agent_keywords: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_AGENT_KEYWORDS), alias="AGENT_KEYWORDS"
    )
    # Root log level for the key-value stdout logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Development mode flag - enables permissive CORS and debug logging hints
    development_mode: bool = Field(default=False, alias="DEVELOPMENT_MODE")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("agent_keywords", mode="before")
    @classmethod
    def _split_keywords(cls, value: object) -> object:
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]


def is_development_mode() -> bool:
    return get_settings().development_mode
