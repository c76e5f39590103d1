from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SPARKY_",
        env_file=".env",
        extra="ignore",
    )

    env: str = "dev"
    log_level: str = "INFO"
    log_json: bool = True
    modules_path: Path = Field(default=ROOT_DIR / "modules")

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, v):
        if v is None or str(v).strip() == "":
            return "INFO"
        return str(v).strip().upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
