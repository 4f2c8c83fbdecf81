from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogFormat = Literal["json", "console"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SITEBUILD_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    # Project-relative defaults, overridable per invocation
    pages_dir: Path = Field(default=Path("pages"))
    static_dir: Path = Field(default=Path("public"))
    out_dir: Path = Field(default=Path("dist"))
    temp_dir: Path = Field(default=Path(".sitebuild/cache"))


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()


class BuildOptions(BaseModel):
    """
    Immutable snapshot of the caller's options for one build.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    ssg: bool = False
    development: bool = False
    base: str | None = None
