"""Configuration models and YAML loader for the painter matching service."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/painters.db"


class WeightsConfig(BaseModel):
    """Base preference weights merged under every ranking request."""

    quality: float = Field(default=0.34, ge=0.0)
    reliability: float = Field(default=0.33, ge=0.0)
    value: float = Field(default=0.33, ge=0.0)

    @model_validator(mode="after")
    def not_all_zero(self) -> "WeightsConfig":
        if self.quality + self.reliability + self.value <= 0:
            msg = "default weights must not all be zero"
            raise ValueError(msg)
        return self


class RankingConfig(BaseModel):
    """Ranker limits and defaults."""

    default_limit: int = Field(default=5, ge=1, le=10)
    max_limit: int = Field(default=10, ge=1, le=10)
    default_weights: WeightsConfig = Field(default_factory=WeightsConfig)
    warn_unfiltered: bool = True


class AnalysisConfig(BaseModel):
    """Sampling bounds for description analysis."""

    default_sample_size: int = Field(default=20, ge=1)
    min_sample_size: int = Field(default=5, ge=1)
    max_sample_size: int = Field(default=50, ge=1)
    fallback_threshold: int = Field(default=3, ge=0)
    max_search_terms: int = Field(default=5, ge=1)
    min_description_length: int = Field(default=5, ge=1)

    @model_validator(mode="after")
    def sample_bounds_ordered(self) -> "AnalysisConfig":
        if self.min_sample_size > self.max_sample_size:
            msg = "min_sample_size must not exceed max_sample_size"
            raise ValueError(msg)
        return self


class DocumentsConfig(BaseModel):
    """Location of the reference document tree."""

    root: str = "resources"


class LLMConfig(BaseModel):
    """Vision provider used to describe job photos."""

    provider: str = "openai"
    model: str | None = None
    prompt: str | None = None

    @field_validator("provider")
    @classmethod
    def provider_lowercase(cls, v: str) -> str:
        v = v.lower().strip()
        if not v:
            msg = "provider must not be empty"
            raise ValueError(msg)
        return v


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    documents: DocumentsConfig = Field(default_factory=DocumentsConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
