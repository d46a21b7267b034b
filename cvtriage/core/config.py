"""Configuration models and YAML loader for candidate triage."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PLACEHOLDER_NAMES = (
    "john doe",
    "jane doe",
    "john smith",
    "jane smith",
    "test user",
    "test candidate",
    "sample user",
    "dummy user",
    "example user",
    "placeholder",
    "test test",
    "user test",
    "demo user",
)


def _clean_keywords(v: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(kw.strip() for kw in v if kw.strip())


class VerticalConfig(BaseModel):
    """Rule set for one hiring domain (education, tech, ...)."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    allowed_countries: tuple[str, ...] = ()
    min_score: int = Field(default=6, ge=0, le=10)
    include_keywords: tuple[str, ...] = ()
    exclude_keywords: tuple[str, ...] = ()
    required_qualifications: tuple[str, ...] = ()
    min_years_experience: int = Field(default=0, ge=0)
    require_current_role: bool = False
    current_role_keywords: tuple[str, ...] = ()
    require_completed_degree: bool = False

    @field_validator(
        "allowed_countries",
        "include_keywords",
        "exclude_keywords",
        "required_qualifications",
        "current_role_keywords",
    )
    @classmethod
    def drop_blank_keywords(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return _clean_keywords(v)


class PresetRules(BaseModel):
    """Partial VerticalConfig overrides carried by a preset. Unset fields inherit."""

    model_config = ConfigDict(frozen=True)

    min_score: int | None = Field(default=None, ge=0, le=10)
    allowed_countries: tuple[str, ...] | None = None
    include_keywords: tuple[str, ...] | None = None
    exclude_keywords: tuple[str, ...] | None = None
    required_qualifications: tuple[str, ...] | None = None
    min_years_experience: int | None = Field(default=None, ge=0)
    require_current_role: bool | None = None
    current_role_keywords: tuple[str, ...] | None = None
    require_completed_degree: bool | None = None

    def apply(self, config: VerticalConfig) -> VerticalConfig:
        """Return a copy of config with every explicitly set override applied."""
        overrides = self.model_dump(exclude_none=True)
        if not overrides:
            return config
        return VerticalConfig.model_validate({**config.model_dump(), **overrides})


class FilterPreset(BaseModel):
    """Named bundle of vertical overrides plus its own strictness flag."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    description: str = ""
    vertical_id: str
    is_strict: bool = False
    custom_rules: PresetRules | None = None


class FeatureFlags(BaseModel):
    """Switches for the optional dashboard behaviours."""

    verticals: bool = False
    filter_presets: bool = False
    advanced_filters: bool = False


class QualificationConfig(BaseModel):
    """Base qualification thresholds applied before any vertical rules."""

    model_config = ConfigDict(frozen=True)

    min_score: int = Field(default=6, ge=0, le=10)
    placeholder_names: tuple[str, ...] = DEFAULT_PLACEHOLDER_NAMES

    @field_validator("placeholder_names")
    @classmethod
    def lowercase_names(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(n.lower() for n in _clean_keywords(v))


class CacheConfig(BaseModel):
    """Result cache sizing for the dashboard pipeline."""

    ttl_seconds: float = Field(default=300.0, gt=0)
    max_entries: int = Field(default=32, ge=1)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/cv_uploads.db"
    list_limit: int | None = Field(default=None, ge=1)


class ExtractionConfig(BaseModel):
    """LLM extraction settings."""

    provider: str = "openai"
    model: str | None = None


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    qualification: QualificationConfig = Field(default_factory=QualificationConfig)
    feature_flags: FeatureFlags = Field(default_factory=FeatureFlags)
    verticals: dict[str, VerticalConfig] = Field(default_factory=dict)
    presets: dict[str, FilterPreset] = Field(default_factory=dict)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)

    @field_validator("verticals")
    @classmethod
    def vertical_keys_match_ids(
        cls, v: dict[str, VerticalConfig]
    ) -> dict[str, VerticalConfig]:
        for key, config in v.items():
            if key != config.id:
                msg = f"vertical key '{key}' does not match its id '{config.id}'"
                raise ValueError(msg)
        return v

    @field_validator("presets")
    @classmethod
    def preset_keys_match_ids(
        cls, v: dict[str, FilterPreset]
    ) -> dict[str, FilterPreset]:
        for key, preset in v.items():
            if key != preset.id:
                msg = f"preset key '{key}' does not match its id '{preset.id}'"
                raise ValueError(msg)
        return v

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
