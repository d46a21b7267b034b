"""Built-in verticals and presets, and the active rule selection.

Selection states:
  off      - base qualification only
  vertical - a VerticalConfig, optionally strict
  preset   - a FilterPreset (vertical + overrides + its own strictness)

Ids are enums with a DEFAULT alias, so an unknown id always lands on a
real configuration instead of a missing one.
"""

import logging
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict

from cvtriage.core.config import FilterPreset, PresetRules, Settings, VerticalConfig

logger = logging.getLogger(__name__)


class VerticalId(str, Enum):
    EDUCATION = "education"
    GENERIC = "generic"
    TECH = "tech"
    HEALTHCARE = "healthcare"
    SALES = "sales"

    DEFAULT = "education"

    @classmethod
    def parse(cls, value: "str | VerticalId | None") -> "VerticalId":
        """Map a raw id to a member, falling back to DEFAULT for unknown ids."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            logger.warning("Unknown vertical '%s', using '%s'", value, cls.DEFAULT.value)
            return cls.DEFAULT


class PresetId(str, Enum):
    EDUCATION_LEGACY = "education-legacy"
    EDUCATION_STRICT = "education-strict"
    EDUCATION_FLEXIBLE = "education-flexible"
    TECH_SENIOR = "tech-senior"
    TECH_JUNIOR = "tech-junior"
    GENERIC_ALL = "generic-all"

    DEFAULT = "education-legacy"

    @classmethod
    def parse(cls, value: "str | PresetId | None") -> "PresetId":
        """Map a raw id to a member, falling back to DEFAULT for unknown ids."""
        if isinstance(value, cls):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            logger.warning("Unknown preset '%s', using '%s'", value, cls.DEFAULT.value)
            return cls.DEFAULT


_EXCLUDE_UNRELATED = ("teacher", "driver", "cleaner")

BUILT_IN_VERTICALS: dict[VerticalId, VerticalConfig] = {
    VerticalId.EDUCATION: VerticalConfig(
        id="education",
        name="Education",
        allowed_countries=[
            "united kingdom", "uk", "england", "scotland", "wales", "northern ireland",
            "south africa", "australia", "new zealand", "ireland", "canada",
        ],
        min_score=6,
        include_keywords=["teacher", "teaching", "education", "school", "classroom", "curriculum"],
        exclude_keywords=["plumber", "mechanic", "driver", "cleaner"],
        required_qualifications=["degree", "b.ed", "pgce", "education"],
        min_years_experience=2,
        require_current_role=True,
        current_role_keywords=["teacher", "teaching", "education", "school"],
        require_completed_degree=True,
    ),
    VerticalId.GENERIC: VerticalConfig(id="generic", name="Generic", min_score=5),
    VerticalId.TECH: VerticalConfig(
        id="tech",
        name="Technology",
        min_score=6,
        include_keywords=[
            "developer", "engineer", "programmer", "software", "coding",
            "javascript", "python", "react",
        ],
        exclude_keywords=_EXCLUDE_UNRELATED,
        required_qualifications=["computer science", "engineering", "software"],
        min_years_experience=1,
        current_role_keywords=["developer", "engineer", "programmer", "software"],
    ),
    VerticalId.HEALTHCARE: VerticalConfig(
        id="healthcare",
        name="Healthcare",
        min_score=7,
        include_keywords=["nurse", "doctor", "medical", "healthcare", "clinical", "patient"],
        exclude_keywords=_EXCLUDE_UNRELATED,
        required_qualifications=["nursing", "medical", "healthcare"],
        min_years_experience=1,
        current_role_keywords=["nurse", "doctor", "medical", "healthcare"],
    ),
    VerticalId.SALES: VerticalConfig(
        id="sales",
        name="Sales",
        min_score=5,
        include_keywords=["sales", "business development", "account manager", "customer", "revenue"],
        exclude_keywords=_EXCLUDE_UNRELATED,
        min_years_experience=1,
        current_role_keywords=["sales", "business development", "account"],
    ),
}

BUILT_IN_PRESETS: dict[PresetId, FilterPreset] = {
    PresetId.EDUCATION_LEGACY: FilterPreset(
        id="education-legacy",
        name="Education (Legacy)",
        description="Original strict teaching requirements",
        vertical_id="education",
        is_strict=True,
    ),
    PresetId.EDUCATION_STRICT: FilterPreset(
        id="education-strict",
        name="Education Strict",
        description="Strict teaching requirements with B.Ed/PGCE, current role, 2+ years experience",
        vertical_id="education",
        is_strict=True,
    ),
    PresetId.EDUCATION_FLEXIBLE: FilterPreset(
        id="education-flexible",
        name="Education Flexible",
        description="Relaxed teaching requirements - degree with teaching experience",
        vertical_id="education",
        is_strict=False,
        custom_rules=PresetRules(min_years_experience=1, require_current_role=False),
    ),
    PresetId.TECH_SENIOR: FilterPreset(
        id="tech-senior",
        name="Senior Technology",
        description="Senior tech roles - 3+ years experience in software development",
        vertical_id="tech",
        is_strict=True,
        custom_rules=PresetRules(min_years_experience=3, min_score=7),
    ),
    PresetId.TECH_JUNIOR: FilterPreset(
        id="tech-junior",
        name="Junior Technology",
        description="Junior tech roles - basic requirements for entry-level positions",
        vertical_id="tech",
        is_strict=False,
        custom_rules=PresetRules(min_years_experience=0, min_score=5),
    ),
    PresetId.GENERIC_ALL: FilterPreset(
        id="generic-all",
        name="All Candidates",
        description="Minimal filtering - shows all candidates with basic qualifications",
        vertical_id="generic",
        is_strict=False,
    ),
}


class SelectionMode(str, Enum):
    OFF = "off"
    VERTICAL = "vertical"
    PRESET = "preset"


class RuleSelection(BaseModel):
    """The user's current vertical/preset choice.

    Transitions return new selections; nothing here depends on candidate data.
    """

    model_config = ConfigDict(frozen=True)

    mode: SelectionMode = SelectionMode.OFF
    vertical: VerticalId = VerticalId.DEFAULT
    preset: PresetId = PresetId.DEFAULT
    strict: bool = False

    def select_vertical(self, vertical: "str | VerticalId", strict: bool = False) -> "RuleSelection":
        return RuleSelection(
            mode=SelectionMode.VERTICAL,
            vertical=VerticalId.parse(vertical),
            preset=self.preset,
            strict=strict,
        )

    def select_preset(self, preset: "str | PresetId") -> "RuleSelection":
        return RuleSelection(
            mode=SelectionMode.PRESET,
            vertical=self.vertical,
            preset=PresetId.parse(preset),
            strict=self.strict,
        )

    def clear(self) -> "RuleSelection":
        return RuleSelection(vertical=self.vertical, preset=self.preset)


class ActiveRules(NamedTuple):
    """Resolved configuration the vertical predicates run against."""

    config: VerticalConfig
    strict: bool
    preset_id: str | None = None


def vertical_config(vertical: "str | VerticalId", settings: Settings | None = None) -> VerticalConfig:
    """Return the config for a vertical id; settings overrides win over built-ins."""
    vid = VerticalId.parse(vertical)
    if settings is not None and vid.value in settings.verticals:
        return settings.verticals[vid.value]
    return BUILT_IN_VERTICALS[vid]


def preset_config(preset: "str | PresetId", settings: Settings | None = None) -> FilterPreset:
    """Return the preset for an id; settings overrides win over built-ins."""
    pid = PresetId.parse(preset)
    if settings is not None and pid.value in settings.presets:
        return settings.presets[pid.value]
    return BUILT_IN_PRESETS[pid]


def resolve_preset(preset: FilterPreset, settings: Settings | None = None) -> ActiveRules:
    """Merge a preset's overrides onto its vertical's config."""
    base = vertical_config(preset.vertical_id, settings)
    config = preset.custom_rules.apply(base) if preset.custom_rules else base
    return ActiveRules(config=config, strict=preset.is_strict, preset_id=preset.id)


def resolve_rules(selection: RuleSelection, settings: Settings | None = None) -> ActiveRules | None:
    """Resolve a selection to concrete rules, or None when the selection is off.

    Feature flags in settings gate each mode: a disabled mode resolves to None.
    """
    if selection.mode is SelectionMode.OFF:
        return None

    flags = settings.feature_flags if settings is not None else None

    if selection.mode is SelectionMode.PRESET:
        if flags is not None and not flags.filter_presets:
            logger.debug("Filter presets disabled - ignoring preset '%s'", selection.preset.value)
            return None
        return resolve_preset(preset_config(selection.preset, settings), settings)

    if flags is not None and not flags.verticals:
        logger.debug("Verticals disabled - ignoring vertical '%s'", selection.vertical.value)
        return None
    return ActiveRules(
        config=vertical_config(selection.vertical, settings),
        strict=selection.strict,
    )
