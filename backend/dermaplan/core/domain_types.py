"""Domain Types — closed vocabularies that downstream logic is allowed to branch on.

Invariants:
    - Every canonical key is a str Enum member; raw or legacy strings never reach
      rule/template conditions, scoring branches, or change detection
    - AXIS_ORDER is the fixed reporting order of the six scoring axes
    - Neutral defaults are ANY ("any") and NONE ("none"), never None

Design Decisions:
    - str Enums: serialize to JSON without custom encoders and compare equal to their
      value (ADR: rule documents and cached plans are JSON)
    - plain() unwraps members before hashing: Enum.__hash__ hashes the member name,
      so a set of members never matches a set of raw strings
"""

from enum import Enum
from typing import Any


# ─── Neutral Defaults ────────────────────────────────────────────

ANY = "any"
NONE = "none"


# ─── Scoring ─────────────────────────────────────────────────────

class SkinAxis(str, Enum):
    """The six physiological scoring dimensions."""
    OILINESS = "oiliness"
    HYDRATION = "hydration"
    BARRIER = "barrier"
    INFLAMMATION = "inflammation"
    PIGMENTATION = "pigmentation"
    PHOTOAGING = "photoaging"


AXIS_ORDER: tuple[SkinAxis, ...] = (
    SkinAxis.OILINESS,
    SkinAxis.HYDRATION,
    SkinAxis.BARRIER,
    SkinAxis.INFLAMMATION,
    SkinAxis.PIGMENTATION,
    SkinAxis.PHOTOAGING,
)


class SeverityLevel(str, Enum):
    """Monotone bucketing of an axis value."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ─── Taxonomy ────────────────────────────────────────────────────

class ConcernKey(str, Enum):
    """User-stated skin problems."""
    ACNE = "acne"
    PORES = "pores"
    PIGMENTATION = "pigmentation"
    WRINKLES = "wrinkles"
    BARRIER = "barrier"
    DEHYDRATION = "dehydration"
    DRYNESS = "dryness"
    OILINESS = "oiliness"
    SENSITIVITY = "sensitivity"
    REDNESS = "redness"
    ROSACEA = "rosacea"


class PrimaryFocus(str, Enum):
    """The single objective driving template and product choice."""
    ACNE = "acne"
    PORES = "pores"
    PIGMENTATION = "pigmentation"
    WRINKLES = "wrinkles"
    BARRIER = "barrier"
    DEHYDRATION = "dehydration"
    DRYNESS = "dryness"
    GENERAL = "general"


class GoalKey(str, Enum):
    """Care objectives selected by the user."""
    ACNE = "acne"
    PORES = "pores"
    PIGMENTATION = "pigmentation"
    BARRIER = "barrier"
    DEHYDRATION = "dehydration"
    WRINKLES = "wrinkles"
    ANTIAGE = "antiage"
    GENERAL = "general"
    DARK_CIRCLES = "dark_circles"


class SkinTypeKey(str, Enum):
    DRY = "dry"
    COMBINATION_DRY = "combination_dry"
    NORMAL = "normal"
    COMBINATION_OILY = "combination_oily"
    OILY = "oily"


class SensitivityLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very_high"


class AgeGroup(str, Enum):
    UNDER_18 = "u18"
    FROM_18_TO_24 = "18_24"
    FROM_25_TO_34 = "25_34"
    FROM_35_TO_44 = "35_44"
    FROM_45 = "45plus"


class IngredientKey(str, Enum):
    """Active ingredients tracked for safety and preference logic."""
    RETINOL = "retinol"
    RETINOID = "retinoid"
    ADAPALENE = "adapalene"
    TRETINOIN = "tretinoin"
    VITAMIN_C = "vitamin_c"
    ASCORBIC_ACID = "ascorbic_acid"
    NIACINAMIDE = "niacinamide"
    AHA = "aha"
    BHA = "bha"
    PHA = "pha"
    SALICYLIC_ACID = "salicylic_acid"
    GLYCOLIC_ACID = "glycolic_acid"
    LACTIC_ACID = "lactic_acid"
    AZELAIC_ACID = "azelaic_acid"
    TRANEXAMIC_ACID = "tranexamic_acid"
    BENZOYL_PEROXIDE = "benzoyl_peroxide"
    PEPTIDES = "peptides"
    CERAMIDES = "ceramides"
    HYALURONIC_ACID = "hyaluronic_acid"


RETINOID_FAMILY: frozenset[IngredientKey] = frozenset({
    IngredientKey.RETINOL,
    IngredientKey.RETINOID,
    IngredientKey.ADAPALENE,
    IngredientKey.TRETINOIN,
})


# ─── Profile States ──────────────────────────────────────────────

class PregnancyStatus(str, Enum):
    NONE = "none"
    PREGNANT = "pregnant"
    BREASTFEEDING = "breastfeeding"
    PLANNING = "planning"


class RoutineComplexity(str, Enum):
    MINIMAL = "minimal"
    MEDIUM = "medium"
    MAXIMAL = "maximal"


class RebuildReason(str, Enum):
    """Why (or whether) a full plan regeneration is required."""
    TOPIC_REQUIRES_PLAN = "TOPIC_REQUIRES_PLAN"
    CRITICAL_CHANGE = "CRITICAL_CHANGE"
    PROFILE_CREATED = "PROFILE_CREATED"
    NONE = "NONE"


def plain(value: Any) -> Any:
    """Unwrap an Enum member to its value; anything else passes through."""
    if isinstance(value, Enum):
        return value.value
    return value
