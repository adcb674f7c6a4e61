"""Profile Validation — post-hoc consistency checks over normalized profile data.

Invariants:
    - Missing skin type, sensitivity or main goals (absent, None or "any") -> warning
    - main_goals present but empty -> error; is_valid is False iff errors is non-empty
    - Pregnant/breastfeeding profile whose contraindications mention no retinoid- or
      acid-family ingredient -> warning (substring heuristic, not exhaustive)
    - Never raises; works on partial records

Design Decisions:
    - Operates on the normalized record (normalize_profile_data output), not on
      SkinProfile: a materialized profile cannot tell "absent" from "empty"
"""

from dataclasses import dataclass
from typing import Any, Mapping

from dermaplan.core.domain_types import ANY, PregnancyStatus, plain
from dermaplan.core.domain_normalizers import normalize_pregnancy_status


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    field: str
    message: str


@dataclass(frozen=True)
class ProfileValidationResult:
    is_valid: bool
    errors: tuple[ValidationIssue, ...] = ()
    warnings: tuple[ValidationIssue, ...] = ()


_RETINOID_OR_ACID_MARKERS = (
    "retino", "ретино", "adapalene", "адапален", "tretinoin", "третиноин",
    "acid", "кислот", "aha", "bha", "salicyl", "салицил",
)


def _missing(data: Mapping[str, Any], field_name: str) -> bool:
    value = data.get(field_name)
    return value is None or plain(value) == ANY


def validate_profile(data: Mapping[str, Any]) -> ProfileValidationResult:
    errors: list[ValidationIssue] = []
    warnings: list[ValidationIssue] = []

    if _missing(data, "skin_type"):
        warnings.append(ValidationIssue(
            "SKIN_TYPE_MISSING", "skin_type", "Skin type is not set",
        ))
    if _missing(data, "sensitivity"):
        warnings.append(ValidationIssue(
            "SENSITIVITY_MISSING", "sensitivity", "Sensitivity level is not set",
        ))
    if _missing(data, "main_goals"):
        warnings.append(ValidationIssue(
            "MAIN_GOALS_MISSING", "main_goals", "Main goals are not set",
        ))
    elif len(data["main_goals"]) == 0:
        errors.append(ValidationIssue(
            "MAIN_GOALS_EMPTY", "main_goals", "Main goals must not be empty",
        ))

    status = normalize_pregnancy_status(data.get("pregnancy_status"))
    if status in (PregnancyStatus.PREGNANT, PregnancyStatus.BREASTFEEDING):
        contraindications = " ".join(
            str(plain(item)).lower() for item in data.get("contraindications") or ()
        )
        if not any(marker in contraindications for marker in _RETINOID_OR_ACID_MARKERS):
            warnings.append(ValidationIssue(
                "PREGNANCY_CONTRAINDICATIONS_MISSING", "contraindications",
                "Pregnant or breastfeeding profile lists no retinoid or acid contraindication",
            ))

    return ProfileValidationResult(
        is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings),
    )
