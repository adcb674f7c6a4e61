"""Rule Loader — validates rule and template documents into an immutable RuleSet.

Invariants:
    - Every document is validated once, at load time; a ValidationError surfaces as
      RuleDocumentError naming the offending document
    - Inactive rules (is_active = False) are dropped from the set
    - Template order is preserved and must end with a catch-all template
    - default_rule_id, when given, must name a loaded rule; otherwise a built-in
      default carrying the fallback steps is used

Design Decisions:
    - RuleSet is a frozen value handed to the service constructor, replacing
      process-wide rule caches (ADR: no module-level mutable state)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pydantic import ValidationError

from dermaplan.core.care_plan_templates import (
    CARE_PLAN_TEMPLATES, CarePlanTemplate, ensure_catch_all,
)
from dermaplan.core.errors import RuleDocumentError
from dermaplan.core.rule_matching import RecommendationRule, fallback_step_spec
from dermaplan.schemas.rule_documents import (
    CarePlanTemplateDocument, RecommendationRuleDocument,
)

logger = logging.getLogger(__name__)

DEFAULT_RULE_ID = "default"


def builtin_default_rule() -> RecommendationRule:
    return RecommendationRule(
        id=DEFAULT_RULE_ID,
        name="Default care routine",
        priority=0,
        conditions=(),
        step_spec=fallback_step_spec(),
    )


@dataclass(frozen=True)
class RuleSet:
    rules: tuple[RecommendationRule, ...]
    templates: tuple[CarePlanTemplate, ...]
    default_rule: RecommendationRule


def _document_id(document: Any, index: int) -> str:
    if isinstance(document, Mapping) and document.get("id") is not None:
        return str(document["id"])
    return f"#{index}"


def _validation_message(kind: str, doc_id: str, error: ValidationError) -> str:
    details = "; ".join(
        f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}"
        for e in error.errors()
    )
    return f"Invalid {kind} document {doc_id}: {details}"


def load_recommendation_rules(
    documents: Iterable[Mapping[str, Any]],
) -> tuple[RecommendationRule, ...]:
    """Validate rule documents; inactive rules are skipped."""
    rules: list[RecommendationRule] = []
    seen: set[str] = set()
    for index, raw in enumerate(documents):
        doc_id = _document_id(raw, index)
        try:
            document = RecommendationRuleDocument.model_validate(raw)
        except ValidationError as e:
            raise RuleDocumentError(
                _validation_message("rule", doc_id, e), document_id=doc_id,
            ) from e
        if document.id in seen:
            raise RuleDocumentError(
                f"Duplicate rule id {document.id}", document_id=document.id,
            )
        seen.add(document.id)
        if not document.is_active:
            logger.debug("Skipping inactive rule", extra={"rule_id": document.id})
            continue
        rules.append(document.to_rule())
    return tuple(rules)


def load_care_plan_templates(
    documents: Iterable[Mapping[str, Any]],
) -> tuple[CarePlanTemplate, ...]:
    """Validate template documents in order and require a trailing catch-all."""
    templates: list[CarePlanTemplate] = []
    for index, raw in enumerate(documents):
        doc_id = _document_id(raw, index)
        try:
            document = CarePlanTemplateDocument.model_validate(raw)
        except ValidationError as e:
            raise RuleDocumentError(
                _validation_message("template", doc_id, e), document_id=doc_id,
            ) from e
        templates.append(document.to_template())
    ensure_catch_all(templates)
    return tuple(templates)


def load_rule_set(
    rule_documents: Iterable[Mapping[str, Any]],
    template_documents: Iterable[Mapping[str, Any]] | None = None,
    default_rule_id: str | None = None,
) -> RuleSet:
    """Build the RuleSet; templates default to the built-in care plan templates."""
    rules = load_recommendation_rules(rule_documents)
    if template_documents is None:
        templates = CARE_PLAN_TEMPLATES
    else:
        templates = load_care_plan_templates(template_documents)

    if default_rule_id is None:
        default_rule = builtin_default_rule()
    else:
        default_rule = next((r for r in rules if r.id == default_rule_id), None)
        if default_rule is None:
            raise RuleDocumentError(
                f"Default rule {default_rule_id} is not among the loaded active rules",
                document_id=default_rule_id,
            )

    logger.info(
        "Rule set loaded",
        extra={"rules": len(rules), "templates": len(templates), "rule_id": default_rule.id},
    )
    return RuleSet(rules=rules, templates=tuple(templates), default_rule=default_rule)
