"""Questionnaire Topics — named question groups for topic-scoped retakes.

Invariants:
    - Each topic declares its question codes, the profile fields it may change,
      whether retaking it forces a plan rebuild, and the axes it may move
    - A topic with no declared axes recomputes every axis on retake
    - Unknown topic ids never raise: they require no rebuild and declare no axes
    - CONCERN_TOPIC_AXES covers symptom-focused retakes ("acne", "redness", ...)
      whose ids are not questionnaire topics

Design Decisions:
    - Frozen registry dict keyed by topic id: declarative, testable, no lookup logic
      spread across callers (ADR: topics are configuration, not behavior)
"""

from dataclasses import dataclass

from dermaplan.core.domain_types import SkinAxis


@dataclass(frozen=True)
class QuestionTopic:
    id: str
    title: str
    question_codes: tuple[str, ...]
    requires_plan_rebuild: bool
    affects_fields: tuple[str, ...]
    affected_axes: tuple[SkinAxis, ...] = ()


QUESTION_TOPICS: dict[str, QuestionTopic] = {
    topic.id: topic
    for topic in (
        QuestionTopic(
            "skin_type", "Skin type",
            ("skin_type", "seasonal_changes"), True,
            ("skin_type", "seasonality"),
            (SkinAxis.OILINESS, SkinAxis.HYDRATION),
        ),
        QuestionTopic(
            "concerns_goals", "Concerns and goals",
            ("skin_goals", "skin_concerns"), True,
            ("main_goals", "secondary_goals", "concerns"),
            (
                SkinAxis.OILINESS, SkinAxis.HYDRATION, SkinAxis.BARRIER,
                SkinAxis.INFLAMMATION, SkinAxis.PIGMENTATION, SkinAxis.PHOTOAGING,
            ),
        ),
        QuestionTopic(
            "diagnoses_sensitivity", "Diagnoses and sensitivity",
            ("medical_diagnoses", "skin_sensitivity", "allergies"), True,
            ("diagnoses", "sensitivity", "contraindications"),
            (SkinAxis.BARRIER, SkinAxis.INFLAMMATION, SkinAxis.PIGMENTATION),
        ),
        QuestionTopic(
            "pregnancy", "Pregnancy and breastfeeding",
            ("pregnancy_breastfeeding",), True,
            ("pregnancy_status", "contraindications"),
        ),
        QuestionTopic(
            "avoid_ingredients", "Ingredients to avoid",
            ("avoid_ingredients",), True,
            ("contraindications",),
            (SkinAxis.BARRIER,),
        ),
        QuestionTopic(
            "habits_lifestyle", "Habits and lifestyle",
            ("makeup_frequency", "lifestyle_factors"), False,
            ("makeup_frequency", "lifestyle_factors"),
            (
                SkinAxis.HYDRATION, SkinAxis.INFLAMMATION,
                SkinAxis.PIGMENTATION, SkinAxis.PHOTOAGING,
            ),
        ),
        QuestionTopic(
            "spf_sun", "SPF and sun",
            ("spf_frequency", "sun_exposure"), False,
            ("spf_habit",),
            (SkinAxis.PIGMENTATION, SkinAxis.PHOTOAGING),
        ),
        QuestionTopic(
            "current_care", "Current care and skin reactions",
            ("current_topicals", "current_oral_meds", "retinol_reaction", "aha_bha_reaction"),
            True,
            ("current_topicals", "current_oral_meds", "contraindications"),
            (SkinAxis.BARRIER,),
        ),
        QuestionTopic(
            "budget_preferences", "Budget and care preferences",
            ("budget", "care_preference", "routine_complexity"), True,
            ("budget_segment", "care_preference", "routine_complexity"),
        ),
        QuestionTopic(
            "motivation", "Motivation",
            ("motivation_questions",), False,
            (),
        ),
    )
}

CONCERN_TOPIC_AXES: dict[str, tuple[SkinAxis, ...]] = {
    "acne": (SkinAxis.INFLAMMATION, SkinAxis.OILINESS),
    "pigmentation": (SkinAxis.PIGMENTATION, SkinAxis.PHOTOAGING),
    "sensitivity": (SkinAxis.BARRIER, SkinAxis.INFLAMMATION),
    "hydration": (SkinAxis.HYDRATION, SkinAxis.BARRIER),
    "wrinkles": (SkinAxis.PHOTOAGING,),
    "redness": (SkinAxis.INFLAMMATION, SkinAxis.BARRIER),
    "pores": (SkinAxis.OILINESS,),
    "texture": (SkinAxis.BARRIER, SkinAxis.HYDRATION),
}


def get_topic(topic_id: str | None) -> QuestionTopic | None:
    if topic_id is None:
        return None
    return QUESTION_TOPICS.get(topic_id)


def topic_requires_plan_rebuild(topic_id: str | None) -> bool:
    topic = get_topic(topic_id)
    return topic.requires_plan_rebuild if topic is not None else False


def get_question_codes_for_topic(topic_id: str | None) -> tuple[str, ...]:
    topic = get_topic(topic_id)
    return topic.question_codes if topic is not None else ()


def declared_axes_for_topic(topic_id: str | None) -> tuple[SkinAxis, ...]:
    """Axes a questionnaire topic or concern topic may move; empty if undeclared."""
    topic = get_topic(topic_id)
    if topic is not None:
        return topic.affected_axes
    if topic_id is None:
        return ()
    return CONCERN_TOPIC_AXES.get(topic_id, ())
