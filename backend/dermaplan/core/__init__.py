"""Core Layer — pure domain logic: taxonomy, scoring, context, matching, change detection.

Invariants:
    - No module in core/ imports from services/, schemas/ or infrastructure/
    - All functions are pure and deterministic; no IO, no async

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
