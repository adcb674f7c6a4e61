"""Pydantic Schemas — validation of externally supplied rule and template documents.

Invariants:
    - Documents are validated once, at load time, never at match time
    - Domain types from core/ back every enumeration-valued field
"""
