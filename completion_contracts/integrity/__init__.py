"""Integrity Checker: pre-flight structural and coverage proof for contracts."""

from .defaults import (
    AC_DEFAULT_CONSISTENCY,
    AC_DEFAULT_PROVENANCE,
    AC_DEFAULT_STRUCTURE,
    AC_DEFAULT_TRACEABILITY,
    DEFAULT_REQUIRED_SECTIONS,
    RUBRIC_CLARITY,
    RUBRIC_OVERALL,
    default_criteria,
    default_rubrics,
    inject_defaults,
)
from .gate import (
    IntegrityError,
    IntegrityOptions,
    IntegrityResult,
    check,
    find_dependency_cycles,
)

__all__ = [
    "check",
    "IntegrityError",
    "IntegrityOptions",
    "IntegrityResult",
    "find_dependency_cycles",
    "inject_defaults",
    "default_criteria",
    "default_rubrics",
    "DEFAULT_REQUIRED_SECTIONS",
    "AC_DEFAULT_STRUCTURE",
    "AC_DEFAULT_TRACEABILITY",
    "AC_DEFAULT_CONSISTENCY",
    "AC_DEFAULT_PROVENANCE",
    "RUBRIC_OVERALL",
    "RUBRIC_CLARITY",
]
