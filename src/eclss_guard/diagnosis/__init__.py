"""Fault diagnosis over the ECLSS information model."""
from .information_model import (
    CATEGORY_COMPONENTS,
    COMPONENTS,
    FAULTS,
    candidate_faults,
    component_for_fault,
    fault_by_name,
)
from .fault_ranker import BASE_SCORE, SYMPTOM_RULES, rank, score_fault

__all__ = [
    "CATEGORY_COMPONENTS",
    "COMPONENTS",
    "FAULTS",
    "candidate_faults",
    "component_for_fault",
    "fault_by_name",
    "BASE_SCORE",
    "SYMPTOM_RULES",
    "rank",
    "score_fault",
]
