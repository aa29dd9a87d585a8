"""Anomaly scoring."""
from .score_engine import NORMAL_STATE, SCORE_CEILING, WEIGHTS, score, score_contributions, score_point

__all__ = ["NORMAL_STATE", "SCORE_CEILING", "WEIGHTS", "score", "score_contributions", "score_point"]
