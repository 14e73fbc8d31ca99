"""
Typed dataclass definitions shared across all modules.

Re-exports every model so callers can do::

    from mechinspect.models import TransformationRule, ObservedReaction, ScoreRanking
"""

from .rule_models import RuleId, TransformationRule, derive_curation_status
from .reaction_models import (
    ChemicalId,
    CompositionKey,
    ObservedReaction,
    ScoreRanking,
    ScoreRankingBuilder,
    ScoreVerdict,
    ValidationOutcome,
)
from .expansion_models import Prediction, PredictionSeed
