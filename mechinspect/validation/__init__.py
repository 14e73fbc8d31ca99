"""
Mechanistic validation of observed reactions.

- composition: cache keys built from reaction coefficients
- cache:       composition-keyed ScoreRanking cache
- projector:   one rule, one substrate multiset, one verdict
- validator:   whole-corpus validation of single reactions and batches
- store:       where reactions and structure identifiers are read from
"""

from .composition import CoefficientPolicy, DEFAULT_COEFFICIENT_POLICY, build_composition_key, coefficient_for
from .cache import CompositionCache
from .projector import ProjectionOutcome, RuleProjector
from .store import InMemoryKnowledgeStore, KnowledgeStore
from .validator import ReactionValidator, ValidatorStats
