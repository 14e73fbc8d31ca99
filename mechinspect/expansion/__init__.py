"""
Forward expansion — seeds for hypothetical product generation.

- seed_expander: single-substrate rule x molecule seeds
- predictions:   seed projection into a prediction corpus
"""

from .seed_expander import PredictionSeedSequence, SingleSubstrateExpander
from .predictions import PredictionCorpus, PredictionGenerator
