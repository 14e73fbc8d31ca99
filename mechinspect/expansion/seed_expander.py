"""
Single-Substrate Seed Expander
==============================
Builds the prediction seeds for one forward-expansion step: every
single-substrate rule paired with every candidate molecule.

Rules whose reactor cannot be built are skipped with a warning; the run
goes on with the rest.  The seed sequence is lazy and restartable:
iterating it twice yields the same seeds in the same rule-major order,
and ``len()`` is known without generating anything.

Usage::

    expander = SingleSubstrateExpander.from_identifiers(corpus, ["CCO", "CCCO"], engine)
    seeds = expander.get_prediction_seeds()
    print(len(seeds))
    for seed in seeds:
        ...
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Sequence, Tuple

from mechinspect.chem.engine import ChemistryEngine, Structure
from mechinspect.common.constants import SINGLE_SUBSTRATE
from mechinspect.common.errors import ChemistryError, ProjectionError
from mechinspect.corpus.rule_corpus import RuleCorpus
from mechinspect.models import PredictionSeed, TransformationRule

__all__ = ["PredictionSeedSequence", "SingleSubstrateExpander"]

logger = logging.getLogger(__name__)


class PredictionSeedSequence:
    """Finite, restartable cross product of rules and molecules."""

    def __init__(self, rules: Sequence[TransformationRule], molecules: Sequence[Structure]) -> None:
        self._rules: Tuple[TransformationRule, ...] = tuple(rules)
        self._molecules: Tuple[Structure, ...] = tuple(molecules)

    def __iter__(self) -> Iterator[PredictionSeed]:
        for rule in self._rules:
            for molecule in self._molecules:
                yield PredictionSeed(rule_id=rule.rule_id, substrates=(molecule,), rule=rule)

    def __len__(self) -> int:
        return len(self._rules) * len(self._molecules)

    def __repr__(self) -> str:
        return f"PredictionSeedSequence(rules={len(self._rules)}, molecules={len(self._molecules)})"


class SingleSubstrateExpander:
    """Pairs each single-substrate rule with each candidate molecule."""

    def __init__(self, corpus: RuleCorpus, molecules: Iterable[Structure], engine: ChemistryEngine) -> None:
        self.corpus = corpus
        self.molecules: Tuple[Structure, ...] = tuple(molecules)
        self.engine = engine

    @classmethod
    def from_identifiers(
        cls, corpus: RuleCorpus, identifiers: Iterable[str], engine: ChemistryEngine
    ) -> "SingleSubstrateExpander":
        """Parse and normalize *identifiers*, skipping the ones that cannot be read."""
        molecules: List[Structure] = []
        for identifier in identifiers:
            try:
                molecules.append(engine.normalize(engine.parse_structure(identifier)))
            except ChemistryError as exc:
                logger.warning("Skipping candidate molecule %s: %s", identifier, exc.message)
        return cls(corpus, molecules, engine)

    def get_prediction_seeds(self) -> PredictionSeedSequence:
        rules = self._usable_rules()
        seeds = PredictionSeedSequence(rules, self.molecules)
        logger.info("Created %d prediction seeds from %d rules and %d molecules",
                    len(seeds), len(rules), len(self.molecules))
        return seeds

    def _usable_rules(self) -> List[TransformationRule]:
        usable: List[TransformationRule] = []
        for rule in self.corpus.filter_by_substrate_arity(SINGLE_SUBSTRATE):
            try:
                self.engine.compile_rule(rule)
            except ProjectionError as exc:
                logger.warning("Skipping rule %s, its reactor cannot be built: %s", rule.rule_id, exc.message)
                continue
            usable.append(rule)
        return usable
