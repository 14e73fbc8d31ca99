"""
Reaction Validator
==================
Evaluates whether an observed set of substrates and products represents a
valid enzymatic reaction by matching it against a curated rule corpus.

Each rule is projected onto the reaction's substrates; rules whose
projected products include an expected product are ranked by the curation
score ladder (see :class:`mechinspect.common.constants.ScoreLadder`).
Rankings are cached by composition key, so reactions sharing the same
substrate/product composition are projected once per run.  This only holds
while rules ignore cofactors.

Failure semantics:

* a chemical with no structure identifier raises
  :class:`ChemicalResolutionError`, fatal to that reaction only;
* an unparsable substrate or an uncanonicalizable product raises
  :class:`ReactionProcessingError`, fatal to that reaction only;
* projection and scoring failures are logged and count as unmatches.

The batch entry points catch per-reaction errors and yield a
:class:`ValidationOutcome` for every reaction, so one bad reaction never
stops a run.

Usage::

    validator = ReactionValidator(RuleCorpus.load(), RDKitChemistryEngine())
    ranking = validator.validate(reaction, {1: "CCO", 2: "CC=O"})
    for outcome in validator.validate_batch(reactions, identifiers):
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional, Tuple

from mechinspect.chem.engine import ChemistryEngine, Structure
from mechinspect.chem.identifiers import comparison_identifier, is_placeholder
from mechinspect.common.constants import ChemicalMarkers
from mechinspect.common.errors import (
    CanonicalizationError,
    ChemicalResolutionError,
    ChemistryError,
    MechInspectError,
    ProjectionError,
    ReactionProcessingError,
)
from mechinspect.common.status import ChemicalRole
from mechinspect.corpus.corrections import IdentifierCorrections
from mechinspect.corpus.rule_corpus import RuleCorpus
from mechinspect.models import (
    ChemicalId,
    ObservedReaction,
    ScoreRanking,
    ScoreRankingBuilder,
    TransformationRule,
    ValidationOutcome,
)
from mechinspect.validation.cache import CompositionCache
from mechinspect.validation.composition import (
    DEFAULT_COEFFICIENT_POLICY,
    CoefficientPolicy,
    build_composition_key,
    coefficient_for,
)
from mechinspect.validation.projector import RuleProjector
from mechinspect.validation.store import KnowledgeStore

__all__ = ["ReactionValidator", "ValidatorStats"]

logger = logging.getLogger(__name__)


@dataclass
class ValidatorStats:
    """Run counters, reported once a batch finishes."""

    reactions_processed: int = 0
    reactions_matched: int = 0
    cache_hits: int = 0
    failures: int = 0

    def log_summary(self) -> None:
        logger.info("Validated %d reactions (%d failed)", self.reactions_processed, self.failures)
        logger.info("Found %d reactions that matched at least one rule", self.reactions_matched)
        logger.info("Observed %d projection cache hits based on substrates/products", self.cache_hits)

    def to_dict(self) -> Dict[str, int]:
        return {
            "reactions_processed": self.reactions_processed,
            "reactions_matched": self.reactions_matched,
            "cache_hits": self.cache_hits,
            "failures": self.failures,
        }


class ReactionValidator:
    """Scores reactions against a rule corpus, caching by composition.

    One validator is one run: its cache is tied to the corpus it was built
    with and must not be handed to a validator with another corpus.

    Args:
        corpus: Rules to validate against.
        engine: Chemistry engine used for parsing, canonicalization and projection.
        corrections: Identifier replacements applied before parsing.
        config: Optional overrides: ``max_projections``,
            ``coefficient_policy``, ``placeholder_marker``.
        cache: Composition cache; a fresh one is created when omitted.
    """

    def __init__(
        self,
        corpus: RuleCorpus,
        engine: ChemistryEngine,
        corrections: Optional[IdentifierCorrections] = None,
        config: Optional[Dict[str, Any]] = None,
        cache: Optional[CompositionCache] = None,
    ) -> None:
        self.corpus = corpus
        self.engine = engine
        self.corrections = corrections or IdentifierCorrections()
        self.config = config or {}
        self.coefficient_policy = CoefficientPolicy(
            self.config.get("coefficient_policy", DEFAULT_COEFFICIENT_POLICY)
        )
        self.placeholder_marker: str = self.config.get("placeholder_marker", ChemicalMarkers.PLACEHOLDER)
        self.projector = RuleProjector(engine, self.config)
        self.cache = cache if cache is not None else CompositionCache()
        self.stats = ValidatorStats()
        self.rules: Tuple[TransformationRule, ...] = self._init_reactors()

    def _init_reactors(self) -> Tuple[TransformationRule, ...]:
        usable: List[TransformationRule] = []
        for rule in self.corpus:
            try:
                self.engine.compile_rule(rule)
            except ProjectionError as exc:
                logger.error("Rule %s cannot be compiled, excluding it: %s", rule.rule_id, exc.message)
                continue
            usable.append(rule)
        logger.info("Prepared %d of %d rules for validation", len(usable), len(self.corpus))
        return tuple(usable)

    # -- Single reaction ---------------------------------------------------

    def validate(self, reaction: ObservedReaction, identifiers: Mapping[ChemicalId, str]) -> ScoreRanking:
        """Rank the rules that explain *reaction*.

        Args:
            reaction: The observed reaction (cofactors already excluded).
            identifiers: Chemical id -> structure identifier.

        Returns:
            The (possibly empty) ranking; identical compositions return the
            same cached object.

        Raises:
            ChemicalResolutionError: A chemical has no identifier.
            ReactionProcessingError: A substrate or product cannot be processed.
        """
        self.stats.reactions_processed += 1
        key = build_composition_key(reaction, self.coefficient_policy)

        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Got hit on cached results for reaction %s", reaction.reaction_id)
            self.stats.cache_hits += 1
            self._count_match(cached)
            return cached

        try:
            ranking = self._rank(reaction, identifiers)
        except MechInspectError:
            self.stats.failures += 1
            raise

        self.cache.put(key, ranking)
        self._count_match(ranking)
        return ranking

    def validate_locked(self, reaction: ObservedReaction, identifiers: Mapping[ChemicalId, str]) -> ScoreRanking:
        """Like :meth:`validate`, but safe to call from several threads sharing this validator.

        Reactions with the same composition are computed at most once.
        Run counters are not updated.
        """
        key = build_composition_key(reaction, self.coefficient_policy)
        return self.cache.get_or_compute(key, lambda: self._rank(reaction, identifiers))

    def validate_one_reaction(self, store: KnowledgeStore, reaction_id: Any) -> ScoreRanking:
        """Read a reaction and its chemicals from *store*, validate it and attach the result.

        The result is attached only when at least one rule matched.
        """
        reaction = store.read_reaction(reaction_id)
        identifiers: Dict[ChemicalId, str] = {}
        for chem_id in reaction.all_chemical_ids():
            identifier = store.read_chemical_identifier(chem_id)
            if identifier is None:
                raise ChemicalResolutionError(
                    f"Unable to find chemical {chem_id} for reaction {reaction_id} in the store"
                )
            identifiers[chem_id] = identifier

        ranking = self.validate(reaction, identifiers)
        if not ranking.is_empty:
            store.attach_result(reaction_id, ranking)
        return ranking

    # -- Batches -----------------------------------------------------------

    def validate_batch(
        self,
        reactions: Iterable[ObservedReaction],
        identifiers: Mapping[ChemicalId, str],
    ) -> Iterator[ValidationOutcome]:
        """Validate a stream of reactions, yielding one outcome per reaction."""
        for reaction in reactions:
            yield self._outcome(reaction.reaction_id, lambda r=reaction: self.validate(r, identifiers))
        self.stats.log_summary()

    def validate_store(self, store: KnowledgeStore, reaction_ids: Iterable[Any]) -> Iterator[ValidationOutcome]:
        """Validate reactions read from *store*, yielding one outcome per id."""
        for reaction_id in reaction_ids:
            yield self._outcome(reaction_id, lambda rid=reaction_id: self.validate_one_reaction(store, rid))
        self.stats.log_summary()

    def _outcome(self, reaction_id: Any, run) -> ValidationOutcome:
        hits_before = self.stats.cache_hits
        try:
            ranking = run()
        except MechInspectError as exc:
            logger.error("Validation of reaction %s failed: %s", reaction_id, exc.message)
            return ValidationOutcome(reaction_id=reaction_id, error=exc)
        return ValidationOutcome(
            reaction_id=reaction_id,
            ranking=ranking,
            from_cache=self.stats.cache_hits > hits_before,
        )

    # -- Building blocks ---------------------------------------------------

    def build_substrate_multiset(
        self, reaction: ObservedReaction, identifiers: Mapping[ChemicalId, str]
    ) -> Tuple[Structure, ...]:
        """Normalized substrate structures, each repeated by its coefficient.

        Some rules need several copies of the same molecule and will not
        run without all of them.  Placeholder chemicals are skipped.
        """
        multiset: List[Structure] = []
        for chem_id in reaction.substrates:
            identifier = self._resolve(reaction, chem_id, identifiers)
            if is_placeholder(identifier, self.placeholder_marker):
                logger.debug("Chemical %s is a placeholder, ignoring it", chem_id)
                continue

            try:
                structure = self.engine.normalize(self.engine.parse_structure(self.corrections.rename(identifier)))
            except ChemistryError as exc:
                logger.error("Error occurred while trying to import %s: %s", identifier, exc.message)
                raise ReactionProcessingError(
                    f"reaction {reaction.reaction_id}: substrate {chem_id} cannot be processed: {exc.message}"
                ) from exc

            coefficient = coefficient_for(reaction, chem_id, ChemicalRole.SUBSTRATE, self.coefficient_policy)
            if coefficient is None:
                logger.warning("Converting coefficient null -> 1 for reaction %s / chemical %s",
                               reaction.reaction_id, chem_id)
                coefficient = 1
            multiset.extend([structure] * coefficient)
        return tuple(multiset)

    def build_expected_products(
        self, reaction: ObservedReaction, identifiers: Mapping[ChemicalId, str]
    ) -> FrozenSet[str]:
        """Stereo-free comparison identifiers of the reaction's real products."""
        expected = set()
        for chem_id in reaction.products:
            identifier = self._resolve(reaction, chem_id, identifiers)
            if is_placeholder(identifier, self.placeholder_marker):
                logger.debug("Chemical %s is a placeholder, ignoring it", chem_id)
                continue

            try:
                expected.add(comparison_identifier(self.engine, self.corrections.rename(identifier)))
            except CanonicalizationError as exc:
                logger.error("Error occurred while trying to canonicalize %s: %s", identifier, exc.message)
                raise ReactionProcessingError(
                    f"reaction {reaction.reaction_id}: product {chem_id} cannot be canonicalized: {exc.message}"
                ) from exc
        return frozenset(expected)

    def _rank(self, reaction: ObservedReaction, identifiers: Mapping[ChemicalId, str]) -> ScoreRanking:
        substrates = self.build_substrate_multiset(reaction, identifiers)
        expected = self.build_expected_products(reaction, identifiers)

        builder = ScoreRankingBuilder()
        if not substrates or not expected:
            logger.debug("Reaction %s has nothing to compare (%d substrates, %d expected products)",
                         reaction.reaction_id, len(substrates), len(expected))
            return builder.build()

        for rule in self.rules:
            verdict = self.projector.evaluate(rule, substrates, expected, reaction.reaction_id)
            builder.add(rule.rule_id, verdict)
        return builder.build()

    def _resolve(self, reaction: ObservedReaction, chem_id: ChemicalId, identifiers: Mapping[ChemicalId, str]) -> str:
        identifier = identifiers.get(chem_id)
        if identifier is None:
            logger.error("Missing structure identifier for chemical %s in reaction %s", chem_id, reaction.reaction_id)
            raise ChemicalResolutionError(
                f"Missing structure identifier for chemical {chem_id} in reaction {reaction.reaction_id}"
            )
        return identifier

    def _count_match(self, ranking: ScoreRanking) -> None:
        if not ranking.is_empty:
            self.stats.reactions_matched += 1
