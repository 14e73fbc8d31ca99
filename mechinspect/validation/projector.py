"""
Rule Projection
===============
Applies one transformation rule to one substrate multiset and scores the
projected products against a set of expected product identifiers.

Projection failures are values, not exceptions: :meth:`RuleProjector.project`
returns a :class:`ProjectionOutcome` and the caller records a failed one as
an unmatch.  At most ``max_projections`` alternative product sets are
considered; rules producing many symmetric products are bounded here.

Acceptance is "any structure matches": a product set explains the
reaction as soon as one of its structures is an expected product.

Public API:
    RuleProjector.project(rule, substrates)                     -> ProjectionOutcome
    RuleProjector.score(rule, candidate_sets, expected)         -> ScoreVerdict
    RuleProjector.evaluate(rule, substrates, expected)          -> ScoreVerdict
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AbstractSet, Dict, List, Optional, Sequence, Set

from mechinspect.chem.engine import ChemistryEngine, Structure
from mechinspect.common.constants import ProjectionLimits, ScoreLadder
from mechinspect.common.errors import ChemistryError, ProjectionError, ProjectionErrorKind
from mechinspect.models import ScoreVerdict, TransformationRule

__all__ = ["ProjectionOutcome", "RuleProjector"]

logger = logging.getLogger(__name__)


@dataclass
class ProjectionOutcome:
    """Result of projecting one rule: product sets, or the error that prevented them."""

    product_sets: List[List[Structure]] = field(default_factory=list)
    error: Optional[ProjectionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, product_sets: List[List[Structure]]) -> "ProjectionOutcome":
        return cls(product_sets=product_sets)

    @classmethod
    def failure(cls, error: ProjectionError) -> "ProjectionOutcome":
        return cls(error=error)


class RuleProjector:
    """Projects rules through a :class:`ChemistryEngine` and scores the results."""

    def __init__(self, engine: ChemistryEngine, config: Optional[Dict[str, Any]] = None) -> None:
        self.engine = engine
        self.config = config or {}
        self.max_projections: int = int(self.config.get("max_projections", ProjectionLimits.MAX_PROJECTIONS))

    def project(self, rule: TransformationRule, substrates: Sequence[Structure]) -> ProjectionOutcome:
        if not substrates:
            return ProjectionOutcome.failure(
                ProjectionError(f"rule {rule.rule_id}: no substrates", kind=ProjectionErrorKind.NO_SUBSTRATES)
            )
        try:
            product_sets = self.engine.project_rule(rule, list(substrates), self.max_projections)
        except ProjectionError as exc:
            return ProjectionOutcome.failure(exc)
        except Exception as exc:
            return ProjectionOutcome.failure(
                ProjectionError(f"rule {rule.rule_id}: chemistry engine failed: {exc}",
                                kind=ProjectionErrorKind.ENGINE_FAILURE)
            )
        if len(product_sets) > self.max_projections:
            logger.debug("Rule %s: truncating %d product sets to %d",
                         rule.rule_id, len(product_sets), self.max_projections)
        return ProjectionOutcome.success(list(product_sets[: self.max_projections]))

    def score(
        self,
        rule: TransformationRule,
        candidate_sets: Sequence[Sequence[Structure]],
        expected_products: AbstractSet[str],
    ) -> ScoreVerdict:
        if not candidate_sets:
            logger.debug("No products were generated from the projection of rule %s", rule.rule_id)
            return ScoreVerdict.unmatch()

        for products in candidate_sets[: self.max_projections]:
            for identifier in self._identifiers(products):
                if identifier in expected_products:
                    return ScoreVerdict.match(ScoreLadder.score_for(rule.curation_status))
        return ScoreVerdict.unmatch()

    def evaluate(
        self,
        rule: TransformationRule,
        substrates: Sequence[Structure],
        expected_products: AbstractSet[str],
        reaction_id: Any = None,
    ) -> ScoreVerdict:
        """Project then score; a failed projection counts as an unmatch."""
        outcome = self.project(rule, substrates)
        if not outcome.ok:
            logger.error("Projection of rule %s onto substrates of reaction %s failed: %s",
                         rule.rule_id, reaction_id, outcome.error.message)
            return ScoreVerdict.unmatch()
        return self.score(rule, outcome.product_sets, expected_products)

    def _identifiers(self, products: Sequence[Structure]) -> Set[str]:
        identifiers: Set[str] = set()
        for product in products:
            try:
                normalized = self.engine.normalize(product)
                identifiers.add(self.engine.canonical_identifier(normalized, strip_stereochemistry=True))
            except ChemistryError as exc:
                logger.error("Unable to canonicalize projected product, skipping: %s", exc.message)
        return identifiers
