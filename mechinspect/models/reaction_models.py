"""
Reaction data models — observed reactions, composition keys, rankings.

Every class that crosses a collaborator boundary implements ``to_dict()``
and, where it is read back, ``from_dict()``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from mechinspect.common.constants import ScoreLadder

from .rule_models import RuleId

ChemicalId = Union[int, str]
CoefficientItems = Tuple[Tuple[ChemicalId, Optional[int]], ...]


def _check_coefficients(reaction_id: Any, side: str, coefficients: Dict[ChemicalId, Optional[int]]) -> None:
    for chem_id, coefficient in coefficients.items():
        if coefficient is None:
            continue
        if isinstance(coefficient, bool) or not isinstance(coefficient, int) or coefficient < 1:
            raise ValueError(
                f"reaction {reaction_id!r}: {side} {chem_id!r} has invalid coefficient {coefficient!r}"
            )


def _coefficients_from_records(records: Iterable[Dict[str, Any]]) -> Dict[ChemicalId, Optional[int]]:
    return {r["id"]: r.get("coefficient") for r in records}


def _coefficients_to_records(coefficients: Dict[ChemicalId, Optional[int]]) -> List[Dict[str, Any]]:
    return [{"id": k, "coefficient": v} for k, v in coefficients.items()]


# ---------------------------------------------------------------------------
# ObservedReaction
# ---------------------------------------------------------------------------

@dataclass
class ObservedReaction:
    """A reaction read from the knowledge store, cofactors already split out.

    ``substrates`` and ``products`` map chemical id to stoichiometric
    coefficient (``None`` when the source recorded no coefficient).
    Dictionary order is the insertion order of the ids and is preserved
    by every consumer.
    """

    reaction_id: Any
    substrates: Dict[ChemicalId, Optional[int]] = field(default_factory=dict)
    products: Dict[ChemicalId, Optional[int]] = field(default_factory=dict)
    substrate_cofactors: List[ChemicalId] = field(default_factory=list)
    product_cofactors: List[ChemicalId] = field(default_factory=list)

    def __post_init__(self) -> None:
        _check_coefficients(self.reaction_id, "substrate", self.substrates)
        _check_coefficients(self.reaction_id, "product", self.products)

    def substrate_coefficient(self, chem_id: ChemicalId) -> Optional[int]:
        return self.substrates.get(chem_id)

    def product_coefficient(self, chem_id: ChemicalId) -> Optional[int]:
        return self.products.get(chem_id)

    def all_chemical_ids(self) -> List[ChemicalId]:
        """Substrates, products and cofactors, first occurrence order, no duplicates."""
        seen: Dict[ChemicalId, None] = {}
        for group in (self.substrates, self.products, self.substrate_cofactors, self.product_cofactors):
            for chem_id in group:
                seen.setdefault(chem_id, None)
        return list(seen)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.reaction_id,
            "substrates": _coefficients_to_records(self.substrates),
            "products": _coefficients_to_records(self.products),
            "substrate_cofactors": list(self.substrate_cofactors),
            "product_cofactors": list(self.product_cofactors),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ObservedReaction":
        return cls(
            reaction_id=d.get("id"),
            substrates=_coefficients_from_records(d.get("substrates", [])),
            products=_coefficients_from_records(d.get("products", [])),
            substrate_cofactors=list(d.get("substrate_cofactors", [])),
            product_cofactors=list(d.get("product_cofactors", [])),
        )


# ---------------------------------------------------------------------------
# CompositionKey
# ---------------------------------------------------------------------------

def _sorted_items(mapping: Dict[ChemicalId, Optional[int]]) -> CoefficientItems:
    # repr keeps 1 and "1" apart and gives mixed id types a total order
    return tuple(sorted(mapping.items(), key=lambda kv: repr(kv[0])))


@dataclass(frozen=True)
class CompositionKey:
    """Substrate and product coefficient mappings of a reaction, hashable.

    Two reactions with equal keys are treated as scoring identically
    against a rule corpus.  This holds only while rules ignore cofactors.
    """

    substrates: CoefficientItems = ()
    products: CoefficientItems = ()

    @classmethod
    def from_mappings(
        cls,
        substrates: Dict[ChemicalId, Optional[int]],
        products: Dict[ChemicalId, Optional[int]],
    ) -> "CompositionKey":
        return cls(substrates=_sorted_items(substrates), products=_sorted_items(products))

    def substrate_map(self) -> Dict[ChemicalId, Optional[int]]:
        return dict(self.substrates)

    def product_map(self) -> Dict[ChemicalId, Optional[int]]:
        return dict(self.products)


# ---------------------------------------------------------------------------
# ScoreVerdict
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreVerdict:
    """Outcome of scoring one rule against one reaction."""

    matched: bool
    score: int

    @classmethod
    def match(cls, score: int) -> "ScoreVerdict":
        return cls(matched=True, score=score)

    @classmethod
    def unmatch(cls) -> "ScoreVerdict":
        return cls(matched=False, score=ScoreLadder.UNMATCH_SCORE)


# ---------------------------------------------------------------------------
# ScoreRanking
# ---------------------------------------------------------------------------

class ScoreRanking(Mapping):
    """Score (descending) -> rule ids achieving it, for one reaction.

    Immutable: buckets are tuples, and no mutating methods exist.  Use
    :class:`ScoreRankingBuilder` to accumulate verdicts.

    A ranking equals any mapping with the same scores and the same rule ids
    in the same order, whatever the bucket sequence type, so
    ``ranking == {4: ["R7"]}`` holds.  ``dict(ranking)`` keeps the tuples.
    """

    __slots__ = ("_buckets",)

    def __init__(self, buckets: Optional[Dict[int, Sequence[RuleId]]] = None) -> None:
        items = sorted((buckets or {}).items(), key=lambda kv: kv[0], reverse=True)
        self._buckets: Tuple[Tuple[int, Tuple[RuleId, ...]], ...] = tuple(
            (score, tuple(rule_ids)) for score, rule_ids in items if rule_ids
        )

    def __getitem__(self, score: int) -> Tuple[RuleId, ...]:
        for bucket_score, rule_ids in self._buckets:
            if bucket_score == score:
                return rule_ids
        raise KeyError(score)

    def __iter__(self) -> Iterator[int]:
        return (score for score, _ in self._buckets)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        try:
            other_buckets = {score: tuple(rule_ids) for score, rule_ids in other.items()}
        except TypeError:
            return False
        return dict(self._buckets) == other_buckets

    __hash__ = None

    def __len__(self) -> int:
        return len(self._buckets)

    def __repr__(self) -> str:
        return f"ScoreRanking({dict(self._buckets)!r})"

    @property
    def is_empty(self) -> bool:
        return not self._buckets

    def best_score(self) -> Optional[int]:
        return self._buckets[0][0] if self._buckets else None

    def rule_ids(self) -> List[RuleId]:
        """All matching rule ids, best score first."""
        return [rule_id for _, rule_ids in self._buckets for rule_id in rule_ids]

    def to_result_dict(self) -> Dict[str, int]:
        """Rule id -> score, the form attached back onto the reaction record."""
        return {str(rule_id): score for score, rule_ids in self._buckets for rule_id in rule_ids}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "buckets": [
                {"score": score, "rule_ids": list(rule_ids)} for score, rule_ids in self._buckets
            ],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ScoreRanking":
        return cls({b["score"]: b.get("rule_ids", []) for b in d.get("buckets", [])})


class ScoreRankingBuilder:
    """Accumulates matched verdicts, then freezes them into a :class:`ScoreRanking`."""

    def __init__(self) -> None:
        self._buckets: Dict[int, List[RuleId]] = {}

    def add(self, rule_id: RuleId, verdict: ScoreVerdict) -> None:
        if not verdict.matched:
            return
        self._buckets.setdefault(verdict.score, []).append(rule_id)

    def build(self) -> ScoreRanking:
        return ScoreRanking(self._buckets)


# ---------------------------------------------------------------------------
# ValidationOutcome
# ---------------------------------------------------------------------------

@dataclass
class ValidationOutcome:
    """Per-reaction result of a batch run: a ranking or the error that stopped it.

    An empty ranking (no rule matched) and a failure are different outcomes.
    """

    reaction_id: Any
    ranking: Optional[ScoreRanking] = None
    error: Optional[Exception] = None
    from_cache: bool = False

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.ranking is not None

    @property
    def matched(self) -> bool:
        return self.succeeded and not self.ranking.is_empty

    def to_dict(self) -> Dict[str, Any]:
        error: Optional[Dict[str, Any]] = None
        if self.error is not None:
            to_dict = getattr(self.error, "to_dict", None)
            error = to_dict() if callable(to_dict) else {"message": str(self.error)}
        return {
            "reaction_id": self.reaction_id,
            "succeeded": self.succeeded,
            "from_cache": self.from_cache,
            "result": self.ranking.to_result_dict() if self.ranking is not None else None,
            "error": error,
        }
