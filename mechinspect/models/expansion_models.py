"""
Forward-expansion data models — prediction seeds and resolved predictions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .rule_models import RuleId, TransformationRule


@dataclass(frozen=True)
class PredictionSeed:
    """A (rule, ordered inputs) pair queued for hypothetical product generation.

    ``substrates`` holds chemistry-engine structures.  ``sar`` is an
    optional structure-activity constraint applied downstream.
    """

    rule_id: RuleId
    substrates: Tuple[Any, ...]
    rule: TransformationRule
    sar: Optional[Any] = None


@dataclass
class Prediction:
    """One projected product set for one seed."""

    prediction_id: int
    rule_id: RuleId
    substrate_identifiers: List[str] = field(default_factory=list)
    product_identifiers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.prediction_id,
            "rule_id": self.rule_id,
            "substrates": list(self.substrate_identifiers),
            "products": list(self.product_identifiers),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Prediction":
        return cls(
            prediction_id=d.get("id", 0),
            rule_id=d.get("rule_id"),
            substrate_identifiers=list(d.get("substrates", [])),
            product_identifiers=list(d.get("products", [])),
        )
