"""
Prediction Corpus
=================
Resolves prediction seeds into concrete predicted products.

Each seed is projected with the same :class:`RuleProjector` used for
validation; every alternative product set becomes one :class:`Prediction`.
Seeds whose projection fails are logged and skipped.

Public API:
    PredictionGenerator(projector).generate(seeds)  -> PredictionCorpus
    PredictionCorpus.unique_product_identifiers()    -> List[str]
    PredictionCorpus.to_dict() / from_dict()
    PredictionCorpus.write_json(path)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from mechinspect.chem.engine import Structure
from mechinspect.common.errors import ChemistryError
from mechinspect.models import Prediction, PredictionSeed
from mechinspect.validation.projector import RuleProjector

__all__ = ["PredictionCorpus", "PredictionGenerator"]

logger = logging.getLogger(__name__)


class PredictionCorpus:
    """An ordered collection of predictions from one expansion step."""

    def __init__(self, predictions: Optional[Iterable[Prediction]] = None) -> None:
        self.predictions: List[Prediction] = list(predictions or [])

    def add(self, prediction: Prediction) -> None:
        self.predictions.append(prediction)

    def unique_product_identifiers(self) -> List[str]:
        """Every predicted product identifier, once, in first-seen order."""
        seen: Dict[str, None] = {}
        for prediction in self.predictions:
            for identifier in prediction.product_identifiers:
                seen.setdefault(identifier, None)
        return list(seen)

    def to_dict(self) -> Dict[str, Any]:
        return {"predictions": [p.to_dict() for p in self.predictions]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PredictionCorpus":
        return cls(Prediction.from_dict(p) for p in d.get("predictions", []))

    def write_json(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Wrote %d predictions to %s", len(self.predictions), path)

    def __iter__(self):
        return iter(self.predictions)

    def __len__(self) -> int:
        return len(self.predictions)


class PredictionGenerator:
    """Turns seeds into a :class:`PredictionCorpus`."""

    def __init__(self, projector: RuleProjector) -> None:
        self.projector = projector
        self.engine = projector.engine

    def generate(self, seeds: Iterable[PredictionSeed]) -> PredictionCorpus:
        corpus = PredictionCorpus()
        for seed in seeds:
            outcome = self.projector.project(seed.rule, seed.substrates)
            if not outcome.ok:
                logger.warning("Skipping seed for rule %s: %s", seed.rule_id, outcome.error.message)
                continue

            substrate_ids = self._identifiers(seed.substrates)
            for products in outcome.product_sets:
                product_ids = self._identifiers(products)
                if not product_ids:
                    continue
                corpus.add(Prediction(
                    prediction_id=len(corpus),
                    rule_id=seed.rule_id,
                    substrate_identifiers=substrate_ids,
                    product_identifiers=product_ids,
                ))
        logger.info("Generated %d predictions", len(corpus))
        return corpus

    def _identifiers(self, structures: Sequence[Structure]) -> List[str]:
        identifiers: List[str] = []
        for structure in structures:
            try:
                normalized = self.engine.normalize(structure)
                identifiers.append(self.engine.canonical_identifier(normalized, strip_stereochemistry=False))
            except ChemistryError as exc:
                logger.warning("Unable to export predicted structure, skipping: %s", exc.message)
        return identifiers
