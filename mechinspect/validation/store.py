"""
Knowledge store — where reactions and chemical identifiers come from.

The core only needs two reads and one write-back; persistent
implementations live outside this package.  :class:`InMemoryKnowledgeStore`
serves tests and small scripts.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

from mechinspect.common.errors import ReactionNotFoundError
from mechinspect.models import ChemicalId, ObservedReaction, ScoreRanking

__all__ = ["KnowledgeStore", "InMemoryKnowledgeStore"]


class KnowledgeStore(ABC):
    """Read access to reactions and chemical structure identifiers."""

    @abstractmethod
    def read_reaction(self, reaction_id: Any) -> ObservedReaction:
        """Return the reaction with *reaction_id*.

        Raises:
            ReactionNotFoundError: If there is no such reaction.
        """
        raise NotImplementedError

    @abstractmethod
    def read_chemical_identifier(self, chem_id: ChemicalId) -> Optional[str]:
        """Return the structure identifier of *chem_id*, or ``None`` when unknown."""
        raise NotImplementedError

    def attach_result(self, reaction_id: Any, ranking: ScoreRanking) -> None:
        """Record a validation result against a reaction.  No-op by default."""


class InMemoryKnowledgeStore(KnowledgeStore):
    """Dict-backed knowledge store."""

    def __init__(
        self,
        reactions: Iterable[ObservedReaction] = (),
        chemicals: Optional[Dict[ChemicalId, str]] = None,
    ) -> None:
        self.reactions: Dict[Any, ObservedReaction] = {r.reaction_id: r for r in reactions}
        self.chemicals: Dict[ChemicalId, str] = dict(chemicals or {})
        self.results: Dict[Any, Dict[str, int]] = {}

    def read_reaction(self, reaction_id: Any) -> ObservedReaction:
        reaction = self.reactions.get(reaction_id)
        if reaction is None:
            raise ReactionNotFoundError(f"Could not find reaction {reaction_id} in the store")
        return reaction

    def read_chemical_identifier(self, chem_id: ChemicalId) -> Optional[str]:
        return self.chemicals.get(chem_id)

    def attach_result(self, reaction_id: Any, ranking: ScoreRanking) -> None:
        self.results[reaction_id] = ranking.to_result_dict()
