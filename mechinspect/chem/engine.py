"""
Chemistry Engine
================
The structure-level collaborator behind rule projection and scoring.

:class:`ChemistryEngine` is the interface the core depends on;
:class:`RDKitChemistryEngine` implements it with RDKit:

* identifiers are InChI (``InChI=...``) or SMILES strings;
* normalization = sanitize + RDKit aromaticity + 2D coordinates, on a copy;
* comparison identifiers are InChI strings, exported with ``-SNon`` when
  stereochemistry is stripped;
* rule templates are reaction SMARTS, compiled once and cached.

Usage::

    engine = RDKitChemistryEngine()
    mol = engine.normalize(engine.parse_structure("CCO"))
    product_sets = engine.project_rule(rule, [mol], max_results=10)
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rdkit import Chem
from rdkit.Chem import AllChem, rdDepictor

from mechinspect.chem.identifiers import parse_identifier
from mechinspect.common.errors import (
    CanonicalizationError,
    ChemistryError,
    ProjectionError,
    ProjectionErrorKind,
    StructureParseError,
)
from mechinspect.models import TransformationRule

__all__ = ["ChemistryEngine", "RDKitChemistryEngine", "Structure"]

logger = logging.getLogger(__name__)

Structure = Any

_INCHI_STRIP_STEREO_OPTIONS = "-SNon"


class ChemistryEngine(ABC):
    """Interface to structure parsing, canonicalization and rule projection."""

    @abstractmethod
    def parse_structure(self, identifier: str) -> Structure:
        """Parse *identifier* into a structure.

        Raises:
            StructureParseError: If the identifier cannot be read.
        """
        raise NotImplementedError

    @abstractmethod
    def normalize(self, structure: Structure) -> Structure:
        """Return a 2D-cleaned, aromatized structure.  Idempotent.

        Raises:
            ChemistryError: If the structure cannot be normalized.
        """
        raise NotImplementedError

    @abstractmethod
    def canonical_identifier(self, structure: Structure, strip_stereochemistry: bool = True) -> str:
        """Export *structure* to an identifier suitable for equality comparison.

        Raises:
            CanonicalizationError: If the export fails.
        """
        raise NotImplementedError

    @abstractmethod
    def compile_rule(self, rule: TransformationRule) -> Any:
        """Build (or fetch) the engine's reactor for *rule*.

        Raises:
            ProjectionError: With kind ``INVALID_RULE`` for unusable templates.
        """
        raise NotImplementedError

    @abstractmethod
    def project_rule(
        self,
        rule: TransformationRule,
        ordered_inputs: Sequence[Structure],
        max_results: int,
    ) -> List[List[Structure]]:
        """Apply *rule* to *ordered_inputs*, returning alternative output sets.

        Raises:
            ProjectionError: If the rule is invalid, the engine fails, or no
                inputs were given.
        """
        raise NotImplementedError


class RDKitChemistryEngine(ChemistryEngine):
    """RDKit-backed chemistry engine."""

    def __init__(self) -> None:
        self._reactors: Dict[str, Any] = {}

    # -- Structures --------------------------------------------------------

    def parse_structure(self, identifier: str) -> Structure:
        mol = parse_identifier(identifier) if identifier else None
        if mol is None:
            raise StructureParseError(f"cannot parse structure identifier {identifier!r}")
        return mol

    def normalize(self, structure: Structure) -> Structure:
        mol = Chem.Mol(structure)
        try:
            Chem.SanitizeMol(mol)
            Chem.SetAromaticity(mol)
            rdDepictor.Compute2DCoords(mol)
        except Exception as exc:
            raise ChemistryError(f"cannot normalize structure: {exc}", code="NORMALIZATION_FAILED") from exc
        return mol

    def canonical_identifier(self, structure: Structure, strip_stereochemistry: bool = True) -> str:
        options = _INCHI_STRIP_STEREO_OPTIONS if strip_stereochemistry else ""
        try:
            inchi = Chem.MolToInchi(structure, options=options)
        except Exception as exc:
            raise CanonicalizationError(f"InChI export failed: {exc}") from exc
        if not inchi:
            raise CanonicalizationError("InChI export produced an empty identifier")
        return inchi

    # -- Rules -------------------------------------------------------------

    def compile_rule(self, rule: TransformationRule) -> Any:
        reactor = self._reactors.get(rule.template)
        if reactor is None:
            reactor = self._build_reactor(rule)
            self._reactors[rule.template] = reactor

        # rules sharing a template may still declare different arities
        if reactor.GetNumReactantTemplates() != rule.substrate_arity:
            raise ProjectionError(
                f"rule {rule.rule_id}: template has {reactor.GetNumReactantTemplates()} reactant "
                f"template(s) but declares arity {rule.substrate_arity}",
                kind=ProjectionErrorKind.INVALID_RULE,
            )
        return reactor

    def _build_reactor(self, rule: TransformationRule) -> Any:
        try:
            reactor = AllChem.ReactionFromSmarts(rule.template)
            reactor.Initialize()
            _, num_errors = reactor.Validate()
        except Exception as exc:
            raise ProjectionError(
                f"rule {rule.rule_id}: invalid template: {exc}", kind=ProjectionErrorKind.INVALID_RULE
            ) from exc
        if num_errors:
            raise ProjectionError(
                f"rule {rule.rule_id}: template failed validation with {num_errors} error(s)",
                kind=ProjectionErrorKind.INVALID_RULE,
            )
        return reactor

    def project_rule(
        self,
        rule: TransformationRule,
        ordered_inputs: Sequence[Structure],
        max_results: int,
    ) -> List[List[Structure]]:
        if not ordered_inputs:
            raise ProjectionError(f"rule {rule.rule_id}: no substrates", kind=ProjectionErrorKind.NO_SUBSTRATES)

        reactor = self.compile_rule(rule)
        expected = reactor.GetNumReactantTemplates()
        if len(ordered_inputs) != expected:
            raise ProjectionError(
                f"rule {rule.rule_id}: expects {expected} input(s), got {len(ordered_inputs)}",
                kind=ProjectionErrorKind.ENGINE_FAILURE,
            )

        product_sets: List[List[Structure]] = []
        seen: set = set()
        for ordering in _distinct_orderings(ordered_inputs):
            try:
                outcomes = reactor.RunReactants(tuple(ordering))
            except Exception as exc:
                raise ProjectionError(
                    f"rule {rule.rule_id}: RunReactants failed: {exc}", kind=ProjectionErrorKind.ENGINE_FAILURE
                ) from exc

            for outcome in outcomes:
                products = _sanitized_products(outcome)
                if products is None:
                    continue
                key = tuple(sorted(Chem.MolToSmiles(p) for p in products))
                if key in seen:
                    continue
                seen.add(key)
                product_sets.append(products)
                if len(product_sets) >= max_results:
                    return product_sets

        if not product_sets:
            logger.debug("Rule %s produced no product sets", rule.rule_id)
        return product_sets


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _distinct_orderings(inputs: Sequence[Structure]) -> List[Tuple[Structure, ...]]:
    """Every ordering of *inputs*, skipping orderings that swap identical copies.

    Reaction templates match reactants positionally, so multi-substrate
    rules have to be tried against each arrangement.
    """
    orderings: List[Tuple[Structure, ...]] = []
    seen: set = set()
    for perm in itertools.permutations(range(len(inputs))):
        key = tuple(id(inputs[i]) for i in perm)
        if key in seen:
            continue
        seen.add(key)
        orderings.append(tuple(inputs[i] for i in perm))
    return orderings


def _sanitized_products(outcome: Sequence[Any]) -> Optional[List[Any]]:
    products = []
    for product in outcome:
        mol = Chem.Mol(product)
        try:
            Chem.SanitizeMol(mol)
        except Exception:
            return None
        products.append(mol)
    return products
