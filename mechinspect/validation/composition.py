"""
Composition keys — the cache key for reaction validation results.

Coefficient lookup goes through :func:`coefficient_for` only, so the
choice between the two lookup policies is made in one place:

``ROLE_ACCESSOR`` (default)
    Substrate coefficients come from the substrate side, product
    coefficients from the product side.

``SUBSTRATE_ACCESSOR``
    The substrate accessor is used for both sides.  Product ids are not
    substrates, so every product coefficient resolves to ``None`` and
    product stoichiometry drops out of the key: ``A -> B`` and
    ``A -> 2 B`` share a cache entry.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from mechinspect.common.status import ChemicalRole
from mechinspect.models import ChemicalId, CompositionKey, ObservedReaction

__all__ = ["CoefficientPolicy", "DEFAULT_COEFFICIENT_POLICY", "coefficient_for", "build_composition_key"]


class CoefficientPolicy(Enum):
    """How :func:`coefficient_for` resolves a coefficient."""

    ROLE_ACCESSOR = "role_accessor"
    SUBSTRATE_ACCESSOR = "substrate_accessor"


DEFAULT_COEFFICIENT_POLICY = CoefficientPolicy.ROLE_ACCESSOR


def coefficient_for(
    reaction: ObservedReaction,
    chem_id: ChemicalId,
    role: ChemicalRole,
    policy: CoefficientPolicy = DEFAULT_COEFFICIENT_POLICY,
) -> Optional[int]:
    """Return the coefficient of *chem_id* in its *role* under *policy*."""
    if policy is CoefficientPolicy.SUBSTRATE_ACCESSOR or role is ChemicalRole.SUBSTRATE:
        return reaction.substrate_coefficient(chem_id)
    return reaction.product_coefficient(chem_id)


def build_composition_key(
    reaction: ObservedReaction,
    policy: CoefficientPolicy = DEFAULT_COEFFICIENT_POLICY,
) -> CompositionKey:
    substrates: Dict[ChemicalId, Optional[int]] = {
        chem_id: coefficient_for(reaction, chem_id, ChemicalRole.SUBSTRATE, policy)
        for chem_id in reaction.substrates
    }
    products: Dict[ChemicalId, Optional[int]] = {
        chem_id: coefficient_for(reaction, chem_id, ChemicalRole.PRODUCT, policy)
        for chem_id in reaction.products
    }
    return CompositionKey.from_mappings(substrates, products)
