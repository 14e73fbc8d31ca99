"""
Structure Identifier Utilities
==============================
Parsing and classification of chemical identifier strings (InChI or SMILES).

Public API:
    is_inchi(identifier)                 → bool
    is_placeholder(identifier, marker)   → bool
    parse_identifier(identifier)         → Optional[Mol]   (LRU-cached)
    comparison_identifier(engine, identifier) → str        (stereo-free)
    clear_cache()                        → None
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING, Optional

from rdkit import Chem

from mechinspect.common.constants import ChemicalMarkers
from mechinspect.common.errors import CanonicalizationError, ChemistryError

if TYPE_CHECKING:
    from mechinspect.chem.engine import ChemistryEngine

_INCHI_PREFIX = "InChI="


def is_inchi(identifier: str) -> bool:
    return identifier.startswith(_INCHI_PREFIX)


def is_placeholder(identifier: Optional[str], marker: str = ChemicalMarkers.PLACEHOLDER) -> bool:
    """Return True for non-physical knowledge-graph entries (e.g. ``InChI=/FAKE/...``)."""
    return bool(identifier) and marker in identifier


# ---------------------------------------------------------------------------
# Core cached parser
# ---------------------------------------------------------------------------

@lru_cache(maxsize=512)
def parse_identifier(identifier: str) -> Optional[Chem.Mol]:
    """Parse an InChI or SMILES string into a sanitized RDKit Mol.

    Results are LRU-cached (maxsize=512) so repeated calls with the same
    identifier return the *same* object; callers must copy before mutating.

    Returns ``None`` for invalid or empty identifiers.
    """
    if not identifier or not identifier.strip():
        return None
    identifier = identifier.strip()
    if is_inchi(identifier):
        mol = Chem.MolFromInchi(identifier)
    else:
        mol = Chem.MolFromSmiles(identifier)
    if mol is not None:
        try:
            Chem.SanitizeMol(mol)
        except Exception:
            return None
    return mol


def comparison_identifier(engine: "ChemistryEngine", identifier: str) -> str:
    """Parse, normalize and export *identifier* with stereochemistry stripped.

    Raises:
        CanonicalizationError: If any step fails.
    """
    try:
        structure = engine.normalize(engine.parse_structure(identifier))
        return engine.canonical_identifier(structure, strip_stereochemistry=True)
    except CanonicalizationError:
        raise
    except ChemistryError as exc:
        raise CanonicalizationError(
            f"cannot build comparison identifier for {identifier}: {exc.message}"
        ) from exc


# ---------------------------------------------------------------------------
# Cache management
# ---------------------------------------------------------------------------

def clear_cache() -> None:
    """Clear the LRU caches (useful for testing or memory management)."""
    parse_identifier.cache_clear()
