"""
Chemical computation tools for mechinspect.

- identifiers: InChI/SMILES parsing with LRU caching, placeholder detection
- engine:      ChemistryEngine interface and the RDKit implementation
"""

from .engine import ChemistryEngine, RDKitChemistryEngine, Structure
from .identifiers import comparison_identifier, is_inchi, is_placeholder, parse_identifier
