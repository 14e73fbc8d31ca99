"""
mechinspect — mechanistic validation and forward expansion of enzymatic reactions.

Organized into:
- common/     : shared constants, errors, status enums
- models/     : typed dataclass definitions
- chem/       : RDKit chemistry engine and identifier helpers
- corpus/     : transformation rule corpus and identifier corrections
- validation/ : composition key, cache, rule projection, reaction validator
- expansion/  : single-substrate seed expansion and prediction corpus
"""

__version__ = "0.1.0"
