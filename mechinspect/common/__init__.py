"""
Common infrastructure — constants, errors, status enums.
"""

from .constants import ChemicalMarkers, ProjectionLimits, ScoreLadder
from .errors import (
    ErrorSeverity,
    MechInspectError,
    CorpusLoadError,
    ChemicalResolutionError,
    ReactionProcessingError,
    ReactionNotFoundError,
    ChemistryError,
    StructureParseError,
    CanonicalizationError,
    ProjectionError,
    ProjectionErrorKind,
)
from .status import ChemicalRole, CurationStatus
