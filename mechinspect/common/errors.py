"""
Unified Error Hierarchy
=======================
Exception-based error system for all mechinspect modules.

Severity tells the caller how far an error is allowed to travel:

* ``CRITICAL`` — fatal to the whole run (the rule corpus could not be loaded).
* ``HIGH``     — fatal to a single reaction; the batch moves on.
* ``MEDIUM``   — recovered locally as a non-match or a skipped rule/molecule.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels for the unified error system."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class MechInspectError(Exception):
    """Unified error base class for all mechinspect errors.

    Attributes:
        code: Machine-readable error code (e.g. "CHEMICAL_UNRESOLVED").
        message: Human-readable error description.
        severity: Error severity level.
    """

    default_code: str = "MECHINSPECT_ERROR"
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
    ):
        self.code = code or self.default_code
        self.message = message
        self.severity = severity or self.default_severity
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dictionary."""
        return {
            "code": self.code,
            "message": self.message,
            "severity": self.severity.value,
        }


class CorpusLoadError(MechInspectError):
    """Raised when reference data (rules, identifier corrections) is missing or malformed."""
    default_code = "CORPUS_LOAD_FAILED"
    default_severity = ErrorSeverity.CRITICAL


class ChemicalResolutionError(MechInspectError):
    """Raised when a real chemical in a reaction has no structure identifier."""
    default_code = "CHEMICAL_UNRESOLVED"
    default_severity = ErrorSeverity.HIGH


class ReactionProcessingError(MechInspectError):
    """Raised when one reaction cannot be validated (unparsable substrate, uncanonicalizable product)."""
    default_code = "REACTION_PROCESSING_FAILED"
    default_severity = ErrorSeverity.HIGH


class ReactionNotFoundError(MechInspectError):
    """Raised when a knowledge store has no reaction for the requested id."""
    default_code = "REACTION_NOT_FOUND"
    default_severity = ErrorSeverity.HIGH


class ChemistryError(MechInspectError):
    """Raised when a chemistry engine operation fails."""
    default_code = "CHEMISTRY_FAILED"


class StructureParseError(ChemistryError):
    """Raised when an identifier cannot be parsed into a structure."""
    default_code = "STRUCTURE_PARSE_FAILED"


class CanonicalizationError(ChemistryError):
    """Raised when a structure cannot be exported to a comparison identifier."""
    default_code = "CANONICALIZATION_FAILED"


class ProjectionErrorKind(Enum):
    """Why a rule projection failed."""
    INVALID_RULE = "invalid_rule"
    ENGINE_FAILURE = "engine_failure"
    NO_SUBSTRATES = "no_substrates"


class ProjectionError(ChemistryError):
    """Raised when a transformation rule cannot be projected onto its inputs."""
    default_code = "PROJECTION_FAILED"

    def __init__(
        self,
        message: str,
        kind: ProjectionErrorKind = ProjectionErrorKind.ENGINE_FAILURE,
        code: Optional[str] = None,
        severity: Optional[ErrorSeverity] = None,
    ):
        self.kind = kind
        super().__init__(message, code=code, severity=severity)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["kind"] = self.kind.value
        return d
