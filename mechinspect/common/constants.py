"""
Centralized Configuration Registry
====================================

Single source of truth for all thresholds, limits, and shared constants.

Usage::

    from mechinspect.common.constants import ScoreLadder, ProjectionLimits

    score = ScoreLadder.score_for(rule.curation_status)
    sets = sets[:ProjectionLimits.MAX_PROJECTIONS]
"""

from pathlib import Path
from typing import Dict

from .status import CurationStatus


class ScoreLadder:
    """Curation-status score ladder (global single definition).

    The table is data, not control flow: policy changes happen here and
    nowhere else.

    Ordering:
        Perfect (4) > ManuallyValidated (3) > Unknown (2)
        > default fallback (1) > ManuallyInvalidated (0) > Unmatch (-1)

    An unreviewed rule ranks above any fallback status and above a rule a
    curator rejected, but below one a curator confirmed.
    """

    TABLE: Dict[CurationStatus, int] = {
        CurationStatus.PERFECT: 4,
        CurationStatus.MANUALLY_VALIDATED: 3,
        CurationStatus.UNKNOWN: 2,
        CurationStatus.MANUALLY_INVALIDATED: 0,
    }
    DEFAULT_MATCH_SCORE: int = 1
    UNMATCH_SCORE: int = -1

    @classmethod
    def score_for(cls, status: CurationStatus) -> int:
        """Return the match score a rule with *status* earns."""
        return cls.TABLE.get(status, cls.DEFAULT_MATCH_SCORE)


class ProjectionLimits:
    """Bounds on rule projection."""

    MAX_PROJECTIONS: int = 10           # alternative product sets kept per projection


class ChemicalMarkers:
    """Markers recognised inside structure identifiers."""

    PLACEHOLDER: str = "FAKE"           # non-physical entries in the knowledge graph


# ---------------------------------------------------------------------------
# Reference data locations
# ---------------------------------------------------------------------------

DATA_DIR: Path = Path(__file__).resolve().parent.parent / "data"

RULES_PATH_ENV: str = "MECHINSPECT_RULES_PATH"
"""Environment variable overriding the bundled rule corpus."""

CORRECTIONS_PATH_ENV: str = "MECHINSPECT_CORRECTIONS_PATH"
"""Environment variable overriding the bundled identifier corrections."""

DEFAULT_RULES_FILE: Path = DATA_DIR / "validation_rules.json"
DEFAULT_CORRECTIONS_FILE: Path = DATA_DIR / "identifier_corrections.json"

SINGLE_SUBSTRATE: int = 1
"""Arity used by single-substrate forward expansion."""
