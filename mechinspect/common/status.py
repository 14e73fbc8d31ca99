"""
Unified Status Enums
====================

Single source of truth for curation status and chemical role enumerations.

Usage::

    from mechinspect.common.status import CurationStatus, ChemicalRole

    if rule.curation_status == CurationStatus.PERFECT:
        ...
"""

from enum import Enum


class CurationStatus(Enum):
    """Human-review label on a transformation rule.

    The corpus file records this as a ``category`` string plus a
    tri-state ``manual_validation`` flag; see
    :meth:`mechinspect.models.TransformationRule.from_dict` for the mapping.
    """

    PERFECT = "perfect"
    MANUALLY_VALIDATED = "manually_validated"
    MANUALLY_NOT_VERIFIED = "manually_not_verified"
    MANUALLY_INVALIDATED = "manually_invalidated"
    UNKNOWN = "unknown"


class ChemicalRole(Enum):
    """Side of a reaction a chemical appears on."""

    SUBSTRATE = "substrate"
    PRODUCT = "product"
