"""
Rule data models — transformation rules ("reaction operators").

A rule record in the reference corpus looks like::

    {
        "id": 165,
        "ro": "[C:1][OH:2]>>[C:1]=[O:2]",
        "substrate_count": 1,
        "product_count": 1,
        "category": "perfect",
        "manual_validation": true,
        "name": "alcohol oxidation"
    }

``template`` / ``substrate_arity`` / ``curation_status`` are accepted as
aliases of ``ro`` / ``substrate_count`` / the derived status.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from mechinspect.common.status import CurationStatus

RuleId = Union[int, str]

_PERFECT_CATEGORY = "perfect"


def derive_curation_status(category: Optional[str], manual_validation: Optional[bool]) -> CurationStatus:
    """Map the corpus' ``category`` / ``manual_validation`` pair onto a :class:`CurationStatus`."""
    if isinstance(category, str) and category.strip().lower() == _PERFECT_CATEGORY:
        return CurationStatus.PERFECT
    if manual_validation is None:
        return CurationStatus.UNKNOWN
    if manual_validation:
        return CurationStatus.MANUALLY_VALIDATED
    return CurationStatus.MANUALLY_INVALIDATED


@dataclass(frozen=True)
class TransformationRule:
    """A curated reaction operator.

    ``template`` is opaque to the core; only the chemistry engine
    interprets it.  Immutable once loaded.
    """

    rule_id: RuleId
    template: str
    substrate_arity: int = 1
    curation_status: CurationStatus = CurationStatus.UNKNOWN
    name: str = ""
    category: str = ""
    manual_validation: Optional[bool] = None
    product_count: Optional[int] = None
    note: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.template, str) or not self.template.strip():
            raise ValueError(f"rule {self.rule_id!r} has an empty template")
        if isinstance(self.substrate_arity, bool) or not isinstance(self.substrate_arity, int):
            raise ValueError(f"rule {self.rule_id!r} has a non-integer substrate arity")
        if self.substrate_arity < 1:
            raise ValueError(f"rule {self.rule_id!r} has substrate arity {self.substrate_arity} < 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.rule_id,
            "template": self.template,
            "substrate_arity": self.substrate_arity,
            "curation_status": self.curation_status.value,
            "name": self.name,
            "category": self.category,
            "manual_validation": self.manual_validation,
            "product_count": self.product_count,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransformationRule":
        """Build a rule from a corpus record.

        Raises:
            ValueError: If the record lacks an id or template, or carries an
                unknown curation status or a bad arity.
        """
        rule_id = d.get("id")
        if rule_id is None or (isinstance(rule_id, str) and not rule_id.strip()):
            raise ValueError("rule record has no id")

        template = d.get("template", d.get("ro"))
        if not isinstance(template, str):
            raise ValueError(f"rule {rule_id!r} has no template")

        category = d.get("category") or ""
        manual_validation = d.get("manual_validation")
        if manual_validation is not None and not isinstance(manual_validation, bool):
            raise ValueError(f"rule {rule_id!r} has a non-boolean manual_validation flag")

        raw_status = d.get("curation_status")
        if raw_status is None:
            status = derive_curation_status(category, manual_validation)
        else:
            try:
                status = CurationStatus(raw_status)
            except ValueError:
                raise ValueError(f"rule {rule_id!r} has unknown curation status {raw_status!r}") from None

        return cls(
            rule_id=rule_id,
            template=template.strip(),
            substrate_arity=d.get("substrate_arity", d.get("substrate_count", 1)),
            curation_status=status,
            name=d.get("name") or "",
            category=category,
            manual_validation=manual_validation,
            product_count=d.get("product_count"),
            note=d.get("note") or "",
        )
