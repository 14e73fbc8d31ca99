"""
Scripted chemistry engine for chemistry-free tests.

Structures are the identifier strings themselves.  Projections are set up
per rule id; every call is recorded so tests can assert on call counts.
"""

import sys
from collections import Counter
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mechinspect.chem.engine import ChemistryEngine
from mechinspect.common.errors import (
    CanonicalizationError,
    ProjectionError,
    ProjectionErrorKind,
    StructureParseError,
)
from mechinspect.common.status import CurationStatus
from mechinspect.corpus import RuleCorpus
from mechinspect.models import TransformationRule


class StubChemistryEngine(ChemistryEngine):
    """ChemistryEngine whose behaviour is configured per test.

    Args:
        projections: rule id -> list of product sets, or an exception to raise.
        unparsable: identifiers ``parse_structure`` rejects.
        uncanonicalizable: structures ``canonical_identifier`` rejects.
        invalid_rules: rule ids ``compile_rule`` rejects.
    """

    def __init__(self, projections=None, unparsable=(), uncanonicalizable=(), invalid_rules=()):
        self.projections = dict(projections or {})
        self.unparsable = set(unparsable)
        self.uncanonicalizable = set(uncanonicalizable)
        self.invalid_rules = set(invalid_rules)
        self.calls = Counter()
        self.projected = []

    def parse_structure(self, identifier):
        self.calls["parse_structure"] += 1
        if identifier in self.unparsable:
            raise StructureParseError(f"cannot parse {identifier}")
        return identifier

    def normalize(self, structure):
        self.calls["normalize"] += 1
        return structure

    def canonical_identifier(self, structure, strip_stereochemistry=True):
        self.calls["canonical_identifier"] += 1
        if structure in self.uncanonicalizable:
            raise CanonicalizationError(f"cannot export {structure}")
        return structure.replace("@", "") if strip_stereochemistry else structure

    def compile_rule(self, rule):
        self.calls["compile_rule"] += 1
        if rule.rule_id in self.invalid_rules:
            raise ProjectionError(f"rule {rule.rule_id} is malformed", kind=ProjectionErrorKind.INVALID_RULE)
        return rule.template

    def project_rule(self, rule, ordered_inputs, max_results):
        self.calls["project_rule"] += 1
        self.projected.append((rule.rule_id, tuple(ordered_inputs)))
        if not ordered_inputs:
            raise ProjectionError("no substrates", kind=ProjectionErrorKind.NO_SUBSTRATES)
        result = self.projections.get(rule.rule_id, [])
        if isinstance(result, Exception):
            raise result
        return [list(products) for products in result]


def make_rule(rule_id, status=CurationStatus.UNKNOWN, arity=1, template=None):
    return TransformationRule(
        rule_id=rule_id,
        template=template or f"template-{rule_id}",
        substrate_arity=arity,
        curation_status=status,
    )


def make_corpus(*rules):
    return RuleCorpus(rules)
