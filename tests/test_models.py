"""
Tests for rule and reaction data models
"""

import unittest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from mechinspect.common import ChemicalResolutionError, CurationStatus
from mechinspect.models import (
    CompositionKey,
    ObservedReaction,
    Prediction,
    ScoreRanking,
    ScoreRankingBuilder,
    ScoreVerdict,
    TransformationRule,
    ValidationOutcome,
    derive_curation_status,
)


class TestTransformationRule(unittest.TestCase):
    """Test rule records"""

    def test_from_corpus_record(self):
        rule = TransformationRule.from_dict({
            "id": 165,
            "ro": "[C:1][OH:2]>>[C:1]=[O:2]",
            "substrate_count": 1,
            "category": "perfect",
            "manual_validation": True,
        })
        self.assertEqual(rule.rule_id, 165)
        self.assertEqual(rule.template, "[C:1][OH:2]>>[C:1]=[O:2]")
        self.assertEqual(rule.substrate_arity, 1)
        self.assertEqual(rule.curation_status, CurationStatus.PERFECT)

    def test_explicit_status_wins(self):
        rule = TransformationRule.from_dict({
            "id": "R9", "template": "A>>B", "curation_status": "manually_not_verified",
        })
        self.assertEqual(rule.curation_status, CurationStatus.MANUALLY_NOT_VERIFIED)

    def test_unknown_status_rejected(self):
        with self.assertRaises(ValueError):
            TransformationRule.from_dict({"id": 1, "template": "A>>B", "curation_status": "great"})

    def test_missing_template_rejected(self):
        with self.assertRaises(ValueError):
            TransformationRule.from_dict({"id": 1})

    def test_empty_template_rejected(self):
        with self.assertRaises(ValueError):
            TransformationRule(rule_id=1, template="  ")

    def test_bad_arity_rejected(self):
        with self.assertRaises(ValueError):
            TransformationRule(rule_id=1, template="A>>B", substrate_arity=0)
        with self.assertRaises(ValueError):
            TransformationRule.from_dict({"id": 1, "template": "A>>B", "substrate_count": "2"})

    def test_to_dict_round_trip(self):
        rule = TransformationRule(rule_id=3, template="A>>B", substrate_arity=2,
                                  curation_status=CurationStatus.MANUALLY_VALIDATED, name="x")
        self.assertEqual(TransformationRule.from_dict(rule.to_dict()), rule)


class TestDeriveCurationStatus(unittest.TestCase):
    """Test category / manual_validation mapping"""

    def test_perfect_category(self):
        self.assertEqual(derive_curation_status("Perfect", False), CurationStatus.PERFECT)

    def test_manual_validation_flag(self):
        self.assertEqual(derive_curation_status("", True), CurationStatus.MANUALLY_VALIDATED)
        self.assertEqual(derive_curation_status("", False), CurationStatus.MANUALLY_INVALIDATED)
        self.assertEqual(derive_curation_status(None, None), CurationStatus.UNKNOWN)


class TestObservedReaction(unittest.TestCase):
    """Test reaction records"""

    def test_coefficients(self):
        reaction = ObservedReaction(reaction_id=1, substrates={10: 2, 11: None}, products={20: 1})
        self.assertEqual(reaction.substrate_coefficient(10), 2)
        self.assertIsNone(reaction.substrate_coefficient(11))
        self.assertIsNone(reaction.substrate_coefficient(20))
        self.assertEqual(reaction.product_coefficient(20), 1)

    def test_invalid_coefficient(self):
        with self.assertRaises(ValueError):
            ObservedReaction(reaction_id=1, substrates={10: 0})
        with self.assertRaises(ValueError):
            ObservedReaction(reaction_id=1, products={10: 1.5})

    def test_all_chemical_ids(self):
        reaction = ObservedReaction(
            reaction_id=1, substrates={10: 1}, products={20: 1, 10: 1},
            substrate_cofactors=[30], product_cofactors=[31, 30],
        )
        self.assertEqual(reaction.all_chemical_ids(), [10, 20, 30, 31])

    def test_dict_format(self):
        reaction = ObservedReaction.from_dict({
            "id": 5,
            "substrates": [{"id": 1, "coefficient": 2}, {"id": 2}],
            "products": [{"id": 3, "coefficient": 1}],
        })
        self.assertEqual(reaction.substrates, {1: 2, 2: None})
        self.assertEqual(reaction.to_dict()["products"], [{"id": 3, "coefficient": 1}])


class TestCompositionKey(unittest.TestCase):
    """Test composition key equality"""

    def test_insertion_order_irrelevant(self):
        a = CompositionKey.from_mappings({1: 1, 2: 2}, {3: None})
        b = CompositionKey.from_mappings({2: 2, 1: 1}, {3: None})
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))

    def test_coefficients_distinguish(self):
        a = CompositionKey.from_mappings({1: 1}, {3: 1})
        b = CompositionKey.from_mappings({1: 2}, {3: 1})
        self.assertNotEqual(a, b)

    def test_sides_distinguish(self):
        a = CompositionKey.from_mappings({1: 1}, {2: 1})
        b = CompositionKey.from_mappings({2: 1}, {1: 1})
        self.assertNotEqual(a, b)

    def test_mixed_id_types(self):
        key = CompositionKey.from_mappings({1: 1, "1": 1}, {})
        self.assertEqual(len(key.substrate_map()), 2)


class TestScoreRanking(unittest.TestCase):
    """Test ranking ordering and immutability"""

    def _ranking(self):
        builder = ScoreRankingBuilder()
        builder.add("R1", ScoreVerdict.match(2))
        builder.add("R2", ScoreVerdict.match(4))
        builder.add("R3", ScoreVerdict.unmatch())
        builder.add("R4", ScoreVerdict.match(2))
        return builder.build()

    def test_descending_scores(self):
        ranking = self._ranking()
        self.assertEqual(list(ranking), [4, 2])
        self.assertEqual(ranking[2], ("R1", "R4"))
        self.assertEqual(ranking.best_score(), 4)
        self.assertEqual(ranking.rule_ids(), ["R2", "R1", "R4"])

    def test_unmatched_rules_absent(self):
        ranking = self._ranking()
        self.assertNotIn(ScoreVerdict.unmatch().score, ranking)
        self.assertNotIn("R3", ranking.rule_ids())

    def test_empty_buckets_dropped(self):
        ranking = ScoreRanking({3: [], 1: ["R1"]})
        self.assertEqual(list(ranking), [1])

    def test_immutable(self):
        ranking = self._ranking()
        with self.assertRaises(TypeError):
            ranking[5] = ("R9",)
        with self.assertRaises(AttributeError):
            ranking.extra = 1

    def test_result_dict(self):
        self.assertEqual(self._ranking().to_result_dict(), {"R2": 4, "R1": 2, "R4": 2})

    def test_empty(self):
        ranking = ScoreRankingBuilder().build()
        self.assertTrue(ranking.is_empty)
        self.assertIsNone(ranking.best_score())

    def test_dict_round_trip(self):
        ranking = self._ranking()
        self.assertEqual(dict(ScoreRanking.from_dict(ranking.to_dict())), dict(ranking))

    def test_equal_to_list_buckets(self):
        builder = ScoreRankingBuilder()
        builder.add("R7", ScoreVerdict.match(4))
        ranking = builder.build()
        self.assertEqual(ranking, {4: ["R7"]})
        self.assertEqual(ranking, {4: ("R7",)})
        self.assertEqual(ranking, ScoreRanking({4: ["R7"]}))
        self.assertNotEqual(ranking, {4: ["R7", "R8"]})
        self.assertNotEqual(ranking, {3: ["R7"]})
        self.assertNotEqual(ranking, {4: 7})
        self.assertNotEqual(ranking, ["R7"])


class TestValidationOutcome(unittest.TestCase):
    """Test failure vs empty result"""

    def test_failure_distinct_from_empty(self):
        empty = ValidationOutcome(reaction_id=1, ranking=ScoreRanking())
        failed = ValidationOutcome(reaction_id=2, error=ChemicalResolutionError("missing"))
        self.assertTrue(empty.succeeded)
        self.assertFalse(empty.matched)
        self.assertFalse(failed.succeeded)
        self.assertEqual(failed.to_dict()["error"]["code"], "CHEMICAL_UNRESOLVED")
        self.assertEqual(empty.to_dict()["result"], {})


class TestPrediction(unittest.TestCase):
    """Test prediction records"""

    def test_dict_format(self):
        prediction = Prediction(prediction_id=0, rule_id=101,
                                substrate_identifiers=["a"], product_identifiers=["b", "c"])
        d = prediction.to_dict()
        self.assertEqual(d, {"id": 0, "rule_id": 101, "substrates": ["a"], "products": ["b", "c"]})
        self.assertEqual(Prediction.from_dict(d), prediction)


if __name__ == "__main__":
    unittest.main()
